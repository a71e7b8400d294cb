from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Placeholder secrets shipped in .env.example; refused in production.
DEFAULT_JWT_SECRET = "your-secret-key"
DEFAULT_JWT_REFRESH_SECRET = "your-refresh-secret"


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # "development", "test" or "production"
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_REFRESH_SECRET: str = DEFAULT_JWT_REFRESH_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: str = "15m"
    JWT_REFRESH_EXPIRES_IN: str = "7d"

    PASSWORD_RESET_EXPIRE_MINUTES: int = 15

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    REDIS_URL: Optional[str] = "redis://localhost:6379/0"
    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT_MAX: int = 10
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
