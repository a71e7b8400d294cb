from typing import Optional
import redis
from fastapi import Request
from teamflow.core.config import Settings
from teamflow.core.exceptions import ApiError
from teamflow.core.logging_config import logger

RATE_LIMIT_MESSAGE = "Too many attempts, please try again after 15 minutes"


class RateLimiter:
    """
    Fixed-window request counter stored in Redis.

    The first hit in a window creates the key with a TTL, every hit
    increments it. When Redis cannot be reached requests are allowed and the
    failure is logged.
    """

    def __init__(self, settings: Settings, client: Optional[redis.Redis] = None):
        self.enabled = settings.RATE_LIMIT_ENABLED
        self.max_attempts = settings.AUTH_RATE_LIMIT_MAX
        self.window_seconds = settings.AUTH_RATE_LIMIT_WINDOW_SECONDS
        self.client = client

        if self.enabled and self.client is None and settings.REDIS_URL:
            try:
                self.client = redis.from_url(settings.REDIS_URL)
                logger.info("RateLimiter initialized with Redis backend")
            except Exception as e:
                logger.error(f"Failed to connect to Redis: {e}")
                self.client = None

    def hit(self, key: str) -> bool:
        """
        Count one attempt for key.

        Returns:
            True if the attempt is within the limit
        """
        if not self.enabled or self.client is None:
            return True

        redis_key = f"rate:{key}"
        try:
            pipe = self.client.pipeline()
            # Starts the window only when the key does not exist yet
            pipe.set(redis_key, 0, ex=self.window_seconds, nx=True)
            pipe.incr(redis_key)
            _, count = pipe.execute()
        except redis.RedisError as e:
            logger.error(f"Rate limit check failed, allowing request: {e}")
            return True

        return int(count) <= self.max_attempts


def auth_rate_limit(request: Request) -> None:
    """FastAPI dependency limiting attempts on credential endpoints per client and route."""
    limiter: RateLimiter = request.app.state.rate_limiter
    client_host = request.client.host if request.client else "unknown"
    if not limiter.hit(f"auth:{client_host}:{request.url.path}"):
        logger.warning(f"Rate limit exceeded: client={client_host}, path={request.url.path}")
        raise ApiError.too_many_requests(RATE_LIMIT_MESSAGE)
