from typing import Optional
from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from teamflow.database import get_db
from teamflow.core.config import Settings, settings
from teamflow.core.exceptions import ApiError
from teamflow.core.logging_config import logger
from teamflow.core.rate_limit import RateLimiter
from teamflow.core.tokens import TokenService
from teamflow.routers import auth, member, organization
from teamflow.schemas.common import ErrorResponse
from teamflow.services import AuthService, MemberService, OrganizationService, TenantGuard

# Schema is managed by Alembic; see alembic/versions


def _error_body(message: str, errors: Optional[list] = None) -> dict:
    return ErrorResponse(message=message, errors=errors or None).model_dump(exclude_none=True)


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        errors = exc.errors if isinstance(exc, ApiError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail), errors),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": _field_name(error.get("loc", ())),
                "message": str(error.get("msg", "")).removeprefix("Value error, "),
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Validation failed", errors),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body("Resource already exists"),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        message = "Internal Server Error" if app_settings.is_production else f"{type(exc).__name__}: {exc}"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(message),
        )


def create_app(app_settings: Settings = settings) -> FastAPI:
    """
    Build the API application.

    Services are constructed once here and shared by every request through
    FastAPI dependencies (see teamflow.dependencies).
    """
    app = FastAPI(
        title="TeamFlow API",
        version="1.0.0",
        redirect_slashes=False  # Disable automatic redirects to prevent POST data loss
    )

    token_service = TokenService(app_settings)
    tenant_guard = TenantGuard()
    app.state.settings = app_settings
    app.state.token_service = token_service
    app.state.tenant_guard = tenant_guard
    app.state.auth_service = AuthService(token_service, app_settings)
    app.state.organization_service = OrganizationService(tenant_guard)
    app.state.member_service = MemberService()
    app.state.rate_limiter = RateLimiter(app_settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, app_settings)

    # Include routers
    prefix = app_settings.API_PREFIX
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Authentication"])
    app.include_router(organization.router, prefix=f"{prefix}/organizations", tags=["Organizations"])
    app.include_router(member.router, prefix=f"{prefix}/members", tags=["Members"])

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
            return {
                "status": "healthy",
                "database": "connected"
            }
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            raise ApiError(status.HTTP_503_SERVICE_UNAVAILABLE, "Service unhealthy")

    logger.info(f"TeamFlow API configured: environment={app_settings.ENVIRONMENT}")
    return app


app = create_app()
