from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from teamflow.database import get_db
from teamflow.core.config import Settings
from teamflow.core.context import CurrentUser
from teamflow.core.rate_limit import auth_rate_limit
from teamflow.dependencies import get_auth_service, get_current_user, get_settings
from teamflow.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    ProfileResponse,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenPair,
)
from teamflow.schemas.common import ApiResponse
from teamflow.services.auth import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user.

    Returns the created user (without password) and a fresh token pair.
    """
    result = auth_service.register(
        db,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password=data.password,
    )
    return ApiResponse(message="Registration successful.", data=result)


@router.post("/login", response_model=ApiResponse[AuthResult], dependencies=[Depends(auth_rate_limit)])
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Authenticate with email and password."""
    result = auth_service.login(db, email=credentials.email, password=credentials.password)
    return ApiResponse(message="Login successful.", data=result)


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
def refresh_token(
    data: RefreshTokenRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Exchange a refresh token for a new token pair. The presented token stops working."""
    tokens = auth_service.refresh(db, data.refresh_token)
    return ApiResponse(message="Token refreshed successfully.", data=tokens)


@router.post("/logout", response_model=ApiResponse)
def logout(
    data: LogoutRequest | None = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Log out.

    With a refreshToken in the body only that session ends; without one,
    all sessions of the user end.
    """
    auth_service.logout(db, current_user.user_id, data.refresh_token if data else None)
    return ApiResponse(message="Logout successful.")


@router.get("/me", response_model=ApiResponse[ProfileResponse])
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Return the caller's profile."""
    return ApiResponse(data=auth_service.get_profile(db, current_user.user_id))


@router.post("/change-password", response_model=ApiResponse[MessageResponse])
def change_password(
    data: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Change the caller's password. All refresh tokens are revoked."""
    result = auth_service.change_password(
        db,
        current_user.user_id,
        current_password=data.current_password,
        new_password=data.new_password,
    )
    return ApiResponse(message="Password changed successfully.", data=result)


@router.post(
    "/forgot-password",
    response_model=ApiResponse[ForgotPasswordResponse],
    response_model_exclude_none=True,
    dependencies=[Depends(auth_rate_limit)],
)
def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
    app_settings: Settings = Depends(get_settings)
):
    """
    Request a password reset.

    The response is identical for known and unknown emails. Outside
    production it also carries devOnly_resetToken for known emails.
    """
    result = auth_service.request_password_reset(db, data.email)
    reset_token = None if app_settings.is_production else result.reset_token
    body = ForgotPasswordResponse(message=result.message, dev_only_reset_token=reset_token)
    return ApiResponse(message="Password reset request processed.", data=body)


@router.post(
    "/reset-password",
    response_model=ApiResponse[MessageResponse],
    dependencies=[Depends(auth_rate_limit)],
)
def reset_password(
    data: ResetPasswordRequest,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Set a new password using a reset token. All refresh tokens are revoked."""
    result = auth_service.reset_password(db, token=data.token, new_password=data.new_password)
    return ApiResponse(message="Password reset successful.", data=result)
