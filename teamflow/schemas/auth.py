from typing import Annotated, Optional
from pydantic import AfterValidator, EmailStr, Field
from teamflow.core.security import validate_password_strength
from teamflow.schemas.common import CamelModel
from teamflow.schemas.user import UserResponse


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_password_policy(value: str) -> str:
    strength = validate_password_strength(value)
    if not strength.is_valid:
        raise ValueError("; ".join(strength.errors))
    return value


NormalizedEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]
StrongPassword = Annotated[str, AfterValidator(_check_password_policy)]


class RegisterRequest(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: NormalizedEmail
    password: StrongPassword


class LoginRequest(CamelModel):
    email: NormalizedEmail
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: StrongPassword


class ForgotPasswordRequest(CamelModel):
    email: NormalizedEmail


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: StrongPassword


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int


class AuthResult(CamelModel):
    user: UserResponse
    tokens: TokenPair


class ProfileResponse(CamelModel):
    user: UserResponse


class MessageResponse(CamelModel):
    message: str


class PasswordResetRequested(CamelModel):
    """Outcome of a forgot-password request. reset_token is None for unknown emails."""
    message: str
    reset_token: Optional[str] = None


class ForgotPasswordResponse(CamelModel):
    message: str
    # Only populated outside production; the raw token otherwise goes to email delivery
    dev_only_reset_token: Optional[str] = Field(default=None, alias="devOnly_resetToken")
