import uuid
from datetime import timedelta
from sqlalchemy.orm import Session

from teamflow.core.config import Settings
from teamflow.core.exceptions import ApiError
from teamflow.core.logging_config import logger
from teamflow.core.security import (
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    validate_password_strength,
    verify_password,
)
from teamflow.core.tokens import TokenService
from teamflow.crud.password_reset import password_reset as reset_crud
from teamflow.crud.refresh_token import refresh_token as refresh_crud
from teamflow.crud.user import user as user_crud
from teamflow.schemas.auth import (
    AuthResult,
    MessageResponse,
    PasswordResetRequested,
    ProfileResponse,
    TokenPair,
)
from teamflow.schemas.user import UserResponse
from teamflow.utils.clock import is_expired, utcnow

INVALID_CREDENTIALS = "Invalid email or password."
INVALID_REFRESH_TOKEN = "Invalid refresh token"
EXPIRED_REFRESH_TOKEN = "Refresh token expired"
INVALID_RESET_TOKEN = "Invalid or expired reset token"
RESET_REQUESTED = "If this email exists, a reset link has been sent."


class AuthService:
    """
    Authentication business operations.

    Composes the credential helpers, the token service and the refresh
    token / password reset ledgers. Every operation that sets a password
    applies the same strength policy, and every operation that changes a
    password revokes all refresh tokens of the user.
    """

    def __init__(self, token_service: TokenService, settings: Settings):
        self.tokens = token_service
        self.reset_token_ttl = timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
        self._dummy_hash = get_password_hash(generate_reset_token())

    def _generate_tokens(self, db: Session, user_id: str, email: str, commit: bool = True) -> TokenPair:
        """
        Issue an access/refresh pair and record the refresh token in the ledger.

        Shared by register, login and refresh so all three issue tokens the
        same way.
        """
        token_id = str(uuid.uuid4())
        access_token = self.tokens.issue_access_token(user_id, email)
        refresh_token = self.tokens.issue_refresh_token(user_id, token_id)
        expires_at = utcnow() + timedelta(seconds=self.tokens.refresh_token_expiry())

        refresh_crud.create(
            db,
            token_id=token_id,
            user_id=user_id,
            token=refresh_token,
            expires_at=expires_at,
            commit=commit,
        )

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.tokens.access_token_expiry(),
        )

    @staticmethod
    def _enforce_password_policy(password: str) -> None:
        strength = validate_password_strength(password)
        if not strength.is_valid:
            raise ApiError.bad_request(
                "Password does not meet requirements",
                errors=[{"field": "password", "message": error} for error in strength.errors],
            )

    def register(
        self,
        db: Session,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str
    ) -> AuthResult:
        """
        Register a new user and sign them in.

        Raises:
            ApiError 409: If the email is already registered
            ApiError 400: If the password violates the policy
        """
        email = email.strip().lower()
        logger.info(f"Registering new user: email={email}")

        if user_crud.get_by_email(db, email=email):
            raise ApiError.conflict("User with this email already exists.")

        self._enforce_password_policy(password)

        db_user = user_crud.create(
            db,
            email=email,
            hashed_password=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            commit=False,
        )
        tokens = self._generate_tokens(db, db_user.id, db_user.email, commit=False)
        db.commit()
        db.refresh(db_user)

        logger.info(f"User registered successfully: user_id={db_user.id}")
        return AuthResult(user=UserResponse.model_validate(db_user), tokens=tokens)

    def login(self, db: Session, *, email: str, password: str) -> AuthResult:
        """
        Authenticate with email and password.

        Unknown email and wrong password fail with the same message, and an
        unknown email still pays for one bcrypt check, so neither the
        response nor its timing reveals which accounts exist.

        Raises:
            ApiError 401: If the credentials are invalid
        """
        logger.info("User login attempt")

        db_user = user_crud.get_by_email(db, email=email)
        if not db_user:
            # Same bcrypt cost as a real check
            verify_password(password, self._dummy_hash)
            raise ApiError.unauthorized(INVALID_CREDENTIALS)
        if not verify_password(password, db_user.hashed_password):
            raise ApiError.unauthorized(INVALID_CREDENTIALS)

        user_crud.set_last_login(db, db_user, utcnow(), commit=False)
        tokens = self._generate_tokens(db, db_user.id, db_user.email, commit=False)
        db.commit()
        db.refresh(db_user)

        logger.info(f"User logged in successfully: user_id={db_user.id}")
        return AuthResult(user=UserResponse.model_validate(db_user), tokens=tokens)

    def refresh(self, db: Session, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new token pair.

        The presented token is consumed: its ledger row is deleted in the
        same transaction that records the replacement, and a concurrent
        second use finds no row to delete and fails. A token rejected for
        age has its ledger row removed.

        Raises:
            ApiError 401: If the token is invalid, unknown, expired or already used
        """
        logger.info("Refreshing access token")

        try:
            payload = self.tokens.verify_refresh_token(refresh_token)
        except ApiError as e:
            if e.message == EXPIRED_REFRESH_TOKEN:
                self._discard_expired_refresh_token(db, refresh_token)
            raise

        stored = refresh_crud.get_by_token(db, refresh_token)
        if not stored or stored.id != payload.token_id or stored.user_id != payload.user_id:
            raise ApiError.unauthorized(INVALID_REFRESH_TOKEN)

        if is_expired(stored.expires_at):
            refresh_crud.delete_by_id(db, stored.id)
            raise ApiError.unauthorized(EXPIRED_REFRESH_TOKEN)

        user_id = stored.user.id
        email = stored.user.email

        claimed = refresh_crud.delete_by_id(db, stored.id, commit=False)
        if claimed != 1:
            db.rollback()
            raise ApiError.unauthorized(INVALID_REFRESH_TOKEN)

        tokens = self._generate_tokens(db, user_id, email, commit=False)
        db.commit()

        logger.info(f"Tokens refreshed successfully: user_id={user_id}")
        return tokens

    def _discard_expired_refresh_token(self, db: Session, refresh_token: str) -> None:
        payload = self.tokens.read_expired_refresh_token(refresh_token)
        if payload is None:
            return
        revoked = refresh_crud.delete_for_user(db, payload.user_id, token=refresh_token)
        if revoked:
            logger.info(f"Removed expired refresh token: user_id={payload.user_id}")

    def logout(self, db: Session, user_id: str, refresh_token: str | None = None) -> None:
        """
        Revoke refresh tokens.

        With a token, only that session ends; without one, every session of
        the user ends. Revoking an unknown token is not an error.
        """
        logger.info(f"User logout: user_id={user_id}, all_devices={refresh_token is None}")
        revoked = refresh_crud.delete_for_user(db, user_id, token=refresh_token)
        logger.info(f"User logged out successfully: user_id={user_id}, revoked={revoked}")

    def get_profile(self, db: Session, user_id: str) -> ProfileResponse:
        db_user = user_crud.get(db, user_id)
        if not db_user:
            raise ApiError.not_found("User not found.")
        return ProfileResponse(user=UserResponse.model_validate(db_user))

    def change_password(
        self,
        db: Session,
        user_id: str,
        *,
        current_password: str,
        new_password: str
    ) -> MessageResponse:
        """
        Change the password of a signed-in user and sign out every session.

        Raises:
            ApiError 404: If the user no longer exists
            ApiError 401: If the current password is wrong
            ApiError 400: If the new password violates the policy
        """
        logger.info(f"Changing password: user_id={user_id}")

        db_user = user_crud.get(db, user_id)
        if not db_user:
            raise ApiError.not_found("User not found.")

        if not verify_password(current_password, db_user.hashed_password):
            raise ApiError.unauthorized("Current password is incorrect")

        self._enforce_password_policy(new_password)

        user_crud.set_password(db, db_user, get_password_hash(new_password), commit=False)
        refresh_crud.delete_for_user(db, user_id, commit=False)
        db.commit()

        logger.info(f"Password changed successfully: user_id={user_id}")
        return MessageResponse(message="Password changed successfully")

    def request_password_reset(self, db: Session, email: str) -> PasswordResetRequested:
        """
        Start a password reset.

        The message is the same whether or not the email is registered. For
        a known user any earlier reset token is dropped, so at most one is
        live, and the raw token is returned for delivery. Only its digest is
        stored.
        """
        logger.info("Password reset requested")

        db_user = user_crud.get_by_email(db, email=email)
        if not db_user:
            return PasswordResetRequested(message=RESET_REQUESTED)

        raw_token = generate_reset_token()

        reset_crud.delete_for_user(db, db_user.id, commit=False)
        reset_crud.create(
            db,
            user_id=db_user.id,
            token_hash=hash_reset_token(raw_token),
            expires_at=utcnow() + self.reset_token_ttl,
            commit=False,
        )
        db.commit()

        logger.info(f"Password reset token generated: user_id={db_user.id}")
        return PasswordResetRequested(message=RESET_REQUESTED, reset_token=raw_token)

    def reset_password(self, db: Session, *, token: str, new_password: str) -> MessageResponse:
        """
        Complete a password reset with a raw reset token.

        Missing, used and expired tokens all fail with the same message. The
        token is claimed with a conditional update before the password
        changes, so it authorizes at most one reset.

        Raises:
            ApiError 400: If the token cannot be used or the password violates the policy
        """
        logger.info("Password reset attempt")

        reset_token = reset_crud.get_by_hash(db, hash_reset_token(token))
        if not reset_token or reset_token.used or is_expired(reset_token.expires_at):
            raise ApiError.bad_request(INVALID_RESET_TOKEN)

        self._enforce_password_policy(new_password)

        # Concurrent redemptions race on this update; only one claims the row
        claimed = reset_crud.claim(db, reset_token, utcnow(), commit=False)
        if claimed != 1:
            db.rollback()
            raise ApiError.bad_request(INVALID_RESET_TOKEN)

        db_user = reset_token.user
        user_crud.set_password(db, db_user, get_password_hash(new_password), commit=False)
        refresh_crud.delete_for_user(db, db_user.id, commit=False)
        db.commit()

        logger.info(f"Password reset successfully: user_id={db_user.id}")
        return MessageResponse(message="Password reset successfully. Please log in with your new password.")
