import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from teamflow.core.config import (
    DEFAULT_JWT_REFRESH_SECRET,
    DEFAULT_JWT_SECRET,
    Settings,
)
from teamflow.core.exceptions import ApiError
from teamflow.utils.clock import utcnow

DEFAULT_EXPIRY_SECONDS = 900

_EXPIRY_RE = re.compile(r"^(\d+)([smhd])$")
_UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}


def parse_expiry(expiry: str) -> int:
    """
    Convert a duration string such as "15m" or "7d" into seconds.

    Unrecognised formats fall back to 15 minutes instead of failing.
    """
    match = _EXPIRY_RE.match(expiry or "")
    if not match:
        return DEFAULT_EXPIRY_SECONDS
    value, unit = match.groups()
    return int(value) * _UNIT_SECONDS[unit]


@dataclass(frozen=True)
class AccessTokenPayload:
    user_id: str
    email: str


@dataclass(frozen=True)
class RefreshTokenPayload:
    user_id: str
    token_id: str


class TokenService:
    """
    Issues and verifies JWTs.

    Access tokens are short-lived and carry the user id and email.
    Refresh tokens are long-lived, signed with a separate secret, and carry
    the id of the ledger row that tracks them so they can be revoked.
    """

    def __init__(self, settings: Settings):
        self.access_secret = settings.JWT_SECRET
        self.refresh_secret = settings.JWT_REFRESH_SECRET
        self.algorithm = settings.JWT_ALGORITHM
        self._access_expiry = parse_expiry(settings.JWT_EXPIRES_IN)
        self._refresh_expiry = parse_expiry(settings.JWT_REFRESH_EXPIRES_IN)

        if settings.is_production and (
            self.access_secret == DEFAULT_JWT_SECRET
            or self.refresh_secret == DEFAULT_JWT_REFRESH_SECRET
        ):
            raise RuntimeError("JWT secrets must be set in production!")

    def access_token_expiry(self) -> int:
        return self._access_expiry

    def refresh_token_expiry(self) -> int:
        return self._refresh_expiry

    def _encode(self, claims: dict, secret: str, expires_in: int) -> str:
        now = utcnow()
        to_encode = dict(claims)
        to_encode.update({
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
        })
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    def _decode(self, token: str, secret: str, kind: str) -> dict:
        try:
            return jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ApiError.unauthorized(f"{kind} token expired")
        except JWTError:
            raise ApiError.unauthorized(f"Invalid {kind.lower()} token")

    def issue_access_token(self, user_id: str, email: str) -> str:
        return self._encode(
            {"user_id": user_id, "email": email},
            self.access_secret,
            self._access_expiry,
        )

    def issue_refresh_token(self, user_id: str, token_id: str) -> str:
        return self._encode(
            {"user_id": user_id, "token_id": token_id},
            self.refresh_secret,
            self._refresh_expiry,
        )

    def verify_access_token(self, token: str) -> AccessTokenPayload:
        payload = self._decode(token, self.access_secret, "Access")
        user_id = payload.get("user_id")
        email = payload.get("email")
        if not user_id or not email:
            raise ApiError.unauthorized("Invalid access token")
        return AccessTokenPayload(user_id=user_id, email=email)

    def verify_refresh_token(self, token: str) -> RefreshTokenPayload:
        payload = self._decode(token, self.refresh_secret, "Refresh")
        user_id = payload.get("user_id")
        token_id = payload.get("token_id")
        if not user_id or not token_id:
            raise ApiError.unauthorized("Invalid refresh token")
        return RefreshTokenPayload(user_id=user_id, token_id=token_id)

    def read_expired_refresh_token(self, token: str) -> Optional[RefreshTokenPayload]:
        """
        Read the claims of a refresh token whose only defect is its age.

        The signature is still checked. Used to find the ledger row of a
        naturally expired token so it can be removed.

        Returns:
            Payload, or None if the token is not a genuine refresh token
        """
        try:
            payload = jwt.decode(
                token,
                self.refresh_secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return None
        user_id = payload.get("user_id")
        token_id = payload.get("token_id")
        if not user_id or not token_id:
            return None
        return RefreshTokenPayload(user_id=user_id, token_id=token_id)
