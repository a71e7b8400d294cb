import hashlib
import re
import secrets
from dataclasses import dataclass, field
from typing import List

import bcrypt

BCRYPT_ROUNDS = 10
BCRYPT_MAX_BYTES = 72
RESET_TOKEN_BYTES = 32

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
_SPECIAL_RE = re.compile("[" + re.escape(PASSWORD_SPECIAL_CHARACTERS) + "]")


@dataclass(frozen=True)
class PasswordStrength:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Malformed hash or input over the bcrypt length limit
        return False


def generate_reset_token() -> str:
    """Generate a raw password reset token (256 bits, hex encoded)."""
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_reset_token(token: str) -> str:
    """
    Digest a raw reset token for storage and lookup.

    The raw token is the bearer secret sent to the user; only this
    SHA-256 digest is ever persisted.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def validate_password_strength(password: str) -> PasswordStrength:
    """
    Check a new password against the password policy.

    The same policy applies wherever a password is set: registration,
    change-password and reset-password.

    Returns:
        PasswordStrength with every violated rule listed in ``errors``
    """
    errors: List[str] = []

    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")

    if len(password.encode('utf-8')) > BCRYPT_MAX_BYTES:
        errors.append(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")

    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")

    if not _SPECIAL_RE.search(password):
        errors.append("Password must contain at least one special character")

    return PasswordStrength(is_valid=not errors, errors=errors)
