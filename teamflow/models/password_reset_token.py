import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from teamflow.database import Base, TimestampMixin


class PasswordResetToken(Base, TimestampMixin):
    """
    One-time password reset grant.

    Only the SHA-256 digest of the raw token is stored. Rows are marked
    ``used`` instead of deleted once consumed.
    """
    __tablename__ = "password_reset_token"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="password_reset_tokens")
