from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from teamflow.database import Base, TimestampMixin


class RefreshToken(Base, TimestampMixin):
    """
    One active session grant.

    The primary key is the ``token_id`` claim embedded in the signed refresh
    token, so a row can be revoked by id without decoding every token.
    """
    __tablename__ = "refresh_token"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String, unique=True, index=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="refresh_tokens")
