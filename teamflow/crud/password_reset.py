from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, delete, update
from teamflow.models.password_reset_token import PasswordResetToken


class CRUDPasswordResetToken:
    """CRUD operations for one-time password reset tokens."""

    def __init__(self):
        self.model = PasswordResetToken

    def create(
        self,
        db: Session,
        *,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        commit: bool = True
    ) -> PasswordResetToken:
        db_token = PasswordResetToken(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            used=False,
        )
        db.add(db_token)
        if commit:
            db.commit()
            db.refresh(db_token)
        else:
            db.flush()
        return db_token

    def get_by_hash(self, db: Session, token_hash: str) -> Optional[PasswordResetToken]:
        stmt = select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def claim(self, db: Session, db_token: PasswordResetToken, now: datetime, commit: bool = True) -> int:
        """
        Mark a reset token used if it is still unused and unexpired.

        The row is kept rather than deleted as an audit trail.

        Returns:
            Number of rows claimed. 0 means another request already
            redeemed the token or it expired in the meantime.
        """
        stmt = (
            update(PasswordResetToken)
            .where(
                PasswordResetToken.id == db_token.id,
                PasswordResetToken.used.is_(False),
                PasswordResetToken.expires_at > now,
            )
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        if commit:
            db.commit()
        return result.rowcount

    def delete_for_user(self, db: Session, user_id: str, commit: bool = True) -> int:
        result = db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user_id))
        if commit:
            db.commit()
        return result.rowcount

    def list_for_user(self, db: Session, user_id: str) -> list[PasswordResetToken]:
        stmt = select(PasswordResetToken).where(PasswordResetToken.user_id == user_id)
        return list(db.execute(stmt).scalars().all())


# Create singleton instance
password_reset = CRUDPasswordResetToken()
