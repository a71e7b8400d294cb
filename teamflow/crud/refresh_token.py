from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, delete, func
from teamflow.models.refresh_token import RefreshToken


class CRUDRefreshToken:
    """
    Ledger of active refresh tokens.

    A row exists for every refresh token that can still be exchanged.
    Revocation deletes rows; nothing is ever updated in place.
    """

    def __init__(self):
        self.model = RefreshToken

    def create(
        self,
        db: Session,
        *,
        token_id: str,
        user_id: str,
        token: str,
        expires_at: datetime,
        commit: bool = True
    ) -> RefreshToken:
        db_token = RefreshToken(
            id=token_id,
            user_id=user_id,
            token=token,
            expires_at=expires_at,
        )
        db.add(db_token)
        if commit:
            db.commit()
            db.refresh(db_token)
        else:
            db.flush()
        return db_token

    def get_by_token(self, db: Session, token: str) -> Optional[RefreshToken]:
        """Look up a ledger row by the raw refresh token string."""
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def delete_by_id(self, db: Session, token_id: str, commit: bool = True) -> int:
        """
        Delete one ledger row.

        Returns:
            Number of rows deleted. 0 means another request already
            consumed or revoked the token.
        """
        result = db.execute(delete(RefreshToken).where(RefreshToken.id == token_id))
        if commit:
            db.commit()
        return result.rowcount

    def delete_for_user(
        self,
        db: Session,
        user_id: str,
        token: Optional[str] = None,
        commit: bool = True
    ) -> int:
        """
        Revoke refresh tokens of a user.

        Args:
            db: Database session
            user_id: Owner of the tokens
            token: Revoke only this token if given, otherwise all of them
            commit: Whether to commit immediately

        Returns:
            Number of rows deleted
        """
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id)
        if token is not None:
            stmt = stmt.where(RefreshToken.token == token)
        result = db.execute(stmt)
        if commit:
            db.commit()
        return result.rowcount

    def count_for_user(self, db: Session, user_id: str) -> int:
        stmt = select(func.count()).select_from(RefreshToken).where(RefreshToken.user_id == user_id)
        return db.execute(stmt).scalar_one()


# Create singleton instance
refresh_token = CRUDRefreshToken()
