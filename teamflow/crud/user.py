from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from teamflow.models.user import User


class CRUDUser:
    """
    CRUD operations for User model.

    Users are global: they are not tenant scoped and can belong to
    several organizations.
    """

    def __init__(self):
        self.model = User

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        """
        Retrieve user by email address (case-insensitive).

        Args:
            db: Database session
            email: User email

        Returns:
            User instance or None if not found
        """
        stmt = select(User).where(User.email == email.strip().lower())
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def get(self, db: Session, user_id: str) -> Optional[User]:
        """
        Retrieve user by ID.

        Returns:
            User instance or None if not found
        """
        stmt = select(User).where(User.id == user_id)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def create(
        self,
        db: Session,
        *,
        email: str,
        hashed_password: str,
        first_name: str,
        last_name: str,
        commit: bool = True
    ) -> User:
        """
        Create a new user.

        Args:
            db: Database session
            email: User email (normalised to lowercase)
            hashed_password: bcrypt hash of the password
            first_name: First name
            last_name: Last name
            commit: Whether to commit immediately

        Returns:
            Created User instance
        """
        db_user = User(
            email=email.strip().lower(),
            hashed_password=hashed_password,
            first_name=first_name,
            last_name=last_name,
            is_email_verified=False,
        )
        db.add(db_user)

        if commit:
            db.commit()
            db.refresh(db_user)
        else:
            db.flush()  # Get ID without committing

        return db_user

    def set_last_login(self, db: Session, db_user: User, when: datetime, commit: bool = True) -> User:
        db_user.last_login_at = when
        db.add(db_user)
        if commit:
            db.commit()
            db.refresh(db_user)
        return db_user

    def set_password(self, db: Session, db_user: User, hashed_password: str, commit: bool = True) -> User:
        db_user.hashed_password = hashed_password
        db.add(db_user)
        if commit:
            db.commit()
            db.refresh(db_user)
        return db_user


# Create singleton instance
user = CRUDUser()
