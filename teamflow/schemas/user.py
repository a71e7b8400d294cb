from datetime import datetime
from typing import Optional
from pydantic import ConfigDict, EmailStr
from teamflow.schemas.common import CamelModel


class UserResponse(CamelModel):
    """Public profile projection of a user. Never carries the password hash."""
    id: str
    email: EmailStr
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    is_email_verified: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
