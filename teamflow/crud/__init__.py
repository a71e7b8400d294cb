from teamflow.crud.base import CRUDTenantScoped
from .organization import organization
from .organization_member import organization_member
from .password_reset import password_reset
from .refresh_token import refresh_token
from .user import user

__all__ = [
    "CRUDTenantScoped",
    "organization",
    "organization_member",
    "password_reset",
    "refresh_token",
    "user",
]
