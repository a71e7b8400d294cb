from .organization import Organization
from .organization_member import OrganizationMember
from .password_reset_token import PasswordResetToken
from .refresh_token import RefreshToken
from .user import User
