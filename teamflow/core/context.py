from dataclasses import dataclass

from teamflow.models.organization_member import MemberRole


@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved from a verified access token."""
    user_id: str
    email: str


@dataclass(frozen=True)
class TenantContext:
    """Caller identity plus the organization and role it acts under for one request."""
    user_id: str
    organization_id: str
    role: MemberRole
