from teamflow.services.auth import AuthService
from teamflow.services.member import MemberService
from teamflow.services.organization import OrganizationService
from teamflow.services.tenant_guard import TenantGuard

__all__ = ["AuthService", "MemberService", "OrganizationService", "TenantGuard"]
