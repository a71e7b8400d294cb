from typing import Iterable
from sqlalchemy.orm import Session

from teamflow.core.exceptions import ApiError
from teamflow.core.logging_config import logger
from teamflow.crud.organization_member import organization_member as member_crud
from teamflow.models.organization_member import MemberRole, OrganizationMember

NO_ACCESS = "You do not have access to this organization"


class TenantGuard:
    """
    Membership and role checks for organization-scoped operations.

    Every read or write on organization data goes through
    verify_active_member (directly or via verify_role) before touching
    the data.
    """

    def verify_active_member(self, db: Session, user_id: str, organization_id: str) -> OrganizationMember:
        """
        Resolve the caller's ACTIVE membership in an organization.

        Raises:
            ApiError 403: If the user is not an active member
        """
        member = member_crud.get_active(db, user_id=user_id, organization_id=organization_id)
        if not member:
            logger.info(f"Membership check failed: user_id={user_id}, organization_id={organization_id}")
            raise ApiError.forbidden(NO_ACCESS)
        return member

    def verify_role(
        self,
        db: Session,
        user_id: str,
        organization_id: str,
        allowed_roles: Iterable[MemberRole]
    ) -> OrganizationMember:
        """
        Resolve the caller's membership and require one of the allowed roles.

        Raises:
            ApiError 403: If the user is not an active member or has another role
        """
        allowed = [MemberRole(role) for role in allowed_roles]
        member = self.verify_active_member(db, user_id, organization_id)
        if member.role not in allowed:
            required = " or ".join(role.value for role in allowed)
            raise ApiError.forbidden(f"Required role: {required} (your role: {member.role.value})")
        return member
