from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from teamflow.crud.base import CRUDTenantScoped
from teamflow.models.organization_member import OrganizationMember, MemberRole, MemberStatus


class CRUDOrganizationMember(CRUDTenantScoped[OrganizationMember]):
    """CRUD operations for organization memberships."""

    def get_active(self, db: Session, *, user_id: str, organization_id: str) -> Optional[OrganizationMember]:
        """
        Retrieve the ACTIVE membership of a user in an organization.

        Returns:
            OrganizationMember or None if the user is not an active member
        """
        stmt = select(OrganizationMember).where(
            OrganizationMember.user_id == user_id,
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.status == MemberStatus.ACTIVE,
        )
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def create(
        self,
        db: Session,
        *,
        organization_id: str,
        user_id: str,
        role: MemberRole,
        status: MemberStatus,
        joined_at: Optional[datetime] = None,
        commit: bool = True
    ) -> OrganizationMember:
        member = OrganizationMember(
            organization_id=organization_id,
            user_id=user_id,
            role=role,
            status=status,
            joined_at=joined_at,
        )
        db.add(member)
        if commit:
            db.commit()
            db.refresh(member)
        else:
            db.flush()
        return member


# Create singleton instance
organization_member = CRUDOrganizationMember(OrganizationMember)
