from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from teamflow.core.tenant_scope import CROSS_TENANT_OPTION
from teamflow.crud.organization_member import organization_member as member_crud
from teamflow.models.organization import Organization, OrganizationPlan, OrganizationStatus
from teamflow.models.organization_member import OrganizationMember, MemberRole, MemberStatus
from teamflow.utils.clock import utcnow


class CRUDOrganization:
    """
    CRUD operations for Organization model.

    Organization is the tenant itself, so it does not inherit from
    CRUDTenantScoped.
    """

    def __init__(self):
        self.model = Organization

    def get(self, db: Session, organization_id: str) -> Optional[Organization]:
        stmt = select(Organization).where(Organization.id == organization_id)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def get_by_slug(self, db: Session, slug: str) -> Optional[Organization]:
        stmt = select(Organization).where(Organization.slug == slug)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def create_with_owner(
        self,
        db: Session,
        *,
        owner_id: str,
        name: str,
        slug: str,
        logo: Optional[str] = None
    ) -> Organization:
        """
        Create an organization and its OWNER membership atomically.

        Either both rows are committed or neither is: an organization
        without an owner membership would be unreachable by its creator.

        Args:
            db: Database session
            owner_id: ID of the creating user
            name: Organization name
            slug: Unique, immutable slug
            logo: Optional logo URL

        Returns:
            Created Organization
        """
        try:
            organization = Organization(
                name=name,
                slug=slug,
                logo=logo,
                owner_id=owner_id,
                plan=OrganizationPlan.FREE,
                status=OrganizationStatus.ACTIVE,
            )
            db.add(organization)
            db.flush()  # Get organization.id without committing

            member_crud.create(
                db,
                organization_id=organization.id,
                user_id=owner_id,
                role=MemberRole.OWNER,
                status=MemberStatus.ACTIVE,
                joined_at=utcnow(),
                commit=False  # Committed together with the organization
            )

            db.commit()
            db.refresh(organization)
            return organization

        except Exception:
            db.rollback()
            raise

    def list_for_user(
        self,
        db: Session,
        *,
        user_id: str,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Organization], int]:
        """
        List organizations where the user is an active member, newest first.

        Soft-deleted organizations are excluded.

        Returns:
            Tuple of (page of organizations, total count)
        """
        stmt = (
            select(Organization)
            .join(OrganizationMember, OrganizationMember.organization_id == Organization.id)
            .where(
                OrganizationMember.user_id == user_id,
                OrganizationMember.status == MemberStatus.ACTIVE,
                Organization.status != OrganizationStatus.CANCELED,
            )
        )
        # Scoped by the caller's own memberships rather than one organization
        total = db.execute(
            select(func.count()).select_from(stmt.subquery()).execution_options(**{CROSS_TENANT_OPTION: True})
        ).scalar_one()
        items = db.execute(
            stmt.order_by(Organization.created_at.desc(), Organization.id.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(**{CROSS_TENANT_OPTION: True})
        ).scalars().all()
        return list(items), total

    def update(self, db: Session, *, db_obj: Organization, update_data: Dict[str, Any]) -> Organization:
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def soft_delete(self, db: Session, *, db_obj: Organization) -> Organization:
        db_obj.status = OrganizationStatus.CANCELED
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


# Create singleton instance
organization = CRUDOrganization()
