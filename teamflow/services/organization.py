from sqlalchemy.orm import Session

from teamflow.core.exceptions import ApiError
from teamflow.core.logging_config import logger
from teamflow.crud.organization import organization as organization_crud
from teamflow.models.organization import Organization, OrganizationStatus
from teamflow.models.organization_member import MemberRole
from teamflow.schemas.common import PaginationMeta, PaginationParams
from teamflow.schemas.organization import (
    OrganizationCreate,
    OrganizationList,
    OrganizationPatch,
    OrganizationResponse,
)
from teamflow.services.tenant_guard import TenantGuard

# Fields an update may touch; slug is immutable
UPDATABLE_FIELDS = frozenset({"name", "logo"})


class OrganizationService:
    """
    Service layer for organization business logic.

    Existence is checked before membership: a missing organization is a
    404, an existing one the caller cannot access is a 403.
    """

    def __init__(self, guard: TenantGuard):
        self.crud = organization_crud
        self.guard = guard

    def _get_existing(self, db: Session, organization_id: str, include_canceled: bool = False) -> Organization:
        organization = self.crud.get(db, organization_id)
        canceled = organization is not None and organization.status == OrganizationStatus.CANCELED
        if not organization or (canceled and not include_canceled):
            raise ApiError.not_found("Organization not found")
        return organization

    def create_organization(self, db: Session, user_id: str, data: OrganizationCreate) -> Organization:
        """
        Create an organization owned by the caller.

        Raises:
            ApiError 409: If the slug is taken
        """
        logger.info(f"Creating organization: user_id={user_id}, slug={data.slug}")

        if self.crud.get_by_slug(db, data.slug):
            raise ApiError.conflict("Organization slug already exists")

        organization = self.crud.create_with_owner(
            db,
            owner_id=user_id,
            name=data.name,
            slug=data.slug,
            logo=str(data.logo) if data.logo else None,
        )

        logger.info(f"Organization created successfully: organization_id={organization.id}")
        return organization

    def get_organization(self, db: Session, organization_id: str, user_id: str) -> Organization:
        """
        Retrieve an organization for one of its active members.

        A soft-deleted organization is still returned, with status CANCELED.
        """
        organization = self._get_existing(db, organization_id, include_canceled=True)
        self.guard.verify_active_member(db, user_id, organization_id)
        return organization

    def get_user_organizations(self, db: Session, user_id: str, params: PaginationParams) -> OrganizationList:
        items, total = self.crud.list_for_user(db, user_id=user_id, skip=params.skip, limit=params.limit)
        return OrganizationList(
            items=[OrganizationResponse.model_validate(item) for item in items],
            pagination=PaginationMeta.build(params.page, params.limit, total),
        )

    def update_organization(
        self,
        db: Session,
        organization_id: str,
        user_id: str,
        patch: OrganizationPatch
    ) -> Organization:
        """
        Update name and/or logo. OWNER or ADMIN only.

        Raises:
            ApiError 404: If the organization does not exist
            ApiError 403: If the caller is not an OWNER or ADMIN member
        """
        organization = self._get_existing(db, organization_id)
        self.guard.verify_role(db, user_id, organization_id, [MemberRole.OWNER, MemberRole.ADMIN])

        update_data = {
            field: value
            for field, value in patch.model_dump(mode="json", exclude_unset=True).items()
            if field in UPDATABLE_FIELDS
        }

        logger.info(f"Updating organization: organization_id={organization_id}, fields={sorted(update_data)}")
        return self.crud.update(db, db_obj=organization, update_data=update_data)

    def delete_organization(self, db: Session, organization_id: str, user_id: str) -> Organization:
        """
        Soft delete an organization (status CANCELED). OWNER only.

        Raises:
            ApiError 404: If the organization does not exist
            ApiError 403: If the caller is not the OWNER
        """
        organization = self._get_existing(db, organization_id)
        self.guard.verify_role(db, user_id, organization_id, [MemberRole.OWNER])

        logger.info(f"Deleting organization: organization_id={organization_id}")
        return self.crud.soft_delete(db, db_obj=organization)
