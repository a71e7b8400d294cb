from sqlalchemy.orm import Session

from teamflow.core.exceptions import ApiError
from teamflow.core.logging_config import logger
from teamflow.core.context import TenantContext
from teamflow.crud.organization_member import organization_member as member_crud
from teamflow.models.organization_member import MemberRole, OrganizationMember
from teamflow.schemas.common import PaginationMeta, PaginationParams
from teamflow.schemas.member import MemberList, MemberPatch, MemberResponse


class MemberService:
    """Membership administration within the caller's organization."""

    def __init__(self):
        self.crud = member_crud

    def list_members(self, db: Session, context: TenantContext, params: PaginationParams) -> MemberList:
        items = self.crud.get_multi(
            db,
            organization_id=context.organization_id,
            skip=params.skip,
            limit=params.limit,
        )
        total = self.crud.count(db, organization_id=context.organization_id)
        return MemberList(
            items=[MemberResponse.model_validate(item) for item in items],
            pagination=PaginationMeta.build(params.page, params.limit, total),
        )

    def update_member(
        self,
        db: Session,
        context: TenantContext,
        member_id: str,
        patch: MemberPatch
    ) -> OrganizationMember:
        """
        Change a member's role or status.

        The OWNER membership cannot be modified and OWNER cannot be granted;
        ownership is fixed at organization creation.

        Raises:
            ApiError 404: If the member is not in the caller's organization
            ApiError 403: If the change touches ownership
        """
        member = self.crud.get(db, id=member_id, organization_id=context.organization_id)
        if not member:
            raise ApiError.not_found("Member not found")

        if member.role == MemberRole.OWNER:
            raise ApiError.forbidden("The organization owner cannot be modified")

        if patch.role == MemberRole.OWNER:
            raise ApiError.forbidden("Ownership cannot be granted")

        logger.info(
            f"Updating member: organization_id={context.organization_id}, "
            f"member_id={member_id}, by={context.user_id}"
        )
        return self.crud.update(db, db_obj=member, obj_in=patch.model_dump(exclude_unset=True))
