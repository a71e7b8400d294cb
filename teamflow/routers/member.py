from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from teamflow.database import get_db
from teamflow.core.context import TenantContext
from teamflow.core.tenant_context import get_tenant_context, require_role
from teamflow.dependencies import get_member_service, get_pagination
from teamflow.models.organization_member import MemberRole
from teamflow.schemas.common import ApiResponse, PaginationParams
from teamflow.schemas.member import MemberList, MemberPatch, MemberResponse
from teamflow.services.member import MemberService

router = APIRouter()


@router.get("", response_model=ApiResponse[MemberList])
def list_members(
    params: PaginationParams = Depends(get_pagination),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
    service: MemberService = Depends(get_member_service)
):
    """
    List members of the organization given in X-Organization-Id.

    Any active member may list.
    """
    return ApiResponse(
        message="Members retrieved successfully",
        data=service.list_members(db, context, params),
    )


@router.patch("/{member_id}", response_model=ApiResponse[MemberResponse])
def update_member(
    member_id: str,
    patch: MemberPatch,
    context: TenantContext = Depends(require_role(MemberRole.OWNER, MemberRole.ADMIN)),
    db: Session = Depends(get_db),
    service: MemberService = Depends(get_member_service)
):
    """Change a member's role or status. OWNER or ADMIN only."""
    member = service.update_member(db, context, member_id, patch)
    return ApiResponse(
        message="Member updated successfully",
        data=MemberResponse.model_validate(member),
    )
