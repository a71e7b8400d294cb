from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from teamflow.database import get_db
from teamflow.core.context import CurrentUser
from teamflow.core.logging_config import logger
from teamflow.dependencies import get_current_user, get_organization_service, get_pagination
from teamflow.schemas.common import ApiResponse, PaginationParams
from teamflow.schemas.organization import (
    OrganizationCreate,
    OrganizationList,
    OrganizationPatch,
    OrganizationResponse,
)
from teamflow.services.organization import OrganizationService

router = APIRouter()


@router.get("", response_model=ApiResponse[OrganizationList])
def get_user_organizations(
    params: PaginationParams = Depends(get_pagination),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: OrganizationService = Depends(get_organization_service)
):
    """
    List the organizations the caller belongs to, newest first.

    Args:
        params: page (default 1) and limit (default 10)
    """
    result = service.get_user_organizations(db, current_user.user_id, params)
    return ApiResponse(message="Organizations retrieved successfully", data=result)


@router.post("", response_model=ApiResponse[OrganizationResponse], status_code=status.HTTP_201_CREATED)
def create_organization(
    data: OrganizationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: OrganizationService = Depends(get_organization_service)
):
    """Create an organization. The caller becomes its OWNER."""
    try:
        organization = service.create_organization(db, current_user.user_id, data)
    except Exception as e:
        logger.error(f"Error creating organization: {type(e).__name__}: {str(e)}")
        raise
    return ApiResponse(
        message="Organization created successfully",
        data=OrganizationResponse.model_validate(organization),
    )


@router.get("/{organization_id}", response_model=ApiResponse[OrganizationResponse])
def get_organization(
    organization_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: OrganizationService = Depends(get_organization_service)
):
    """
    Retrieve an organization.

    Raises:
        404: If the organization does not exist
        403: If the caller is not an active member
    """
    organization = service.get_organization(db, organization_id, current_user.user_id)
    return ApiResponse(
        message="Organization retrieved successfully",
        data=OrganizationResponse.model_validate(organization),
    )


@router.patch("/{organization_id}", response_model=ApiResponse[OrganizationResponse])
def update_organization(
    organization_id: str,
    patch: OrganizationPatch,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: OrganizationService = Depends(get_organization_service)
):
    """Update name or logo. OWNER or ADMIN only; the slug cannot change."""
    organization = service.update_organization(db, organization_id, current_user.user_id, patch)
    return ApiResponse(
        message="Organization updated successfully",
        data=OrganizationResponse.model_validate(organization),
    )


@router.delete("/{organization_id}", response_model=ApiResponse[OrganizationResponse])
def delete_organization(
    organization_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: OrganizationService = Depends(get_organization_service)
):
    """Soft delete an organization. OWNER only."""
    organization = service.delete_organization(db, organization_id, current_user.user_id)
    return ApiResponse(
        message="Organization deleted successfully",
        data=OrganizationResponse.model_validate(organization),
    )
