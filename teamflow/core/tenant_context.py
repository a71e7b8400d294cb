from typing import Callable, Optional
from fastapi import Depends, Header, Query
from sqlalchemy.orm import Session
from teamflow.database import get_db
from teamflow.core.context import CurrentUser, TenantContext
from teamflow.core.exceptions import ApiError
from teamflow.core.logging_config import logger
from teamflow.crud.organization import organization as organization_crud
from teamflow.dependencies import get_current_user, get_tenant_guard
from teamflow.models.organization import OrganizationStatus
from teamflow.models.organization_member import MemberRole
from teamflow.services.tenant_guard import TenantGuard


def get_tenant_context(
    x_organization_id: Optional[str] = Header(default=None),
    organization_id: Optional[str] = Query(default=None, alias="organizationId"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    guard: TenantGuard = Depends(get_tenant_guard)
) -> TenantContext:
    """
    FastAPI dependency resolving the organization a request acts on.

    The organization comes from the X-Organization-Id header, or the
    organizationId query parameter. The caller must be an active member of
    an active organization. The result is passed explicitly to the service
    layer.

    Returns:
        Immutable TenantContext with the caller's role

    Raises:
        ApiError 400: If no organization is given
        ApiError 403: If the caller is not an active member or the organization is not active
    """
    target = x_organization_id or organization_id
    if not target:
        raise ApiError.bad_request("Organization ID is required")

    member = guard.verify_active_member(db, current_user.user_id, target)

    organization = organization_crud.get(db, target)
    if organization is None or organization.status != OrganizationStatus.ACTIVE:
        raise ApiError.forbidden("This organization is not active")

    logger.debug(f"Tenant context set: organization_id={target}, user_id={current_user.user_id}")
    return TenantContext(user_id=current_user.user_id, organization_id=target, role=member.role)


def require_role(*roles: MemberRole) -> Callable[..., TenantContext]:
    """
    Build a dependency that only lets through members with one of the roles.

    Usage:
        context: TenantContext = Depends(require_role(MemberRole.OWNER, MemberRole.ADMIN))
    """
    allowed = [MemberRole(role) for role in roles]

    def dependency(context: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if context.role not in allowed:
            required = " or ".join(role.value for role in allowed)
            raise ApiError.forbidden(f"Required role: {required} (your role: {context.role.value})")
        return context

    return dependency
