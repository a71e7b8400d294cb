from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session
from teamflow.database import get_db
from teamflow.core.config import Settings
from teamflow.core.context import CurrentUser
from teamflow.core.exceptions import ApiError
from teamflow.core.tokens import TokenService
from teamflow.crud.user import user as user_crud
from teamflow.schemas.common import PaginationParams
from teamflow.services import AuthService, MemberService, OrganizationService, TenantGuard


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_tenant_guard(request: Request) -> TenantGuard:
    return request.app.state.tenant_guard


def get_organization_service(request: Request) -> OrganizationService:
    return request.app.state.organization_service


def get_member_service(request: Request) -> MemberService:
    return request.app.state.member_service


def get_pagination(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100)
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service)
) -> CurrentUser:
    """
    Extract and validate the Bearer access token and resolve the caller.

    Args:
        request: FastAPI Request to extract Authorization header
        db: Database session
        token_service: Verifies the access token

    Returns:
        Immutable CurrentUser for the rest of the request

    Raises:
        ApiError 401: If the token is missing, invalid, expired, or the user no longer exists
    """
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        raise ApiError.unauthorized("No token provided")

    token = authorization[len("Bearer "):]
    payload = token_service.verify_access_token(token)

    user = user_crud.get(db, payload.user_id)
    if user is None:
        raise ApiError.unauthorized("User not found")

    return CurrentUser(user_id=user.id, email=user.email)
