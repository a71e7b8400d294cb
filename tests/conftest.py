import os

# Configure the environment before the application modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from main import create_app  # noqa: E402
from teamflow.core.config import Settings  # noqa: E402
from teamflow.core.tokens import TokenService  # noqa: E402
from teamflow.crud.organization_member import organization_member as member_crud  # noqa: E402
from teamflow.database import Base, SessionLocal, engine  # noqa: E402
from teamflow.models import User  # noqa: E402
from teamflow.models.organization_member import MemberRole, MemberStatus  # noqa: E402
from teamflow.services import AuthService, MemberService, OrganizationService, TenantGuard  # noqa: E402

PASSWORD = "Abc12345!"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return Settings(
        ENVIRONMENT="test",
        JWT_SECRET="test-access-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def token_service(settings):
    return TokenService(settings)


@pytest.fixture
def auth_service(token_service, settings):
    return AuthService(token_service, settings)


@pytest.fixture
def guard():
    return TenantGuard()


@pytest.fixture
def organization_service(guard):
    return OrganizationService(guard)


@pytest.fixture
def member_service():
    return MemberService()


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def make_user(db, auth_service):
    """Register a user through the auth service and return the ORM row."""
    def _make_user(email: str, password: str = PASSWORD) -> User:
        result = auth_service.register(
            db,
            first_name="Test",
            last_name="User",
            email=email,
            password=password,
        )
        return db.get(User, result.user.id)
    return _make_user


@pytest.fixture
def add_member(db):
    def _add_member(organization_id: str, user_id: str, role: MemberRole, status: MemberStatus = MemberStatus.ACTIVE):
        return member_crud.create(
            db,
            organization_id=organization_id,
            user_id=user_id,
            role=role,
            status=status,
        )
    return _add_member


def auth_header(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


def register(client, email: str, password: str = PASSWORD) -> dict:
    response = client.post(
        "/api/v1/auth/register",
        json={"firstName": "Test", "lastName": "User", "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]
