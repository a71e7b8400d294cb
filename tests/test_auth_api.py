from fastapi.testclient import TestClient

from conftest import PASSWORD, auth_header, register
from main import create_app
from teamflow.core.config import Settings

AUTH = "/api/v1/auth"


def login(client, email="alice@x.com", password=PASSWORD):
    return client.post(f"{AUTH}/login", json={"email": email, "password": password})


class TestAuthFlow:
    def test_every_refresh_token_is_distinct_and_single_use(self, client):
        registered = register(client, "alice@x.com")["tokens"]["refreshToken"]

        response = login(client, "alice@x.com", "Abc12345!")
        assert response.status_code == 200
        logged_in = response.json()["data"]["tokens"]["refreshToken"]
        assert logged_in != registered

        response = client.post(f"{AUTH}/refresh-token", json={"refreshToken": logged_in})
        assert response.status_code == 200
        rotated = response.json()["data"]["refreshToken"]
        assert rotated not in (registered, logged_in)

        response = client.post(f"{AUTH}/refresh-token", json={"refreshToken": logged_in})
        assert response.status_code == 401

    def test_register_login_refresh_logout(self, client):
        data = register(client, "alice@x.com")
        assert data["user"]["email"] == "alice@x.com"
        assert "password" not in data["user"]
        assert "hashedPassword" not in data["user"]
        assert data["tokens"]["expiresIn"] == 900

        response = login(client)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        tokens = body["data"]["tokens"]

        response = client.get(f"{AUTH}/me", headers=auth_header(tokens["accessToken"]))
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "alice@x.com"

        response = client.post(f"{AUTH}/refresh-token", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 200
        rotated = response.json()["data"]
        assert rotated["refreshToken"] != tokens["refreshToken"]

        response = client.post(f"{AUTH}/refresh-token", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid refresh token"}

        response = client.post(
            f"{AUTH}/logout",
            json={"refreshToken": rotated["refreshToken"]},
            headers=auth_header(rotated["accessToken"]),
        )
        assert response.status_code == 200

        response = client.post(f"{AUTH}/refresh-token", json={"refreshToken": rotated["refreshToken"]})
        assert response.status_code == 401

    def test_logout_without_body_ends_every_session(self, client):
        first = register(client, "alice@x.com")["tokens"]
        second = login(client).json()["data"]["tokens"]

        response = client.post(f"{AUTH}/logout", headers=auth_header(first["accessToken"]))
        assert response.status_code == 200

        for tokens in (first, second):
            response = client.post(f"{AUTH}/refresh-token", json={"refreshToken": tokens["refreshToken"]})
            assert response.status_code == 401


class TestRegisterValidation:
    def test_duplicate_email(self, client):
        register(client, "alice@x.com")
        response = client.post(
            f"{AUTH}/register",
            json={"firstName": "A", "lastName": "B", "email": "Alice@X.com", "password": PASSWORD},
        )
        assert response.status_code == 409
        assert response.json()["message"] == "User with this email already exists."

    def test_weak_password_lists_each_rule(self, client):
        response = client.post(
            f"{AUTH}/register",
            json={"firstName": "A", "lastName": "B", "email": "alice@x.com", "password": "short"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "password"
        assert "Password must be at least 8 characters long" in body["errors"][0]["message"]

    def test_invalid_email(self, client):
        response = client.post(
            f"{AUTH}/register",
            json={"firstName": "A", "lastName": "B", "email": "not-an-email", "password": PASSWORD},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"


class TestLogin:
    def test_unknown_email_and_wrong_password_are_indistinguishable(self, client):
        register(client, "alice@x.com")

        unknown = login(client, email="bob@x.com")
        wrong = login(client, password="Wrong123!")

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json() == {"success": False, "message": "Invalid email or password."}

    def test_login_email_is_case_insensitive(self, client):
        register(client, "alice@x.com")
        assert login(client, email="ALICE@x.com").status_code == 200


class TestAccessToken:
    def test_missing_token(self, client):
        response = client.get(f"{AUTH}/me")
        assert response.status_code == 401
        assert response.json()["message"] == "No token provided"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_refresh_token_is_not_an_access_token(self, client):
        tokens = register(client, "alice@x.com")["tokens"]
        response = client.get(f"{AUTH}/me", headers=auth_header(tokens["refreshToken"]))
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid access token"


class TestChangePassword:
    def test_change_password_signs_out_everywhere(self, client):
        tokens = register(client, "alice@x.com")["tokens"]

        response = client.post(
            f"{AUTH}/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "Xyz98765?"},
            headers=auth_header(tokens["accessToken"]),
        )
        assert response.status_code == 200

        response = client.post(f"{AUTH}/refresh-token", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 401
        assert login(client).status_code == 401
        assert login(client, password="Xyz98765?").status_code == 200

    def test_wrong_current_password(self, client):
        tokens = register(client, "alice@x.com")["tokens"]
        response = client.post(
            f"{AUTH}/change-password",
            json={"currentPassword": "Nope1234!", "newPassword": "Xyz98765?"},
            headers=auth_header(tokens["accessToken"]),
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Current password is incorrect"


class TestPasswordReset:
    def test_forgot_and_reset(self, client):
        register(client, "alice@x.com")

        response = client.post(f"{AUTH}/forgot-password", json={"email": "alice@x.com"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["message"] == "If this email exists, a reset link has been sent."
        token = data["devOnly_resetToken"]

        response = client.post(f"{AUTH}/reset-password", json={"token": token, "newPassword": "Xyz98765?"})
        assert response.status_code == 200
        assert login(client, password="Xyz98765?").status_code == 200

        response = client.post(f"{AUTH}/reset-password", json={"token": token, "newPassword": "New12345!"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired reset token"

    def test_unknown_email_looks_the_same(self, client):
        register(client, "alice@x.com")
        known = client.post(f"{AUTH}/forgot-password", json={"email": "alice@x.com"}).json()["data"]
        unknown = client.post(f"{AUTH}/forgot-password", json={"email": "nobody@x.com"}).json()["data"]

        assert known["message"] == unknown["message"]
        assert "devOnly_resetToken" not in unknown

    def test_reset_token_not_exposed_in_production(self):
        production = Settings(
            ENVIRONMENT="production",
            JWT_SECRET="production-access-secret",
            JWT_REFRESH_SECRET="production-refresh-secret",
            RATE_LIMIT_ENABLED=False,
        )
        with TestClient(create_app(production)) as client:
            register(client, "alice@x.com")
            response = client.post(f"{AUTH}/forgot-password", json={"email": "alice@x.com"})

        assert response.status_code == 200
        assert "devOnly_resetToken" not in response.json()["data"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}
