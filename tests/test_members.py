import pytest

from conftest import auth_header, register
from teamflow.core.context import TenantContext
from teamflow.core.exceptions import ApiError
from teamflow.crud.organization import organization as organization_crud
from teamflow.crud.organization_member import organization_member as member_crud
from teamflow.models.organization_member import MemberRole, MemberStatus
from teamflow.schemas.common import PaginationParams
from teamflow.schemas.member import MemberPatch
from teamflow.schemas.organization import OrganizationCreate

MEMBERS = "/api/v1/members"


@pytest.fixture
def team(client, add_member):
    """Acme owned by alice, with carol as ADMIN and bob as MEMBER."""
    alice = register(client, "alice@x.com")
    bob = register(client, "bob@x.com")
    carol = register(client, "carol@x.com")
    response = client.post(
        "/api/v1/organizations",
        json={"name": "Acme Inc", "slug": "acme"},
        headers=auth_header(alice["tokens"]["accessToken"]),
    )
    org_id = response.json()["data"]["id"]
    bob_member = add_member(org_id, bob["user"]["id"], MemberRole.MEMBER)
    carol_member = add_member(org_id, carol["user"]["id"], MemberRole.ADMIN)
    return {
        "org_id": org_id,
        "alice": alice,
        "bob": bob,
        "carol": carol,
        "bob_member_id": bob_member.id,
        "carol_member_id": carol_member.id,
    }


def headers_for(team, name):
    return {
        **auth_header(team[name]["tokens"]["accessToken"]),
        "X-Organization-Id": team["org_id"],
    }


class TestTenantContext:
    def test_organization_id_required(self, client, team):
        response = client.get(MEMBERS, headers=auth_header(team["bob"]["tokens"]["accessToken"]))
        assert response.status_code == 400
        assert response.json()["message"] == "Organization ID is required"

    def test_query_parameter_accepted(self, client, team):
        response = client.get(
            MEMBERS,
            params={"organizationId": team["org_id"]},
            headers=auth_header(team["bob"]["tokens"]["accessToken"]),
        )
        assert response.status_code == 200

    def test_outsider_forbidden(self, client, team):
        dave = register(client, "dave@x.com")
        response = client.get(
            MEMBERS,
            headers={**auth_header(dave["tokens"]["accessToken"]), "X-Organization-Id": team["org_id"]},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "You do not have access to this organization"

    def test_canceled_organization_rejected(self, client, team, db):
        organization_crud.soft_delete(db, db_obj=organization_crud.get(db, team["org_id"]))

        response = client.get(MEMBERS, headers=headers_for(team, "bob"))
        assert response.status_code == 403
        assert response.json()["message"] == "This organization is not active"


class TestListMembers:
    def test_any_active_member_can_list(self, client, team):
        response = client.get(MEMBERS, headers=headers_for(team, "bob"))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pagination"]["total"] == 3
        roles = sorted(item["role"] for item in data["items"])
        assert roles == ["ADMIN", "MEMBER", "OWNER"]
        assert {item["organizationId"] for item in data["items"]} == {team["org_id"]}

    def test_service_lists_only_the_context_organization(self, member_service, organization_service, make_user, add_member, db):
        alice = make_user("alice@x.com")
        bob = make_user("bob@x.com")
        acme = organization_service.create_organization(db, alice.id, OrganizationCreate(name="Acme", slug="acme"))
        globex = organization_service.create_organization(db, bob.id, OrganizationCreate(name="Globex", slug="globex"))
        add_member(globex.id, alice.id, MemberRole.GUEST)

        context = TenantContext(user_id=bob.id, organization_id=globex.id, role=MemberRole.OWNER)
        result = member_service.list_members(db, context, PaginationParams())

        assert result.pagination.total == 2
        assert {item.organization_id for item in result.items} == {globex.id}
        assert acme.id not in {item.organization_id for item in result.items}


class TestUpdateMember:
    def test_member_cannot_update(self, client, team):
        response = client.patch(
            f"{MEMBERS}/{team['carol_member_id']}",
            json={"role": "GUEST"},
            headers=headers_for(team, "bob"),
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Required role: OWNER or ADMIN (your role: MEMBER)"

    def test_admin_changes_role(self, client, team):
        response = client.patch(
            f"{MEMBERS}/{team['bob_member_id']}",
            json={"role": "ADMIN"},
            headers=headers_for(team, "carol"),
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "ADMIN"

    def test_suspended_member_loses_access(self, client, team):
        response = client.patch(
            f"{MEMBERS}/{team['bob_member_id']}",
            json={"status": "SUSPENDED"},
            headers=headers_for(team, "alice"),
        )
        assert response.status_code == 200

        response = client.get(MEMBERS, headers=headers_for(team, "bob"))
        assert response.status_code == 403

    def test_owner_membership_is_immutable(self, client, team, db):
        owner = member_crud.get_active(db, user_id=team["alice"]["user"]["id"], organization_id=team["org_id"])
        response = client.patch(
            f"{MEMBERS}/{owner.id}",
            json={"role": "MEMBER"},
            headers=headers_for(team, "carol"),
        )
        assert response.status_code == 403
        assert response.json()["message"] == "The organization owner cannot be modified"

    def test_ownership_cannot_be_granted(self, client, team):
        response = client.patch(
            f"{MEMBERS}/{team['bob_member_id']}",
            json={"role": "OWNER"},
            headers=headers_for(team, "alice"),
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Ownership cannot be granted"

    def test_member_of_other_organization_not_found(self, client, team):
        dave = register(client, "dave@x.com")
        response = client.post(
            "/api/v1/organizations",
            json={"name": "Globex", "slug": "globex"},
            headers=auth_header(dave["tokens"]["accessToken"]),
        )
        assert response.status_code == 201

        response = client.patch(
            f"{MEMBERS}/{team['bob_member_id']}",
            json={"role": "GUEST"},
            headers={
                **auth_header(dave["tokens"]["accessToken"]),
                "X-Organization-Id": response.json()["data"]["id"],
            },
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Member not found"

    @pytest.mark.parametrize("body", [{}, {"role": None}, {"userId": "someone"}, {"role": "KING"}])
    def test_invalid_patch(self, client, team, body):
        response = client.patch(
            f"{MEMBERS}/{team['bob_member_id']}",
            json=body,
            headers=headers_for(team, "alice"),
        )
        assert response.status_code == 400

    def test_service_rejects_owner_grant(self, member_service, organization_service, make_user, add_member, db):
        alice = make_user("alice@x.com")
        bob = make_user("bob@x.com")
        acme = organization_service.create_organization(db, alice.id, OrganizationCreate(name="Acme", slug="acme"))
        member = add_member(acme.id, bob.id, MemberRole.MEMBER, MemberStatus.ACTIVE)

        context = TenantContext(user_id=alice.id, organization_id=acme.id, role=MemberRole.OWNER)
        with pytest.raises(ApiError) as exc:
            member_service.update_member(db, context, member.id, MemberPatch(role=MemberRole.OWNER))
        assert exc.value.status_code == 403
