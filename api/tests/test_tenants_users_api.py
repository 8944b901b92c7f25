from sqlmodel import Session, select

from claimdesk.models import Claim, Config, Tenant, User

from conftest import PASSWORD, VALID_DATA, auth_headers

API = "/api/v1"


def test_register_login_and_profile(client, world):
    response = client.post(
        f"{API}/auth/register",
        json={
            "email": "new@acme.com",
            "name": "Newcomer",
            "password": "hunter22",
            "tenant_id": world["acme"].id,
            "role": "super_admin",
        },
    )
    assert response.status_code == 201
    assert response.json()["role"] == "user"
    assert "password_hash" not in response.json()

    login = client.post(f"{API}/auth/login", json={"email": "new@acme.com", "password": "hunter22"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    profile = client.get(f"{API}/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.json()["email"] == "new@acme.com"
    assert profile.json()["tenant_id"] == world["acme"].id

    # token may also travel as a query parameter
    assert client.get(f"{API}/auth/profile", params={"token": token}).status_code == 200


def test_register_requires_known_tenant_and_unique_email(client, world):
    body = {"email": "x@acme.com", "name": "Xavier", "password": "hunter22"}
    assert client.post(f"{API}/auth/register", json=body).status_code == 400
    assert client.post(f"{API}/auth/register", json={**body, "tenant_id": "nope"}).status_code == 404
    taken = client.post(f"{API}/auth/register", json={**body, "email": "alice@acme.com", "tenant_id": world["acme"].id})
    assert taken.status_code == 409


def test_login_rejects_bad_credentials(client, world):
    assert client.post(f"{API}/auth/login", json={"email": "alice@acme.com", "password": "wrong"}).status_code == 401
    assert client.post(f"{API}/auth/login", json={"email": "ghost@acme.com", "password": PASSWORD}).status_code == 401
    assert client.post(f"{API}/auth/login", json={"email": "alice@acme.com", "password": PASSWORD}).status_code == 200


def test_public_tenant_list_hides_api_keys(client, world):
    response = client.get(f"{API}/tenants")
    assert response.status_code == 200
    assert [t["name"] for t in response.json()] == ["Acme", "Globex"]
    assert all("api_key" not in t for t in response.json())


def test_widget_resolves_tenant_by_api_key(client, world):
    response = client.get(f"{API}/tenants/w", headers={"API-Key": world["globex"].api_key})
    assert response.status_code == 200
    assert response.json()["id"] == world["globex"].id
    assert client.get(f"{API}/tenants/w").status_code == 400


def test_only_super_admin_creates_tenants(client, world):
    body = {"name": "Initech"}
    assert client.post(f"{API}/tenants", json=body, headers=auth_headers(world["acme_admin"])).status_code == 403
    response = client.post(f"{API}/tenants", json=body, headers=auth_headers(world["root"]))
    assert response.status_code == 201
    assert response.json()["name"] == "Initech"
    assert len(response.json()["api_key"]) >= 32


def test_admin_reads_only_own_tenant(client, world):
    own = client.get(f"{API}/tenants/{world['acme'].id}", headers=auth_headers(world["acme_admin"]))
    assert own.status_code == 200
    assert own.json()["api_key"] == world["acme"].api_key
    other = client.get(f"{API}/tenants/{world['globex'].id}", headers=auth_headers(world["acme_admin"]))
    assert other.status_code == 404
    assert client.get(f"{API}/tenants/{world['acme'].id}", headers=auth_headers(world["alice"])).status_code == 403


def test_regenerated_api_key_replaces_the_old_one(client, world):
    old_key = world["acme"].api_key
    response = client.post(f"{API}/tenants/{world['acme'].id}/api-key", headers=auth_headers(world["acme_admin"]))
    assert response.status_code == 200
    new_key = response.json()["api_key"]
    assert new_key != old_key
    assert client.get(f"{API}/tenants/w", headers={"API-Key": old_key}).status_code == 404
    assert client.get(f"{API}/tenants/w", headers={"API-Key": new_key}).status_code == 200


def test_super_admin_updates_tenant(client, world):
    response = client.patch(
        f"{API}/tenants/{world['globex'].id}",
        json={"name": "Globex Corp", "logo": "data:image/png;base64,AAAA"},
        headers=auth_headers(world["root"]),
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Globex Corp"
    assert response.json()["logo"] == "data:image/png;base64,AAAA"


def test_deleting_a_tenant_removes_its_members_claims_and_config(client, world, test_engine):
    gina = world["gina"]
    claim = client.post(f"{API}/claims", json={"data": VALID_DATA}, headers=auth_headers(gina))
    assert claim.status_code == 201
    client.post(
        f"{API}/config",
        json={"version": "9.9.9", "claimForm": {"steps": []}},
        headers=auth_headers(world["globex_admin"]),
    )
    globex_id = world["globex"].id

    response = client.delete(f"{API}/tenants/{globex_id}", headers=auth_headers(world["root"]))
    assert response.status_code == 204

    with Session(test_engine) as session:
        assert session.get(Tenant, globex_id) is None
        assert session.exec(select(User).where(User.tenant_id == globex_id)).all() == []
        assert session.get(Claim, claim.json()["id"]) is None
        assert session.exec(select(Config).where(Config.tenant_id == globex_id)).first() is None
        assert session.get(Tenant, world["acme"].id) is not None


def test_create_admin_creates_or_promotes(client, world):
    headers = auth_headers(world["acme_admin"])
    created = client.post(
        f"{API}/admin/create-admin",
        json={"email": "boss@acme.com", "name": "Boss", "password": "hunter22"},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["user"]["role"] == "admin"
    assert created.json()["user"]["tenant_id"] == world["acme"].id

    promoted = client.post(
        f"{API}/admin/create-admin",
        json={"email": "alice@acme.com", "name": "Alice", "password": "hunter22"},
        headers=headers,
    )
    assert promoted.status_code == 201
    assert promoted.json()["message"] == "User successfully promoted to admin"

    again = client.post(
        f"{API}/admin/create-admin",
        json={"email": "alice@acme.com", "name": "Alice", "password": "hunter22"},
        headers=headers,
    )
    assert again.status_code == 409


def test_admin_cannot_create_admins_elsewhere(client, world):
    response = client.post(
        f"{API}/admin/create-admin",
        json={"email": "spy@globex.com", "name": "Spy", "password": "hunter22", "tenant_id": world["globex"].id},
        headers=auth_headers(world["acme_admin"]),
    )
    assert response.status_code == 403


def test_make_admin_is_scoped_and_idempotent(client, world):
    headers = auth_headers(world["acme_admin"])
    response = client.post(f"{API}/admin/make-admin/bob@acme.com", headers=headers)
    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    assert client.post(f"{API}/admin/make-admin/bob@acme.com", headers=headers).json()["role"] == "admin"

    assert client.post(f"{API}/admin/make-admin/gina@globex.com", headers=headers).status_code == 404
    # promotion does not demote a super admin
    root = client.post(f"{API}/admin/make-admin/root@example.com", headers=auth_headers(world["root"]))
    assert root.json()["role"] == "super_admin"


def test_promotion_applies_to_existing_tokens(client, world):
    headers = auth_headers(world["bob"])
    assert client.get(f"{API}/users", headers=headers).status_code == 403
    client.post(f"{API}/admin/make-admin/bob@acme.com", headers=auth_headers(world["acme_admin"]))
    assert client.get(f"{API}/users", headers=headers).status_code == 200


def test_user_listing_is_scoped_to_tenant(client, world):
    acme = client.get(f"{API}/users", headers=auth_headers(world["acme_admin"])).json()
    assert {u["email"] for u in acme} == {"root@example.com", "admin@acme.com", "alice@acme.com", "bob@acme.com"}
    everyone = client.get(f"{API}/users", headers=auth_headers(world["root"])).json()
    assert len(everyone) == 6
    assert client.get(f"{API}/users/{world['gina'].id}", headers=auth_headers(world["acme_admin"])).status_code == 404


def test_admin_cannot_grant_roles_above_their_own(client, world):
    headers = auth_headers(world["acme_admin"])
    body = {"email": "eve@acme.com", "name": "Eve", "password": "hunter22", "role": "super_admin"}
    assert client.post(f"{API}/users", json=body, headers=headers).status_code == 403

    created = client.post(f"{API}/users", json={**body, "role": "user"}, headers=headers)
    assert created.status_code == 201
    user_id = created.json()["id"]
    patch = client.patch(f"{API}/users/{user_id}", json={"role": "super_admin"}, headers=headers)
    assert patch.status_code == 403
    patch = client.patch(f"{API}/users/{user_id}", json={"name": "Eve Renamed"}, headers=headers)
    assert patch.status_code == 200
    assert patch.json()["name"] == "Eve Renamed"

    # an admin cannot touch a super admin record either
    assert client.patch(f"{API}/users/{world['root'].id}", json={"name": "x"}, headers=headers).status_code == 403


def test_deleting_a_user_removes_their_claims(client, world, test_engine):
    claim = client.post(f"{API}/claims", json={"data": VALID_DATA}, headers=auth_headers(world["bob"])).json()
    response = client.delete(f"{API}/users/{world['bob'].id}", headers=auth_headers(world["acme_admin"]))
    assert response.status_code == 204
    with Session(test_engine) as session:
        assert session.get(Claim, claim["id"]) is None


def test_self_registration_cannot_claim_an_external_identity(client, world):
    registered = client.post(
        f"{API}/auth/register",
        json={
            "email": "mallory@acme.com",
            "name": "Mallory",
            "password": "hunter22",
            "tenant_id": world["acme"].id,
            "external_id": "VICTIM",
        },
    )
    assert registered.status_code == 201
    assert registered.json()["external_id"] is None

    widget = client.post(
        f"{API}/claims/w",
        json={"data": VALID_DATA},
        headers={"API-Key": world["acme"].api_key, "User-ID": "VICTIM"},
    )
    assert widget.status_code == 201
    assert widget.json()["user_id"] != registered.json()["id"]

    login = client.post(f"{API}/auth/login", json={"email": "mallory@acme.com", "password": "hunter22"})
    token = login.json()["access_token"]
    listed = client.get(f"{API}/claims", headers={"Authorization": f"Bearer {token}"}).json()
    assert listed == []


def test_admins_can_still_link_an_external_identity(client, world):
    response = client.post(
        f"{API}/users",
        json={"email": "linked@acme.com", "name": "Linked", "password": "hunter22", "external_id": "HOST-7"},
        headers=auth_headers(world["acme_admin"]),
    )
    assert response.status_code == 201
    assert response.json()["external_id"] == "HOST-7"
