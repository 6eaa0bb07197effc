from menu_service.utils import auth as auth_utils


def test_login_me_refresh_and_revoke(client, make_user, auth_headers, tenant):
    make_user("Manager", tenant_id=tenant.id, branch_id="b-1", username="jsmith", password="testpassword")

    bad = client.post("/api/auth/login", data={"username": "jsmith", "password": "wrong"})
    assert bad.status_code == 401

    resp = client.post("/api/auth/login", data={"username": "JSmith", "password": "testpassword"})
    assert resp.status_code == 200, resp.text
    tokens = resp.json()
    assert tokens["user"]["tier"] == "manager"
    assert tokens["user"]["is_admin"] is False

    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    me = client.get("/api/auth/me", headers=headers).json()
    assert me["username"] == "jsmith"
    assert me["tenant_id"] == tenant.id
    assert me["branch_id"] == "b-1"

    refreshed = client.post("/api/auth/token/refresh", data={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert client.post("/api/auth/token/refresh", data={"refresh_token": tokens["access_token"]}).status_code == 401

    admin = make_user("Admin", tenant_id=tenant.id)
    assert client.post("/api/auth/revoke/jsmith", headers=headers).status_code == 403
    assert client.post("/api/auth/revoke/jsmith", headers=auth_headers(admin)).status_code == 200
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_token_carries_tenant_and_role():
    class DummyUser:
        id = 7
        username = "norm_user"
        tenant_id = 3
        role_name = "Admin"
        token_version = 1

    token = auth_utils.create_access_token(DummyUser())
    payload = auth_utils.decode_jwt(token)
    assert payload["sub"] == "norm_user"
    assert payload["tenant_id"] == 3
    assert payload["role"] == "Admin"
    assert payload["type"] == "access"

    # Tokens are decoded strictly; a "Bearer " prefix is not stripped here
    assert auth_utils.decode_jwt(f"Bearer {token}") is None


def test_health_endpoints(client):
    assert client.get("/health").json()["database"] == "connected"
    assert client.get("/readiness").json() == {"ready": True}
    assert client.get("/liveness").json() == {"alive": True}
