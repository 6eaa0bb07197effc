import pytest
from sqlalchemy.exc import OperationalError

from menu_service.main import app
from menu_service.routers import menu_resolver as menu_resolver_router
from menu_service.services.menu_resolver import DataAccessError, MenuResolver
from menu_service.utils.auth import create_refresh_token

NO_STORE = "no-store, no-cache, must-revalidate, max-age=0"


@pytest.fixture
def sidebar_with_menus(make_location, make_menu, assign):
    location = make_location("sidebar")
    default_menu = make_menu(
        "main",
        [
            {"href": "/dashboard", "label": {"en": "Dashboard"}, "css_class": "nav-main"},
            {"href": "/settings", "label": {"en": "Settings"}, "required_role": "Admin"},
        ],
    )
    branch_menu = make_menu("branch", [{"href": "/branch", "label": {"en": "Branch"}}])
    user_menu = make_menu("personal", [{"href": "/mine", "label": {"en": "Mine"}}])
    assign(location, default_menu, "default")
    assign(location, branch_menu, "branch", "b-7")
    assign(location, user_menu, "user", "999")
    return location


def test_requires_authentication(client):
    resp = client.get("/api/menu-resolver/sidebar")

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized", "message": "Unauthorized"}
    assert resp.headers["cache-control"] == NO_STORE
    assert resp.headers["pragma"] == "no-cache"


def test_resolves_menu_with_camel_case_payload(client, make_user, auth_headers, sidebar_with_menus):
    user = make_user("Staff")
    resp = client.get("/api/menu-resolver/sidebar", headers=auth_headers(user))

    assert resp.status_code == 200, resp.text
    assert resp.headers["cache-control"] == NO_STORE
    assert resp.headers["pragma"] == "no-cache"

    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["menu"]["slug"] == "main"
    assert data["location"] == {
        "id": sidebar_with_menus.id,
        "name": "sidebar",
        "label": {"en": "Sidebar"},
        "layoutType": "sidebar",
        "maxDepth": 3,
    }
    assert data["assignment"] == {"type": "default", "id": None, "priority": 0}
    [item] = data["menu"]["items"]
    assert item["href"] == "/dashboard"
    assert item["cssClass"] == "nav-main"
    assert item["children"] == []


def test_admin_sees_role_gated_item(client, make_user, auth_headers, sidebar_with_menus):
    admin = make_user("Admin")
    resp = client.get("/api/menu-resolver/sidebar", headers=auth_headers(admin))
    assert [i["href"] for i in resp.json()["data"]["menu"]["items"]] == ["/dashboard", "/settings"]


def test_query_parameters_override_session(client, make_user, auth_headers, sidebar_with_menus):
    user = make_user("Staff")
    headers = auth_headers(user)

    by_branch = client.get("/api/menu-resolver/sidebar", params={"branchId": "b-7"}, headers=headers)
    assert by_branch.json()["data"]["menu"]["slug"] == "branch"

    by_user = client.get("/api/menu-resolver/sidebar", params={"userId": "999", "branchId": "b-7"}, headers=headers)
    assert by_user.json()["data"]["menu"]["slug"] == "personal"

    by_role = client.get("/api/menu-resolver/sidebar", params={"roleId": "Admin"}, headers=headers)
    assert [i["href"] for i in by_role.json()["data"]["menu"]["items"]] == ["/dashboard", "/settings"]


def test_session_branch_is_used_by_default(client, make_user, auth_headers, sidebar_with_menus):
    user = make_user("Staff", branch_id="b-7")
    resp = client.get("/api/menu-resolver/sidebar", headers=auth_headers(user))
    assert resp.json()["data"]["menu"]["slug"] == "branch"


def test_no_assignment_returns_null_data(client, make_user, auth_headers, make_location):
    make_location("top")
    resp = client.get("/api/menu-resolver/top", headers=auth_headers(make_user("Staff")))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": None, "message": "No menu assigned to this location"}
    assert resp.headers["cache-control"] == NO_STORE


def test_missing_location_for_non_admin_is_404(client, make_user, auth_headers, tenant):
    resp = client.get("/api/menu-resolver/sidebar", headers=auth_headers(make_user("Staff", tenant_id=tenant.id)))

    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert "does not exist" in body["message"]
    assert resp.headers["cache-control"] == NO_STORE


def test_missing_location_for_admin_without_tenant_is_400(client, make_user, auth_headers):
    resp = client.get("/api/menu-resolver/sidebar", headers=auth_headers(make_user("Admin")))

    assert resp.status_code == 400
    assert "no company/tenant is selected" in resp.json()["message"]
    assert resp.headers["pragma"] == "no-cache"


def test_admin_with_tenant_auto_creates_location(client, make_user, auth_headers, tenant):
    headers = auth_headers(make_user("Admin", tenant_id=tenant.id))

    first = client.get("/api/menu-resolver/mobile", headers=headers)
    second = client.get("/api/menu-resolver/mobile", headers=headers)

    assert first.status_code == second.status_code == 200
    assert first.json()["data"] is None

    locations = client.get("/api/menu-locations", headers=headers).json()["data"]
    assert [loc["name"] for loc in locations].count("mobile") == 1


class _FailingResolver(MenuResolver):
    def __init__(self, message):
        self.message = message

    def resolve(self, location_name, requester):
        raise DataAccessError(str(OperationalError("SELECT", {}, Exception(self.message))))


@pytest.mark.parametrize(
    "message,status_code,remediation",
    [
        ('relation "tenants" does not exist', 400, "Tenant not found"),
        ("connection refused", 500, "Failed to resolve menu"),
    ],
)
def test_data_access_errors_are_mapped(client, make_user, auth_headers, message, status_code, remediation):
    app.dependency_overrides[menu_resolver_router.get_menu_resolver] = lambda: _FailingResolver(message)
    resp = client.get("/api/menu-resolver/sidebar", headers=auth_headers(make_user("Staff")))

    assert resp.status_code == status_code
    assert resp.json()["message"].startswith(remediation)
    assert resp.headers["cache-control"] == NO_STORE


def test_refresh_token_is_not_accepted(client, make_user, sidebar_with_menus):
    token = create_refresh_token(make_user("Staff"))
    resp = client.get("/api/menu-resolver/sidebar", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.headers["cache-control"] == NO_STORE
