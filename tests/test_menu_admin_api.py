import pytest

from menu_service.models import Menu, MenuItem, MenuLocation, MenuLocationAssignment


@pytest.fixture
def admin_headers(make_user, auth_headers, tenant):
    return auth_headers(make_user("Admin", tenant_id=tenant.id))


@pytest.fixture
def staff_headers(make_user, auth_headers, tenant):
    return auth_headers(make_user("Staff", tenant_id=tenant.id))


def _create_menu(client, headers, slug="main", locale="en"):
    resp = client.post("/api/menus", json={"name": slug.title(), "slug": slug, "locale": locale}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def _create_item(client, headers, menu_id, **fields):
    fields.setdefault("label", fields.get("href", "Item"))
    resp = client.post(f"/api/menus/{menu_id}/items", json=fields, headers=headers)
    return resp


# ---- Locations ----
def test_listing_seeds_default_locations_for_tenant_admin(client, admin_headers, db, tenant):
    resp = client.get("/api/menu-locations", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    names = sorted(loc["name"] for loc in resp.json()["data"])
    assert names == ["footer", "mobile", "sidebar", "top"]

    # idempotent
    client.get("/api/menu-locations", headers=admin_headers)
    assert db.query(MenuLocation).filter_by(tenant_id=tenant.id).count() == 4


def test_listing_does_not_seed_for_staff(client, staff_headers, db):
    resp = client.get("/api/menu-locations", headers=staff_headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == []
    assert db.query(MenuLocation).count() == 0


def test_create_location_rules(client, admin_headers, staff_headers, make_user, auth_headers):
    payload = {"name": "dock", "label": "Dock", "layoutType": "both", "maxDepth": 2}

    assert client.post("/api/menu-locations", json=payload, headers=staff_headers).status_code == 403

    created = client.post("/api/menu-locations", json=payload, headers=admin_headers)
    assert created.status_code == 200, created.text
    data = created.json()["data"]
    assert data["label"] == {"tr": "Dock", "en": "Dock"}
    assert data["layoutType"] == "both"

    assert client.post("/api/menu-locations", json=payload, headers=admin_headers).status_code == 409

    platform_admin = auth_headers(make_user("Admin"))
    assert client.post("/api/menu-locations", json=payload, headers=platform_admin).status_code == 400


def test_create_location_rejects_unknown_layout(client, admin_headers):
    resp = client.post("/api/menu-locations", json={"name": "x", "label": "X", "layoutType": "grid"}, headers=admin_headers)
    assert resp.status_code == 422


def test_update_and_delete_location(client, admin_headers, make_location, tenant):
    location = make_location("dock", tenant_id=tenant.id)

    resp = client.put(f"/api/menu-locations/{location.id}", json={"maxDepth": 1, "label": "Dok"}, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["maxDepth"] == 1
    assert resp.json()["data"]["label"] == {"tr": "Dok", "en": "Dok"}

    assert client.delete(f"/api/menu-locations/{location.id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/menu-locations/{location.id}", headers=admin_headers).status_code == 404


def test_global_location_needs_superadmin(client, admin_headers, make_user, auth_headers, tenant, make_location):
    location = make_location("sidebar", tenant_id=None)

    resp = client.put(f"/api/menu-locations/{location.id}", json={"maxDepth": 2}, headers=admin_headers)
    assert resp.status_code == 403

    superadmin = auth_headers(make_user("SuperAdmin", tenant_id=tenant.id))
    assert client.put(f"/api/menu-locations/{location.id}", json={"maxDepth": 2}, headers=superadmin).status_code == 200


# ---- Assignments ----
def test_assign_and_unassign_menu(client, admin_headers, make_location, tenant, db):
    location = make_location("sidebar", tenant_id=tenant.id)
    menu = _create_menu(client, admin_headers)

    resp = client.post(
        f"/api/menu-locations/{location.id}/assign",
        json={"menuId": menu["id"], "assignmentType": "role", "assignmentId": 5, "priority": 3},
        headers=admin_headers,
    )
    assert resp.status_code == 200, resp.text
    assignment = resp.json()["data"]
    assert assignment["assignmentId"] == "5"
    assert assignment["menu"]["slug"] == "main"

    listed = client.get("/api/menu-locations", headers=admin_headers).json()["data"]
    [sidebar] = [loc for loc in listed if loc["name"] == "sidebar"]
    assert [a["id"] for a in sidebar["assignments"]] == [assignment["id"]]

    removed = client.delete(
        f"/api/menu-locations/{location.id}/assign",
        params={"assignmentId": assignment["id"]},
        headers=admin_headers,
    )
    assert removed.status_code == 200
    assert db.query(MenuLocationAssignment).count() == 0


def test_assignments_listed_by_priority(client, admin_headers, make_location, tenant):
    location = make_location("sidebar", tenant_id=tenant.id)
    menu = _create_menu(client, admin_headers)
    for priority in (1, 9, 5):
        client.post(
            f"/api/menu-locations/{location.id}/assign",
            json={"menuId": menu["id"], "assignmentType": "default", "priority": priority},
            headers=admin_headers,
        )

    listed = client.get("/api/menu-locations", headers=admin_headers).json()["data"]
    [sidebar] = [loc for loc in listed if loc["name"] == "sidebar"]
    assert [a["priority"] for a in sidebar["assignments"]] == [9, 5, 1]


def test_assign_validation(client, admin_headers, make_location, tenant):
    location = make_location("sidebar", tenant_id=tenant.id)
    menu = _create_menu(client, admin_headers)
    url = f"/api/menu-locations/{location.id}/assign"

    missing_target = client.post(url, json={"menuId": menu["id"], "assignmentType": "user"}, headers=admin_headers)
    assert missing_target.status_code == 400

    unknown_menu = client.post(url, json={"menuId": 9999, "assignmentType": "default"}, headers=admin_headers)
    assert unknown_menu.status_code == 404

    bad_type = client.post(url, json={"menuId": menu["id"], "assignmentType": "group", "assignmentId": "x"}, headers=admin_headers)
    assert bad_type.status_code == 422

    default = client.post(url, json={"menuId": menu["id"], "assignmentType": "default", "assignmentId": "ignored"}, headers=admin_headers)
    assert default.json()["data"]["assignmentId"] is None


def test_global_assignment_needs_superadmin(client, admin_headers, make_user, auth_headers, tenant, db, make_location, make_menu, assign):
    location = make_location("sidebar", tenant_id=None)
    shared = assign(location, make_menu("main"), "default")
    url = f"/api/menu-locations/{location.id}/assign"

    resp = client.delete(url, params={"assignmentId": shared.id}, headers=admin_headers)
    assert resp.status_code == 403
    assert db.query(MenuLocationAssignment).count() == 1

    superadmin = auth_headers(make_user("SuperAdmin", tenant_id=tenant.id))
    assert client.delete(url, params={"assignmentId": shared.id}, headers=superadmin).status_code == 200
    assert db.query(MenuLocationAssignment).count() == 0


# ---- Menus ----
def test_menu_crud(client, admin_headers, staff_headers):
    menu = _create_menu(client, admin_headers, slug="main", locale="tr")
    assert client.post("/api/menus", json={"name": "Main", "slug": "main", "locale": "tr"}, headers=admin_headers).status_code == 409
    # same slug in another locale is a different menu
    _create_menu(client, admin_headers, slug="main", locale="en")

    listed = client.get("/api/menus", params={"locale": "tr"}, headers=staff_headers)
    assert [m["id"] for m in listed.json()["data"]] == [menu["id"]]

    updated = client.put(f"/api/menus/{menu['id']}", json={"name": "Renamed"}, headers=admin_headers)
    assert updated.json()["data"]["name"] == "Renamed"
    assert updated.json()["data"]["slug"] == "main"

    assert client.delete(f"/api/menus/{menu['id']}", headers=staff_headers).status_code == 403
    assert client.delete(f"/api/menus/{menu['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/menus/{menu['id']}/items", headers=admin_headers).status_code == 404


def test_renaming_menu_to_taken_slug_conflicts(client, admin_headers):
    _create_menu(client, admin_headers, slug="main")
    other = _create_menu(client, admin_headers, slug="footer")

    resp = client.put(f"/api/menus/{other['id']}", json={"slug": "main"}, headers=admin_headers)
    assert resp.status_code == 409

    # the session was rolled back and stays usable
    renamed = client.put(f"/api/menus/{other['id']}", json={"slug": "bottom"}, headers=admin_headers)
    assert renamed.status_code == 200
    assert renamed.json()["data"]["slug"] == "bottom"


def test_global_menu_needs_superadmin(client, admin_headers, make_user, auth_headers, tenant, db, make_menu):
    menu = make_menu("main", [{"href": "/dashboard", "label": {"en": "Dashboard"}}])
    [item] = menu.items
    url = f"/api/menus/{menu.id}"

    # tenant admins may read it
    assert client.get(f"{url}/items", headers=admin_headers).status_code == 200

    assert client.put(url, json={"name": "Mine"}, headers=admin_headers).status_code == 403
    assert client.delete(url, headers=admin_headers).status_code == 403
    assert _create_item(client, admin_headers, menu.id, href="/extra").status_code == 403
    assert client.put(f"{url}/items/{item.id}", json={"href": "/home"}, headers=admin_headers).status_code == 403
    assert client.delete(f"{url}/items/{item.id}", headers=admin_headers).status_code == 403

    db.expire_all()
    assert db.get(Menu, menu.id).name == "Main"
    assert [i.href for i in db.query(MenuItem).all()] == ["/dashboard"]

    superadmin = auth_headers(make_user("SuperAdmin", tenant_id=tenant.id))
    assert client.put(url, json={"name": "Shared"}, headers=superadmin).status_code == 200
    assert client.delete(url, headers=superadmin).status_code == 200


def test_menu_items_tree_and_depth_limit(client, admin_headers, db):
    menu = _create_menu(client, admin_headers)
    menu_id = menu["id"]

    root = _create_item(client, admin_headers, menu_id, href="/reports", label={"en": "Reports", "tr": "Raporlar"})
    assert root.status_code == 200, root.text
    root_id = root.json()["data"]["id"]
    child_id = _create_item(client, admin_headers, menu_id, href="/reports/sales", parentId=root_id).json()["data"]["id"]
    grandchild = _create_item(client, admin_headers, menu_id, href="/reports/sales/daily", parentId=child_id, visible=False)
    assert grandchild.status_code == 200
    grandchild_id = grandchild.json()["data"]["id"]

    too_deep = _create_item(client, admin_headers, menu_id, href="/reports/sales/daily/x", parentId=grandchild_id)
    assert too_deep.status_code == 400

    items = client.get(f"/api/menus/{menu_id}/items", headers=admin_headers).json()["data"]
    assert items[0]["label"] == {"en": "Reports", "tr": "Raporlar"}
    assert items[0]["children"][0]["children"][0]["href"] == "/reports/sales/daily"

    # the menu listing only carries visible items
    [listed] = client.get("/api/menus", headers=admin_headers).json()["data"]
    assert listed["items"][0]["children"][0]["children"] == []

    assert client.delete(f"/api/menus/{menu_id}/items/{root_id}", headers=admin_headers).status_code == 200
    db.expire_all()
    assert db.query(MenuItem).count() == 0


def test_plain_string_label_is_localized(client, admin_headers):
    menu = _create_menu(client, admin_headers)
    resp = _create_item(client, admin_headers, menu["id"], href="/home", label="Home")
    assert resp.json()["data"]["label"] == {"tr": "Home", "en": "Home"}


def test_item_parent_must_belong_to_menu(client, admin_headers):
    first = _create_menu(client, admin_headers, slug="first")
    second = _create_menu(client, admin_headers, slug="second")
    foreign_parent = _create_item(client, admin_headers, first["id"], href="/a").json()["data"]["id"]

    resp = _create_item(client, admin_headers, second["id"], href="/b", parentId=foreign_parent)
    assert resp.status_code == 400


def test_item_cannot_move_under_its_descendant(client, admin_headers):
    menu_id = _create_menu(client, admin_headers)["id"]
    root_id = _create_item(client, admin_headers, menu_id, href="/a").json()["data"]["id"]
    child_id = _create_item(client, admin_headers, menu_id, href="/a/b", parentId=root_id).json()["data"]["id"]

    resp = client.put(f"/api/menus/{menu_id}/items/{root_id}", json={"parentId": child_id}, headers=admin_headers)
    assert resp.status_code == 400


def test_item_update_only_touches_given_fields(client, admin_headers):
    menu_id = _create_menu(client, admin_headers)["id"]
    item_id = _create_item(client, admin_headers, menu_id, href="/a", icon="home", requiredRole="Manager").json()["data"]["id"]

    resp = client.put(f"/api/menus/{menu_id}/items/{item_id}", json={"order": 4}, headers=admin_headers)
    data = resp.json()["data"]
    assert data["order"] == 4
    assert data["icon"] == "home"
    assert data["requiredRole"] == "Manager"

    moving_a_subtree = client.put(f"/api/menus/{menu_id}/items/{item_id}", json={"parentId": None}, headers=admin_headers)
    assert moving_a_subtree.status_code == 200


# ---- Modules ----
def test_module_registry_endpoints(client, admin_headers, staff_headers):
    resp = client.put("/api/modules/billing", json={"name": "Billing", "icon": "credit-card"}, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["message"] == "Module registered successfully"

    client.put("/api/modules/billing", json={"name": "Billing", "icon": "wallet"}, headers=admin_headers)
    client.put("/api/modules/crm", json={"name": "CRM", "isActive": False}, headers=admin_headers)

    listed = client.get("/api/modules", headers=staff_headers).json()["data"]
    assert listed == [{"slug": "billing", "name": "Billing", "icon": "wallet", "version": None, "isActive": True}]

    assert client.get("/api/modules", params={"include_inactive": True}, headers=staff_headers).status_code == 403
    assert len(client.get("/api/modules", params={"include_inactive": True}, headers=admin_headers).json()["data"]) == 2
    assert client.put("/api/modules/crm", json={"name": "CRM"}, headers=staff_headers).status_code == 403


# ---- Roles ----
def test_roles_are_scoped_to_tenant(client, admin_headers, make_user, auth_headers):
    created = client.post("/api/rbac/roles", data={"name": "Manager"}, headers=admin_headers)
    assert created.status_code == 200
    assert client.post("/api/rbac/roles", data={"name": "Manager"}, headers=admin_headers).status_code == 409

    platform_admin = auth_headers(make_user("Admin"))
    client.post("/api/rbac/roles", data={"name": "Auditor"}, headers=platform_admin)

    roles = client.get("/api/rbac/roles", headers=admin_headers).json()["roles"]
    assert sorted(r["name"] for r in roles) == ["Auditor", "Manager"]
    assert client.get("/api/rbac/roles", headers=platform_admin).json()["roles"][0]["name"] == "Auditor"

    global_role = next(r for r in roles if r["name"] == "Auditor")
    assert client.delete(f"/api/rbac/roles/{global_role['id']}", headers=admin_headers).status_code == 403
    assert client.delete(f"/api/rbac/roles/{created.json()['id']}", headers=admin_headers).status_code == 200
