"""
Bootstrap a demo tenant with roles, users, locations and menus.

Usage (from repository root):

    uv run python scripts/bootstrap_menus.py

Optional arguments let you override the tenant slug or default passwords:

    uv run python scripts/bootstrap_menus.py --tenant acme --admin-password S3cret --skip-default-users
"""

import argparse

from menu_service.db import SessionLocal
from menu_service.db.init_db import init_db
from menu_service.models import InstalledModule, Menu, MenuItem, MenuLocationAssignment, Role, Tenant
from menu_service.services.menu_store import MenuStore
from menu_service.utils.auth import create_user

ROLES: dict[str, str] = {
    "Admin": "Tenant administrators",
    "Manager": "Branch and department managers",
    "Staff": "Regular staff members",
}

MODULES: tuple[tuple[str, str, str], ...] = (
    ("accounting", "Accounting", "calculator"),
    ("hr", "Human Resources", "users"),
)

# (username, role, default password)
DEFAULT_USERS: tuple[tuple[str, str, str], ...] = (
    ("admin", "Admin", "admin123"),
    ("manager", "Manager", "manager123"),
    ("staff", "Staff", "staff123"),
)

MAIN_MENU = [
    {"label": {"tr": "Panel", "en": "Dashboard"}, "href": "/dashboard", "icon": "home"},
    {
        "label": {"tr": "Muhasebe", "en": "Accounting"},
        "href": "/modules/accounting",
        "icon": "folder",
        "module_slug": "accounting",
        "children": [
            {"label": {"tr": "Faturalar", "en": "Invoices"}, "href": "/modules/accounting/invoices", "module_slug": "accounting"},
            {"label": {"tr": "Ayarlar", "en": "Settings"}, "href": "/modules/accounting/settings", "module_slug": "accounting"},
        ],
    },
    {"label": {"tr": "Kullanıcılar", "en": "Users"}, "href": "/admin/users", "icon": "shield", "required_role": "Admin"},
]

MANAGER_MENU = [
    {"label": {"tr": "Panel", "en": "Dashboard"}, "href": "/dashboard", "icon": "home"},
    {"label": {"tr": "Raporlar", "en": "Reports"}, "href": "/reports", "icon": "chart"},
]


def ensure_tenant(db, slug: str) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.slug == slug).one_or_none()
    if tenant:
        return tenant
    tenant = Tenant(name=slug.title(), slug=slug)
    db.add(tenant)
    db.flush()
    return tenant


def ensure_role(db, name: str, tenant_id: int, description: str = "") -> Role:
    role = db.query(Role).filter(Role.name == name, Role.tenant_id == tenant_id).one_or_none()
    if role:
        if description and role.description != description:
            role.description = description
        return role
    role = Role(name=name, description=description, tenant_id=tenant_id)
    db.add(role)
    db.flush()
    return role


def ensure_module(db, slug: str, name: str, icon: str) -> InstalledModule:
    module = db.query(InstalledModule).filter(InstalledModule.slug == slug).one_or_none()
    if module is None:
        module = InstalledModule(slug=slug)
        db.add(module)
    module.name = name
    module.icon = icon
    module.is_active = True
    return module


def add_items(db, menu: Menu, specs: list[dict], parent: MenuItem | None = None) -> None:
    for order, spec in enumerate(specs):
        spec = dict(spec)
        children = spec.pop("children", [])
        item = MenuItem(menu_id=menu.id, parent_id=parent.id if parent else None, tenant_id=menu.tenant_id, order=order, **spec)
        db.add(item)
        db.flush()
        add_items(db, menu, children, item)


def ensure_menu(db, slug: str, name: str, tenant_id: int, items: list[dict]) -> Menu:
    menu = db.query(Menu).filter(Menu.slug == slug, Menu.tenant_id == tenant_id, Menu.locale == "tr").one_or_none()
    if menu:
        return menu
    menu = Menu(name=name, slug=slug, locale="tr", tenant_id=tenant_id, is_active=True)
    db.add(menu)
    db.flush()
    add_items(db, menu, items)
    return menu


def ensure_assignment(db, location_id: int, menu: Menu, assignment_type: str, assignment_id: str | None, priority: int = 0):
    exists = (
        db.query(MenuLocationAssignment)
        .filter(
            MenuLocationAssignment.location_id == location_id,
            MenuLocationAssignment.menu_id == menu.id,
            MenuLocationAssignment.assignment_type == assignment_type,
        )
        .first()
    )
    if exists:
        return exists
    assignment = MenuLocationAssignment(
        location_id=location_id,
        menu_id=menu.id,
        assignment_type=assignment_type,
        assignment_id=assignment_id,
        priority=priority,
        tenant_id=menu.tenant_id,
        is_active=True,
    )
    db.add(assignment)
    return assignment


def bootstrap(tenant_slug: str, default_passwords: dict[str, str], skip_users: bool = False) -> None:
    init_db()
    session = SessionLocal()
    try:
        tenant = ensure_tenant(session, tenant_slug)
        roles = {name: ensure_role(session, name, tenant.id, description) for name, description in ROLES.items()}
        for slug, name, icon in MODULES:
            ensure_module(session, slug, name, icon)
        session.commit()

        store = MenuStore(session)
        store.ensure_default_locations(tenant.id)
        sidebar = store.find_location("sidebar", tenant.id)

        main_menu = ensure_menu(session, "main", "Main Menu", tenant.id, MAIN_MENU)
        manager_menu = ensure_menu(session, "manager", "Manager Menu", tenant.id, MANAGER_MENU)
        ensure_assignment(session, sidebar.id, main_menu, "default", None)
        ensure_assignment(session, sidebar.id, manager_menu, "role", str(roles["Manager"].id), priority=10)

        if not skip_users:
            for username, role_name, default_password in DEFAULT_USERS:
                password = default_passwords.get(username, default_password)
                create_user(session, username, password, role_name=role_name, tenant_id=tenant.id)

        session.commit()
    finally:
        session.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bootstrap a demo tenant with menus.")
    parser.add_argument("--tenant", default="demo", help="Tenant slug to seed (default: demo).")
    parser.add_argument("--admin-password", help="Password for seeded 'admin' user.")
    parser.add_argument("--manager-password", help="Password for seeded 'manager' user.")
    parser.add_argument("--staff-password", help="Password for seeded 'staff' user.")
    parser.add_argument(
        "--skip-default-users",
        action="store_true",
        help="Only create tenant data and menus; skip creating default users.",
    )
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    password_overrides = {
        key: value
        for key, value in {
            "admin": args.admin_password,
            "manager": args.manager_password,
            "staff": args.staff_password,
        }.items()
        if value
    }
    bootstrap(args.tenant, password_overrides, skip_users=args.skip_default_users)
    print("Bootstrap completed successfully.")


if __name__ == "__main__":
    main()
