import os

# Force the SQLite test database and cheap password hashing before the app
# (and with it the engine and the password hasher) is imported.
os.environ["DATABASE_URL"] = "sqlite:///./test_menu_service.db"
os.environ["JWT_SECRET"] = "test-secret-with-at-least-32-bytes-of-entropy"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_PARALLELISM"] = "1"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from menu_service.db import Base, SessionLocal, get_engine  # noqa: E402
from menu_service.main import app  # noqa: E402
from menu_service.models import Menu, MenuItem, MenuLocation, MenuLocationAssignment, Tenant, User  # noqa: E402
from menu_service.utils.auth import create_access_token, hash_password  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    """Every test starts from empty tables."""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def tenant(db):
    t = Tenant(name="Acme", slug="acme")
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role_name="Staff", tenant_id=None, branch_id=None, username=None, password="secret-pass"):
        counter["n"] += 1
        user = User(
            username=username or f"user{counter['n']}",
            password_hash=hash_password(password),
            role_name=role_name,
            tenant_id=tenant_id,
            branch_id=branch_id,
            is_active=True,
            token_version=1,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def make_menu(db):
    """
    Create a menu from nested item specs.

    Each item spec is a dict of MenuItem columns plus an optional
    `children` list of further specs.
    """

    def _add_items(menu, specs, parent=None):
        for order, spec in enumerate(specs):
            spec = dict(spec)
            children = spec.pop("children", [])
            spec.setdefault("label", {"en": spec.get("href", "item")})
            spec.setdefault("order", order)
            item = MenuItem(menu_id=menu.id, parent_id=parent.id if parent else None, tenant_id=menu.tenant_id, **spec)
            db.add(item)
            db.flush()
            _add_items(menu, children, item)

    def _make(slug, items=(), tenant_id=None, locale="en", name=None):
        menu = Menu(name=name or slug.title(), slug=slug, locale=locale, tenant_id=tenant_id, is_active=True)
        db.add(menu)
        db.flush()
        _add_items(menu, items)
        db.commit()
        db.refresh(menu)
        return menu

    return _make


@pytest.fixture
def make_location(db):
    def _make(name="sidebar", tenant_id=None, is_active=True):
        location = MenuLocation(
            name=name,
            label={"en": name.title()},
            layout_type="sidebar",
            max_depth=3,
            tenant_id=tenant_id,
            is_active=is_active,
        )
        db.add(location)
        db.commit()
        db.refresh(location)
        return location

    return _make


@pytest.fixture
def assign(db):
    def _assign(location, menu, assignment_type, assignment_id=None, priority=0, tenant_id=None, is_active=True):
        assignment = MenuLocationAssignment(
            location_id=location.id,
            menu_id=menu.id,
            assignment_type=assignment_type,
            assignment_id=None if assignment_id is None else str(assignment_id),
            priority=priority,
            tenant_id=tenant_id,
            is_active=is_active,
        )
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment

    return _assign
