"""
ORM-backed access to menu locations, assignments and roles.

Every lookup is scoped with `tenant_or_global`, so a tenant sees its own
rows plus the global ones.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from menu_service.models.menu import Menu, MenuLocation, MenuLocationAssignment
from menu_service.models.rbac import Role
from menu_service.utils.tenancy import tenant_or_global

logger = logging.getLogger(__name__)


# Well-known locations created on demand for a tenant
DEFAULT_LOCATIONS: dict[str, dict[str, Any]] = {
    "sidebar": {
        "label": {"tr": "Kenar Menü", "en": "Sidebar Menu", "de": "Seitenmenü", "ar": "القائمة الجانبية"},
        "description": "Main sidebar navigation menu",
        "layout_type": "sidebar",
        "max_depth": 3,
    },
    "top": {
        "label": {"tr": "Üst Menü", "en": "Top Menu", "de": "Oberes Menü", "ar": "القائمة العلوية"},
        "description": "Top horizontal navigation menu",
        "layout_type": "top",
        "max_depth": 2,
    },
    "mobile": {
        "label": {"tr": "Mobil Menü", "en": "Mobile Menu", "de": "Mobile Menü", "ar": "قائمة الجوال"},
        "description": "Mobile navigation menu",
        "layout_type": "both",
        "max_depth": 2,
    },
    "footer": {
        "label": {"tr": "Footer Menü", "en": "Footer Menu", "de": "Fußzeile Menü", "ar": "قائمة التذييل"},
        "description": "Footer primary menu",
        "layout_type": "both",
        "max_depth": 1,
    },
}


def default_location_attributes(name: str, max_depth: int = 3) -> dict[str, Any]:
    """Label/layout attributes for a location name, falling back to a generic sidebar."""
    if name in DEFAULT_LOCATIONS:
        return dict(DEFAULT_LOCATIONS[name])
    return {
        "label": {"tr": name, "en": name},
        "description": f"{name} location",
        "layout_type": "sidebar",
        "max_depth": max_depth,
    }


class MenuStore:
    def __init__(self, db: Session):
        self.db = db

    # ---- Locations ----
    def find_location(self, name: str, tenant_id: int | None) -> MenuLocation | None:
        return (
            self.db.query(MenuLocation)
            .filter(
                MenuLocation.name == name,
                MenuLocation.is_active.is_(True),
                tenant_or_global(MenuLocation.tenant_id, tenant_id),
            )
            # tenant rows win over global rows of the same name
            .order_by(MenuLocation.tenant_id.is_(None), MenuLocation.id)
            .first()
        )

    def ensure_location(self, name: str, tenant_id: int, max_depth: int = 3) -> tuple[MenuLocation | None, bool]:
        """
        Create the location `name` for `tenant_id` unless another request beat us to it.

        Returns `(location, created)`. A uniqueness conflict on insert means a
        concurrent request created the row first; the session is rolled back
        and the row re-read. `location` is None only when the re-read also
        finds nothing (for example an inactive row holds the name).
        """
        location = MenuLocation(name=name, tenant_id=tenant_id, is_active=True, **default_location_attributes(name, max_depth))
        self.db.add(location)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(f"Location '{name}' already created for tenant {tenant_id}, re-reading ({exc.orig})")
            return self.find_location(name, tenant_id), False
        self.db.refresh(location)
        logger.info(f"Auto-created menu location '{name}' for tenant {tenant_id}")
        return location, True

    def list_locations(self, tenant_id: int | None) -> list[MenuLocation]:
        return (
            self.db.query(MenuLocation)
            .options(selectinload(MenuLocation.assignments).selectinload(MenuLocationAssignment.menu))
            .filter(MenuLocation.is_active.is_(True), tenant_or_global(MenuLocation.tenant_id, tenant_id))
            .order_by(MenuLocation.name, MenuLocation.id)
            .all()
        )

    def ensure_default_locations(self, tenant_id: int) -> list[MenuLocation]:
        """Create any well-known location the tenant is missing; returns the newly created ones."""
        existing = {
            name
            for (name,) in self.db.query(MenuLocation.name).filter(MenuLocation.tenant_id == tenant_id).all()
        }
        created = []
        for name in DEFAULT_LOCATIONS:
            if name in existing:
                continue
            location, was_created = self.ensure_location(name, tenant_id)
            if was_created and location is not None:
                created.append(location)
        return created

    # ---- Roles ----
    def find_role_id(self, role_name: str, tenant_id: int | None) -> str | None:
        role = (
            self.db.query(Role.id)
            .filter(Role.name == role_name, tenant_or_global(Role.tenant_id, tenant_id))
            .order_by(Role.tenant_id.is_(None), Role.id)
            .first()
        )
        return str(role.id) if role else None

    # ---- Assignments ----
    def list_assignments(self, location_id: int, tenant_id: int | None) -> list[MenuLocationAssignment]:
        """
        Active assignments of a location with their menus and all menu items loaded.

        Ordered by priority (highest first), then by id for a stable order
        inside one assignment type.
        """
        return (
            self.db.query(MenuLocationAssignment)
            .options(selectinload(MenuLocationAssignment.menu).selectinload(Menu.items))
            .filter(
                MenuLocationAssignment.location_id == location_id,
                MenuLocationAssignment.is_active.is_(True),
                tenant_or_global(MenuLocationAssignment.tenant_id, tenant_id),
            )
            .order_by(MenuLocationAssignment.priority.desc(), MenuLocationAssignment.id)
            .all()
        )

    def rollback(self) -> None:
        self.db.rollback()
