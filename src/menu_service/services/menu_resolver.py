"""
Menu resolution for a UI location.

Given a location name and the requester's identity, pick the one menu that
applies (user > role > branch > default), filter its item tree by the
requester's role and refresh module root icons from the module registry.

The only write performed here is the lazy creation of a missing location.
Nothing is cached; every call reads the current configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from menu_service.models.menu import Menu, MenuLocation, MenuLocationAssignment
from menu_service.services.menu_store import MenuStore
from menu_service.services.menu_tree import MenuNode, build_menu_tree, count_nodes, enrich_module_icons, filter_by_permissions
from menu_service.utils.roles import RoleTier

logger = logging.getLogger(__name__)


class MenuResolutionError(Exception):
    """Base class for resolution failures."""


class UnauthorizedError(MenuResolutionError):
    pass


class InvalidLocationError(MenuResolutionError):
    pass


class TenantRequiredError(MenuResolutionError):
    pass


class LocationNotFoundError(MenuResolutionError):
    pass


class DataAccessError(MenuResolutionError):
    """A store failure; the message is the underlying driver/ORM message."""

    @property
    def is_tenant_related(self) -> bool:
        return "tenant" in str(self).lower()


class IconSource(Protocol):
    def icon_map(self) -> dict[str, str]: ...


@dataclass(slots=True)
class RequesterContext:
    user_id: str | None
    role_name: str | None
    branch_id: str | None = None
    tenant_id: int | None = None
    tier: RoleTier = field(init=False)

    def __post_init__(self):
        self.tier = RoleTier.from_role_name(self.role_name)


@dataclass(slots=True)
class ResolvedMenu:
    menu: Menu
    items: list[MenuNode]
    location: MenuLocation
    assignment: MenuLocationAssignment


def select_assignment(
    assignments: Iterable[MenuLocationAssignment],
    requester: RequesterContext,
    role_id: str | None,
) -> MenuLocationAssignment | None:
    """
    Pick the assignment that applies to `requester`, first match wins.

    Order: user id, role id, role name (records that stored the name instead
    of the id), branch id, default. `priority` only breaks ties within one
    of those steps.
    """
    candidates = sorted(
        (a for a in assignments if a.menu is not None),
        key=lambda a: (-(a.priority or 0), a.id or 0),
    )
    steps = (
        ("user", requester.user_id),
        ("role", role_id),
        ("role", requester.role_name),
        ("branch", requester.branch_id),
    )
    for assignment_type, target in steps:
        if not target:
            continue
        for assignment in candidates:
            if assignment.assignment_type == assignment_type and assignment.assignment_id == str(target):
                return assignment
    for assignment in candidates:
        if assignment.assignment_type == "default":
            return assignment
    return None


class MenuResolver:
    def __init__(self, store: MenuStore, modules: IconSource, location_max_depth: int = 3):
        self.store = store
        self.modules = modules
        self.location_max_depth = location_max_depth

    def resolve(self, location_name: str, requester: RequesterContext | None) -> ResolvedMenu | None:
        """
        Resolve the menu for `location_name`.

        Returns None when no assignment applies to the requester. Raises a
        `MenuResolutionError` subclass for every failure.
        """
        if requester is None or not requester.user_id:
            raise UnauthorizedError("Unauthorized")
        if not location_name or not location_name.strip():
            raise InvalidLocationError("Location parameter is required")

        try:
            location = self._locate(location_name, requester)
            role_id = self._lookup_role_id(requester)
            assignments = self.store.list_assignments(location.id, requester.tenant_id)
        except SQLAlchemyError as exc:
            self.store.rollback()
            raise DataAccessError(str(exc)) from exc

        logger.debug(
            f"[menu-resolver] location={location_name} assignments={len(assignments)} "
            f"user={requester.user_id} role_id={role_id} branch={requester.branch_id}"
        )

        selected = select_assignment(assignments, requester, role_id)
        if selected is None:
            logger.info(f"[menu-resolver] No menu assigned to '{location_name}' for user {requester.user_id}")
            return None

        try:
            icon_map = self.modules.icon_map()
        except SQLAlchemyError as exc:
            self.store.rollback()
            raise DataAccessError(str(exc)) from exc

        tree = build_menu_tree(selected.menu.items)
        filtered = filter_by_permissions(tree, requester.role_name, requester.tier)
        items = enrich_module_icons(filtered, icon_map)

        logger.info(
            f"[menu-resolver] '{location_name}' -> menu {selected.menu_id} via {selected.assignment_type} "
            f"assignment ({count_nodes(items)}/{count_nodes(tree)} items)"
        )
        return ResolvedMenu(menu=selected.menu, items=items, location=location, assignment=selected)

    def _locate(self, location_name: str, requester: RequesterContext) -> MenuLocation:
        location = self.store.find_location(location_name, requester.tenant_id)
        if location is not None:
            return location

        if not requester.tier.is_admin:
            raise LocationNotFoundError(f"Menu location '{location_name}' not found")
        if requester.tenant_id is None:
            raise TenantRequiredError(
                f"Location '{location_name}' not found and cannot be auto-created. Tenant/company context is required."
            )

        location, _ = self.store.ensure_location(location_name, requester.tenant_id, self.location_max_depth)
        if location is None:
            raise DataAccessError(f"Failed to create location '{location_name}'")
        return location

    def _lookup_role_id(self, requester: RequesterContext) -> str | None:
        if not requester.role_name:
            return None
        try:
            return self.store.find_role_id(requester.role_name, requester.tenant_id)
        except SQLAlchemyError as exc:
            # Role assignments just won't match; name-based records still can
            self.store.rollback()
            logger.warning(f"Failed to look up role id for '{requester.role_name}': {exc}")
            return None
