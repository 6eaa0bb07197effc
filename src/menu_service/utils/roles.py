from __future__ import annotations

import enum


class RoleTier(enum.StrEnum):
    """Normalized role hierarchy (lowest to highest).

    Role display names coming from sessions ("Admin", "superadmin",
    "Super-Admin", ...) are mapped onto a tier once, at the request boundary.
    Names outside the hierarchy land on `viewer`.
    """

    viewer = "viewer"
    staff = "staff"
    manager = "manager"
    admin = "admin"
    superadmin = "superadmin"

    @classmethod
    def from_role_name(cls, role_name: str | None) -> RoleTier:
        normalized = _normalize_role_name(role_name)
        return _ROLE_ALIASES.get(normalized, cls.viewer)

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    @property
    def is_admin(self) -> bool:
        return self in ADMIN_TIERS

    def at_least(self, other: RoleTier) -> bool:
        return self.rank >= other.rank


_TIER_ORDER: tuple[RoleTier, ...] = (
    RoleTier.viewer,
    RoleTier.staff,
    RoleTier.manager,
    RoleTier.admin,
    RoleTier.superadmin,
)

ADMIN_TIERS = frozenset({RoleTier.admin, RoleTier.superadmin})

_ROLE_ALIASES: dict[str, RoleTier] = {
    "viewer": RoleTier.viewer,
    "guest": RoleTier.viewer,
    "staff": RoleTier.staff,
    "user": RoleTier.staff,
    "manager": RoleTier.manager,
    "admin": RoleTier.admin,
    "superadmin": RoleTier.superadmin,
}


def _normalize_role_name(role_name: str | None) -> str:
    # "Super Admin", "super_admin" and "SUPER-ADMIN" all collapse to "superadmin"
    return "".join(ch for ch in (role_name or "").strip().lower() if ch not in " _-")
