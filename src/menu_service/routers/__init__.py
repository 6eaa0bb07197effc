from . import (  # noqa: F401
    auth,
    health,
    menu_locations,
    menu_resolver,
    menus,
    modules,
    rbac,
)

__all__ = [
    "auth",
    "health",
    "menu_locations",
    "menu_resolver",
    "menus",
    "modules",
    "rbac",
]
