from .auth_schemas import TokenResponse, UserResponse
from .menu_schemas import (
    LocationSchema,
    MenuItemNodeSchema,
    MenuResolutionResponse,
    MenuSchema,
    ModuleSchema,
)

__all__ = [
    "TokenResponse",
    "UserResponse",
    "LocationSchema",
    "MenuItemNodeSchema",
    "MenuResolutionResponse",
    "MenuSchema",
    "ModuleSchema",
]
