from .menu import Menu, MenuItem, MenuLocation, MenuLocationAssignment
from .module import InstalledModule
from .rbac import Role
from .tenant import Tenant
from .user import User

__all__ = [
    "User",
    "Tenant",
    "Role",
    "Menu",
    "MenuItem",
    "MenuLocation",
    "MenuLocationAssignment",
    "InstalledModule",
]
