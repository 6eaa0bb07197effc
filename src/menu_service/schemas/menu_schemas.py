from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

AssignmentType = Literal["user", "role", "branch", "default"]
LayoutType = Literal["sidebar", "top", "both"]


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serializes camelCase (the web client's wire format)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[T]):
    """`{success, data, message}` envelope used by the menu administration endpoints."""

    success: bool = True
    data: T | None = None
    message: str | None = None


def _localize(value: Any) -> Any:
    # Plain strings become a two-locale map, matching how labels are stored
    if isinstance(value, str):
        return {"tr": value, "en": value}
    return value


# ============================================================================
# Resolver response
# ============================================================================


class MenuItemNodeSchema(CamelModel):
    id: int
    menu_id: int | None = None
    parent_id: int | None = None
    label: dict[str, str]
    href: str
    icon: str | None = None
    target: str | None = None
    css_class: str | None = None
    description: dict[str, str] | None = None
    order: int = 0
    visible: bool = True
    module_slug: str | None = None
    menu_group: str | None = None
    required_role: str | None = None
    required_permission: str | None = None
    children: list[MenuItemNodeSchema] = Field(default_factory=list)


class ResolvedMenuSchema(CamelModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    locale: str
    tenant_id: int | None = None
    is_active: bool
    items: list[MenuItemNodeSchema]


class ResolvedLocationSchema(CamelModel):
    id: int
    name: str
    label: dict[str, str]
    layout_type: str
    max_depth: int


class ResolvedAssignmentSchema(CamelModel):
    type: str
    id: str | None = None
    priority: int


class MenuResolutionData(CamelModel):
    menu: ResolvedMenuSchema
    location: ResolvedLocationSchema
    assignment: ResolvedAssignmentSchema


class MenuResolutionResponse(CamelModel):
    success: bool = True
    data: MenuResolutionData | None = None
    message: str | None = None


# ============================================================================
# Locations & assignments
# ============================================================================


class AssignmentMenuSummary(CamelModel):
    id: int
    name: str
    slug: str


class AssignmentSchema(CamelModel):
    id: int
    location_id: int
    menu_id: int
    assignment_type: str
    assignment_id: str | None = None
    priority: int
    tenant_id: int | None = None
    is_active: bool
    menu: AssignmentMenuSummary | None = None


class LocationSchema(CamelModel):
    id: int
    name: str
    label: dict[str, str]
    description: str | None = None
    layout_type: str
    max_depth: int
    tenant_id: int | None = None
    is_active: bool
    assignments: list[AssignmentSchema] = Field(default_factory=list)


class CreateLocationRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=64)
    label: dict[str, str]
    description: str | None = None
    layout_type: LayoutType
    max_depth: int = Field(default=3, ge=1, le=5)

    @field_validator("label", mode="before")
    @classmethod
    def normalize_label(cls, value):
        return _localize(value)


class UpdateLocationRequest(CamelModel):
    label: dict[str, str] | None = None
    description: str | None = None
    layout_type: LayoutType | None = None
    max_depth: int | None = Field(default=None, ge=1, le=5)
    is_active: bool | None = None

    @field_validator("label", mode="before")
    @classmethod
    def normalize_label(cls, value):
        return _localize(value)


class CreateAssignmentRequest(CamelModel):
    menu_id: int
    assignment_type: AssignmentType
    assignment_id: str | None = Field(default=None, max_length=64)
    priority: int = 0

    @field_validator("assignment_id", mode="before")
    @classmethod
    def stringify_target(cls, value):
        if value is None or isinstance(value, str):
            return value or None
        return str(value)


# ============================================================================
# Menus & items
# ============================================================================


class MenuSchema(CamelModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    locale: str
    tenant_id: int | None = None
    is_active: bool
    items: list[MenuItemNodeSchema] = Field(default_factory=list)


class CreateMenuRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    slug: str = Field(..., min_length=1, max_length=128)
    description: str | None = None
    locale: str = Field(default="tr", max_length=8)


class UpdateMenuRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=128)
    slug: str | None = Field(default=None, min_length=1, max_length=128)
    description: str | None = None
    is_active: bool | None = None


class CreateMenuItemRequest(CamelModel):
    label: dict[str, str]
    href: str = Field(..., min_length=1, max_length=512)
    icon: str | None = None
    target: str | None = None
    css_class: str | None = None
    description: dict[str, str] | None = None
    order: int = 0
    visible: bool = True
    module_slug: str | None = None
    menu_group: str | None = None
    parent_id: int | None = None
    required_role: str | None = None
    required_permission: str | None = None

    @field_validator("label", "description", mode="before")
    @classmethod
    def normalize_text(cls, value):
        return _localize(value)


class UpdateMenuItemRequest(CamelModel):
    label: dict[str, str] | None = None
    href: str | None = Field(default=None, min_length=1, max_length=512)
    icon: str | None = None
    target: str | None = None
    css_class: str | None = None
    description: dict[str, str] | None = None
    order: int | None = None
    visible: bool | None = None
    module_slug: str | None = None
    menu_group: str | None = None
    parent_id: int | None = None
    required_role: str | None = None
    required_permission: str | None = None

    @field_validator("label", "description", mode="before")
    @classmethod
    def normalize_text(cls, value):
        return _localize(value)


# ============================================================================
# Modules
# ============================================================================


class ModuleSchema(CamelModel):
    slug: str
    name: str
    icon: str | None = None
    version: str | None = None
    is_active: bool


class UpsertModuleRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=128)
    icon: str | None = Field(default=None, max_length=64)
    version: str | None = Field(default=None, max_length=32)
    is_active: bool = True
