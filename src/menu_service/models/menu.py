"""
Menu models: locations, menus, menu items and location assignments.

A location is a mount point in the UI (sidebar, top bar, ...). Menus are
bound to locations through assignments, each scoped to a user, a role, a
branch or the tenant-wide default.
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from menu_service.db import Base
from menu_service.models.user import _utc_now

# Locale map columns ({"tr": "...", "en": "..."}); JSONB on PostgreSQL, plain JSON elsewhere
LocalizedText = JSON().with_variant(JSONB(), "postgresql")

ASSIGNMENT_TYPES = ("user", "role", "branch", "default")
LAYOUT_TYPES = ("sidebar", "top", "both")


class MenuLocation(Base):
    __tablename__ = "menu_locations"

    id = Column(Integer, primary_key=True)
    name = Column(String(64), nullable=False, index=True)  # e.g. 'sidebar', 'top', 'mobile', 'footer'
    label = Column(LocalizedText, nullable=False)
    description = Column(Text, nullable=True)
    layout_type = Column(String(16), nullable=False, default="sidebar")
    max_depth = Column(Integer, nullable=False, default=3)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)  # None = global
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)

    assignments = relationship("MenuLocationAssignment", back_populates="location", cascade="all, delete-orphan")

    __table_args__ = (UniqueConstraint("name", "tenant_id", name="uq_menu_location_name_tenant"),)


class Menu(Base):
    __tablename__ = "menus"

    id = Column(Integer, primary_key=True)
    name = Column(String(128), nullable=False)
    slug = Column(String(128), nullable=False, index=True)
    description = Column(Text, nullable=True)
    locale = Column(String(8), nullable=False, default="tr")
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)

    # Every item of the menu regardless of depth; trees are built in memory
    items = relationship(
        "MenuItem",
        back_populates="menu",
        order_by="MenuItem.order",
        cascade="all, delete-orphan",
    )
    assignments = relationship("MenuLocationAssignment", back_populates="menu", cascade="all, delete-orphan")

    __table_args__ = (UniqueConstraint("slug", "tenant_id", "locale", name="uq_menu_slug_tenant_locale"),)


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True)
    menu_id = Column(Integer, ForeignKey("menus.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=True, index=True)
    label = Column(LocalizedText, nullable=False)
    href = Column(String(512), nullable=False)
    icon = Column(String(64), nullable=True)
    target = Column(String(16), nullable=True)
    css_class = Column(String(128), nullable=True)
    description = Column(LocalizedText, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    visible = Column(Boolean, nullable=False, default=True)
    module_slug = Column(String(64), nullable=True, index=True)
    menu_group = Column(String(64), nullable=True)
    required_role = Column(String(64), nullable=True)  # Role display name, compared exactly
    required_permission = Column(String(64), nullable=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)
    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)

    menu = relationship("Menu", back_populates="items")
    parent = relationship("MenuItem", remote_side=[id], back_populates="children")
    children = relationship(
        "MenuItem",
        back_populates="parent",
        order_by="MenuItem.order",
        cascade="all, delete-orphan",
    )


class MenuLocationAssignment(Base):
    """
    Binds a menu to a location for a user, role, branch or as the default.

    Resolution order is fixed by `assignment_type`; `priority` only orders
    candidates of the same type.
    """

    __tablename__ = "menu_location_assignments"

    id = Column(Integer, primary_key=True)
    location_id = Column(Integer, ForeignKey("menu_locations.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_id = Column(Integer, ForeignKey("menus.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_type = Column(String(16), nullable=False)  # 'user' | 'role' | 'branch' | 'default'
    assignment_id = Column(String(64), nullable=True)  # user id, role id (or legacy role name), branch id
    priority = Column(Integer, nullable=False, default=0)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utc_now, nullable=False)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)

    location = relationship("MenuLocation", back_populates="assignments")
    menu = relationship("Menu", back_populates="assignments")
