"""
Router for menus and menu items.

Items are stored flat with a parent pointer and returned as trees. Item
nesting is limited to `menu_item_max_depth` levels.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from menu_service.db import get_db
from menu_service.dependencies.authz import ensure_can_modify, get_current_user, require_admin
from menu_service.dependencies.config import Settings, get_settings
from menu_service.models.menu import Menu, MenuItem
from menu_service.models.user import User
from menu_service.schemas.menu_schemas import (
    ApiResponse,
    CreateMenuItemRequest,
    CreateMenuRequest,
    MenuItemNodeSchema,
    MenuSchema,
    UpdateMenuItemRequest,
    UpdateMenuRequest,
)
from menu_service.services.menu_tree import MenuNode, build_menu_tree
from menu_service.utils.tenancy import tenant_or_global

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menus", tags=["Menus"])

# Module-level dependency objects to avoid calling Depends() in function defaults
db_dependency = Depends(get_db)
settings_dependency = Depends(get_settings)
current_user_dependency = Depends(get_current_user)
admin_dependency = Depends(require_admin)


# ============================================================================
# Helper Functions
# ============================================================================


def _menu_schema(menu: Menu, visible_only: bool = True) -> MenuSchema:
    return MenuSchema(
        id=menu.id,
        name=menu.name,
        slug=menu.slug,
        description=menu.description,
        locale=menu.locale,
        tenant_id=menu.tenant_id,
        is_active=menu.is_active,
        items=_node_schemas(build_menu_tree(menu.items, visible_only=visible_only)),
    )


def _node_schemas(nodes: list[MenuNode]) -> list[MenuItemNodeSchema]:
    return [MenuItemNodeSchema.model_validate(node) for node in nodes]


def _get_menu(db: Session, menu_id: int, tenant_id: int | None) -> Menu:
    menu = (
        db.query(Menu)
        .options(selectinload(Menu.items))
        .filter(Menu.id == menu_id, tenant_or_global(Menu.tenant_id, tenant_id))
        .one_or_none()
    )
    if not menu:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu not found")
    return menu


def _get_editable_menu(db: Session, menu_id: int, user: User) -> Menu:
    menu = _get_menu(db, menu_id, user.tenant_id)
    ensure_can_modify(menu.tenant_id, user, "Global menus can only be changed by a superadmin")
    return menu


def _get_item(menu: Menu, item_id: int) -> MenuItem:
    item = next((i for i in menu.items if i.id == item_id), None)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu item not found")
    return item


def _item_depth(menu: Menu, item: MenuItem) -> int:
    """1 for a root item, 2 for its children, and so on."""
    by_id = {i.id: i for i in menu.items}
    depth = 1
    current = item
    seen = {item.id}
    while current.parent_id is not None and current.parent_id in by_id and current.parent_id not in seen:
        seen.add(current.parent_id)
        current = by_id[current.parent_id]
        depth += 1
    return depth


def _subtree_height(menu: Menu, item: MenuItem) -> int:
    """Levels in the subtree rooted at `item`, counting `item` itself."""
    children = [i for i in menu.items if i.parent_id == item.id]
    if not children:
        return 1
    return 1 + max(_subtree_height(menu, child) for child in children)


def _validate_parent(menu: Menu, parent_id: int, max_depth: int, item: MenuItem | None = None) -> MenuItem:
    parent = next((i for i in menu.items if i.id == parent_id), None)
    if parent is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Parent item not found in this menu",
        )

    if item is not None:
        # walking up from the new parent must never reach the item itself
        by_id = {i.id: i for i in menu.items}
        current = parent
        while current is not None:
            if current.id == item.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="An item cannot be moved under itself or one of its descendants",
                )
            current = by_id.get(current.parent_id) if current.parent_id is not None else None

    height = _subtree_height(menu, item) if item is not None else 1
    if _item_depth(menu, parent) + height > max_depth:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum menu depth ({max_depth} levels) exceeded",
        )
    return parent


# ============================================================================
# Menus
# ============================================================================


@router.get(
    "",
    response_model=ApiResponse[list[MenuSchema]],
    summary="List menus",
    description="Active menus of the caller's tenant plus global menus, with their visible item trees.",
)
def list_menus(
    locale: Annotated[str | None, Query(description="Filter by locale (e.g., tr, en)")] = None,
    current_user: User = current_user_dependency,
    db: Session = db_dependency,
):
    query = (
        db.query(Menu)
        .options(selectinload(Menu.items))
        .filter(Menu.is_active.is_(True), tenant_or_global(Menu.tenant_id, current_user.tenant_id))
    )
    if locale:
        query = query.filter(Menu.locale == locale)
    menus = query.order_by(Menu.name, Menu.id).all()
    return ApiResponse(data=[_menu_schema(menu) for menu in menus])


@router.post(
    "",
    response_model=ApiResponse[MenuSchema],
    summary="(admin) Create menu",
    description="Create an empty menu. Slugs are unique per tenant and locale.",
)
def create_menu(
    request: CreateMenuRequest,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    duplicate_query = db.query(Menu).filter(Menu.slug == request.slug, Menu.locale == request.locale)
    if current_user.tenant_id is None:
        duplicate_query = duplicate_query.filter(Menu.tenant_id.is_(None))
    else:
        duplicate_query = duplicate_query.filter(Menu.tenant_id == current_user.tenant_id)
    if duplicate_query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A menu with this slug already exists")

    try:
        menu = Menu(
            name=request.name,
            slug=request.slug,
            description=request.description,
            locale=request.locale,
            tenant_id=current_user.tenant_id,
            is_active=True,
            created_by=current_user.id,
        )
        db.add(menu)
        db.commit()
        db.refresh(menu)
        logger.info(f"Menu '{menu.slug}' ({menu.locale}) created by {current_user.username}")
        return ApiResponse(data=_menu_schema(menu), message="Menu created successfully")

    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Menu slug '{request.slug}' ({request.locale}) already taken: {e.orig}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A menu with this slug already exists") from e

    except Exception as e:
        db.rollback()
        logger.error(f"Error creating menu: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create menu",
        ) from e


@router.put(
    "/{menu_id}",
    response_model=ApiResponse[MenuSchema],
    summary="(admin) Update menu",
)
def update_menu(
    menu_id: int,
    request: UpdateMenuRequest,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    menu = _get_editable_menu(db, menu_id, current_user)
    try:
        for key, value in request.model_dump(exclude_unset=True).items():
            setattr(menu, key, value)
        db.commit()
        db.refresh(menu)
        return ApiResponse(data=_menu_schema(menu), message="Menu updated successfully")

    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Menu {menu_id} update conflicts with an existing menu: {e.orig}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A menu with this slug already exists") from e

    except Exception as e:
        db.rollback()
        logger.error(f"Error updating menu {menu_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update menu",
        ) from e


@router.delete(
    "/{menu_id}",
    response_model=ApiResponse[None],
    summary="(admin) Delete menu",
    description="Delete a menu with all its items and location assignments.",
)
def delete_menu(
    menu_id: int,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    menu = _get_editable_menu(db, menu_id, current_user)
    try:
        db.delete(menu)
        db.commit()
        logger.info(f"Menu {menu_id} deleted by {current_user.username}")
        return ApiResponse(message="Menu deleted successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting menu {menu_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete menu",
        ) from e


# ============================================================================
# Menu items
# ============================================================================


@router.get(
    "/{menu_id}/items",
    response_model=ApiResponse[list[MenuItemNodeSchema]],
    summary="List menu items",
    description="All items of the menu as trees, hidden items included.",
)
def list_menu_items(
    menu_id: int,
    current_user: User = current_user_dependency,
    db: Session = db_dependency,
):
    menu = _get_menu(db, menu_id, current_user.tenant_id)
    return ApiResponse(data=_node_schemas(build_menu_tree(menu.items, visible_only=False)))


@router.post(
    "/{menu_id}/items",
    response_model=ApiResponse[MenuItemNodeSchema],
    summary="(admin) Create menu item",
    description="Add an item to the menu, optionally under a parent item of the same menu.",
)
def create_menu_item(
    menu_id: int,
    request: CreateMenuItemRequest,
    current_user: User = admin_dependency,
    settings: Settings = settings_dependency,
    db: Session = db_dependency,
):
    menu = _get_editable_menu(db, menu_id, current_user)
    if request.parent_id is not None:
        _validate_parent(menu, request.parent_id, settings.menu_item_max_depth)

    try:
        item = MenuItem(menu_id=menu.id, tenant_id=current_user.tenant_id, **request.model_dump())
        db.add(item)
        db.commit()
        db.refresh(item)
        return ApiResponse(data=MenuItemNodeSchema.model_validate(MenuNode.from_item(item)), message="Menu item created successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error creating item in menu {menu_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create menu item",
        ) from e


@router.put(
    "/{menu_id}/items/{item_id}",
    response_model=ApiResponse[MenuItemNodeSchema],
    summary="(admin) Update menu item",
    description="Update the given fields of an item. Moving it under another parent keeps the depth limit.",
)
def update_menu_item(
    menu_id: int,
    item_id: int,
    request: UpdateMenuItemRequest,
    current_user: User = admin_dependency,
    settings: Settings = settings_dependency,
    db: Session = db_dependency,
):
    menu = _get_editable_menu(db, menu_id, current_user)
    item = _get_item(menu, item_id)
    changes = request.model_dump(exclude_unset=True)
    if changes.get("parent_id") is not None and changes["parent_id"] != item.parent_id:
        _validate_parent(menu, changes["parent_id"], settings.menu_item_max_depth, item=item)

    try:
        for key, value in changes.items():
            setattr(item, key, value)
        db.commit()
        db.refresh(item)
        return ApiResponse(data=MenuItemNodeSchema.model_validate(MenuNode.from_item(item)), message="Menu item updated successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error updating menu item {item_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update menu item",
        ) from e


@router.delete(
    "/{menu_id}/items/{item_id}",
    response_model=ApiResponse[None],
    summary="(admin) Delete menu item",
    description="Delete an item and all of its descendants.",
)
def delete_menu_item(
    menu_id: int,
    item_id: int,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    menu = _get_editable_menu(db, menu_id, current_user)
    item = _get_item(menu, item_id)
    try:
        db.delete(item)
        db.commit()
        return ApiResponse(message="Menu item deleted successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting menu item {item_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete menu item",
        ) from e
