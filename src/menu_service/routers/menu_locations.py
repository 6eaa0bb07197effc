"""
Router for menu locations and their menu assignments.

Locations are listed for the caller's tenant plus the global ones. Admins of
a tenant get the well-known locations (sidebar, top, mobile, footer) created
on first listing.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from menu_service.db import get_db
from menu_service.dependencies.authz import ensure_can_modify, get_current_user, require_admin
from menu_service.models.menu import Menu, MenuLocation, MenuLocationAssignment
from menu_service.models.user import User
from menu_service.schemas.menu_schemas import (
    ApiResponse,
    AssignmentSchema,
    CreateAssignmentRequest,
    CreateLocationRequest,
    LocationSchema,
    UpdateLocationRequest,
)
from menu_service.services.menu_store import MenuStore
from menu_service.utils.roles import RoleTier
from menu_service.utils.tenancy import tenant_or_global

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menu-locations", tags=["Menu_Locations"])

# Module-level dependency objects to avoid calling Depends() in function defaults
db_dependency = Depends(get_db)
current_user_dependency = Depends(get_current_user)
admin_dependency = Depends(require_admin)


# ============================================================================
# Helper Functions
# ============================================================================


def _visible_assignments(location: MenuLocation, tenant_id: int | None) -> list[MenuLocationAssignment]:
    visible = [
        a
        for a in location.assignments
        if a.is_active and (a.tenant_id is None or a.tenant_id == tenant_id)
    ]
    return sorted(visible, key=lambda a: (-(a.priority or 0), a.id))


def _location_schema(location: MenuLocation, tenant_id: int | None) -> LocationSchema:
    schema = LocationSchema.model_validate(location)
    schema.assignments = [AssignmentSchema.model_validate(a) for a in _visible_assignments(location, tenant_id)]
    return schema


def _get_editable_location(db: Session, location_id: int, user: User) -> MenuLocation:
    """A location the admin may change: their tenant's own rows, or any row for superadmins."""
    location = (
        db.query(MenuLocation)
        .filter(MenuLocation.id == location_id, tenant_or_global(MenuLocation.tenant_id, user.tenant_id))
        .one_or_none()
    )
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu location not found")
    ensure_can_modify(location.tenant_id, user, "Global locations can only be changed by a superadmin")
    return location


# ============================================================================
# Locations
# ============================================================================


@router.get(
    "",
    response_model=ApiResponse[list[LocationSchema]],
    summary="List menu locations",
    description="Locations of the caller's tenant plus global locations, each with its active assignments.",
)
def list_locations(
    current_user: User = current_user_dependency,
    db: Session = db_dependency,
):
    store = MenuStore(db)
    try:
        if current_user.tenant_id is not None and RoleTier.from_role_name(current_user.role_name).is_admin:
            created = store.ensure_default_locations(current_user.tenant_id)
            if created:
                logger.info(f"Created default locations {[loc.name for loc in created]} for tenant {current_user.tenant_id}")
        locations = store.list_locations(current_user.tenant_id)
        return ApiResponse(data=[_location_schema(loc, current_user.tenant_id) for loc in locations])

    except Exception as e:
        db.rollback()
        logger.error(f"Error fetching menu locations: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch menu locations",
        ) from e


@router.post(
    "",
    response_model=ApiResponse[LocationSchema],
    summary="(admin) Create menu location",
    description="Create a location for the caller's tenant. Names are unique per tenant.",
)
def create_location(
    request: CreateLocationRequest,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    if current_user.tenant_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tenant ID is required")

    existing = (
        db.query(MenuLocation)
        .filter(MenuLocation.name == request.name, MenuLocation.tenant_id == current_user.tenant_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A location with this name already exists")

    try:
        location = MenuLocation(
            name=request.name,
            label=request.label,
            description=request.description,
            layout_type=request.layout_type,
            max_depth=request.max_depth,
            tenant_id=current_user.tenant_id,
            is_active=True,
        )
        db.add(location)
        db.commit()
        db.refresh(location)
        return ApiResponse(data=_location_schema(location, current_user.tenant_id), message="Menu location created successfully")

    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Menu location '{request.name}' already exists for tenant {current_user.tenant_id}: {e.orig}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A location with this name already exists") from e

    except Exception as e:
        db.rollback()
        logger.error(f"Error creating menu location: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create menu location",
        ) from e


@router.put(
    "/{location_id}",
    response_model=ApiResponse[LocationSchema],
    summary="(admin) Update menu location",
)
def update_location(
    location_id: int,
    request: UpdateLocationRequest,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    location = _get_editable_location(db, location_id, current_user)
    try:
        for key, value in request.model_dump(exclude_unset=True).items():
            setattr(location, key, value)
        db.commit()
        db.refresh(location)
        return ApiResponse(data=_location_schema(location, current_user.tenant_id), message="Menu location updated successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error updating menu location {location_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update menu location",
        ) from e


@router.delete(
    "/{location_id}",
    response_model=ApiResponse[None],
    summary="(admin) Delete menu location",
    description="Delete a location together with its assignments. Menus are kept.",
)
def delete_location(
    location_id: int,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    location = _get_editable_location(db, location_id, current_user)
    try:
        db.delete(location)
        db.commit()
        return ApiResponse(message="Menu location deleted successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting menu location {location_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete menu location",
        ) from e


# ============================================================================
# Assignments
# ============================================================================


@router.post(
    "/{location_id}/assign",
    response_model=ApiResponse[AssignmentSchema],
    summary="(admin) Assign a menu to a location",
    description="Bind a menu to the location for a user, role, branch or as the default.",
)
def assign_menu(
    location_id: int,
    request: CreateAssignmentRequest,
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    location = (
        db.query(MenuLocation)
        .filter(MenuLocation.id == location_id, tenant_or_global(MenuLocation.tenant_id, current_user.tenant_id))
        .one_or_none()
    )
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu location not found")

    menu = (
        db.query(Menu)
        .filter(Menu.id == request.menu_id, tenant_or_global(Menu.tenant_id, current_user.tenant_id))
        .one_or_none()
    )
    if not menu:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu not found")

    if request.assignment_type != "default" and not request.assignment_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"assignmentId is required for '{request.assignment_type}' assignments",
        )

    try:
        assignment = MenuLocationAssignment(
            location_id=location.id,
            menu_id=menu.id,
            assignment_type=request.assignment_type,
            assignment_id=None if request.assignment_type == "default" else request.assignment_id,
            priority=request.priority,
            tenant_id=current_user.tenant_id,
            is_active=True,
        )
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return ApiResponse(data=AssignmentSchema.model_validate(assignment), message="Menu assigned successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error assigning menu {request.menu_id} to location {location_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign menu",
        ) from e


@router.delete(
    "/{location_id}/assign",
    response_model=ApiResponse[None],
    summary="(admin) Remove a menu assignment",
)
def unassign_menu(
    location_id: int,
    assignment_id: Annotated[int, Query(alias="assignmentId", description="Assignment ID to remove")],
    current_user: User = admin_dependency,
    db: Session = db_dependency,
):
    assignment = (
        db.query(MenuLocationAssignment)
        .filter(
            MenuLocationAssignment.id == assignment_id,
            MenuLocationAssignment.location_id == location_id,
            tenant_or_global(MenuLocationAssignment.tenant_id, current_user.tenant_id),
        )
        .one_or_none()
    )
    if not assignment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    ensure_can_modify(assignment.tenant_id, current_user, "Global assignments can only be removed by a superadmin")

    try:
        db.delete(assignment)
        db.commit()
        return ApiResponse(message="Menu assignment removed successfully")

    except Exception as e:
        db.rollback()
        logger.error(f"Error removing assignment {assignment_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove menu assignment",
        ) from e
