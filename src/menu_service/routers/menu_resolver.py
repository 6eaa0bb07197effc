"""
Router for menu resolution.

GET /api/menu-resolver/{location} returns the single menu that applies to
the caller at a UI location. Responses are never cacheable: menu changes
must show up on the next request.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from menu_service.db import get_db
from menu_service.dependencies.authz import bearer_dep, get_current_user
from menu_service.dependencies.config import Settings, get_settings
from menu_service.models.user import User
from menu_service.schemas.menu_schemas import (
    MenuItemNodeSchema,
    MenuResolutionData,
    MenuResolutionResponse,
    ResolvedAssignmentSchema,
    ResolvedLocationSchema,
    ResolvedMenuSchema,
)
from menu_service.services.menu_resolver import (
    DataAccessError,
    InvalidLocationError,
    LocationNotFoundError,
    MenuResolutionError,
    MenuResolver,
    RequesterContext,
    ResolvedMenu,
    TenantRequiredError,
    UnauthorizedError,
)
from menu_service.services.menu_store import MenuStore
from menu_service.services.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menu-resolver", tags=["Menu_Resolver"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}

TENANT_REMEDIATION = "Tenant not found. Please run core seed to create tenant record in core database."


# Module-level dependency objects to avoid calling Depends() in function defaults
db_dependency = Depends(get_db)
settings_dependency = Depends(get_settings)


def get_requesting_user(cred: HTTPAuthorizationCredentials = bearer_dep, db: Session = db_dependency) -> User | None:
    """The authenticated caller, or None when the bearer token is missing or rejected."""
    try:
        return get_current_user(cred, db)
    except HTTPException as exc:
        logger.info(f"Menu resolution rejected: {exc.detail}")
        return None


requesting_user_dependency = Depends(get_requesting_user)


def get_menu_resolver(db: Session = db_dependency, settings: Settings = settings_dependency) -> MenuResolver:
    return MenuResolver(MenuStore(db), ModuleRegistry(db), location_max_depth=settings.default_location_max_depth)


resolver_dependency = Depends(get_menu_resolver)


def build_requester(user: User, user_id: str | None, role_name: str | None, branch_id: str | None) -> RequesterContext:
    """Session identity with explicit query parameters taking precedence."""
    return RequesterContext(
        user_id=user_id or str(user.id),
        role_name=role_name or user.role_name,
        branch_id=branch_id or user.branch_id,
        tenant_id=user.tenant_id,
    )


def _serialize(resolved: ResolvedMenu) -> MenuResolutionData:
    menu = resolved.menu
    location = resolved.location
    assignment = resolved.assignment
    return MenuResolutionData(
        menu=ResolvedMenuSchema(
            id=menu.id,
            name=menu.name,
            slug=menu.slug,
            description=menu.description,
            locale=menu.locale,
            tenant_id=menu.tenant_id,
            is_active=menu.is_active,
            items=[MenuItemNodeSchema.model_validate(node) for node in resolved.items],
        ),
        location=ResolvedLocationSchema(
            id=location.id,
            name=location.name,
            label=location.label or {},
            layout_type=location.layout_type,
            max_depth=location.max_depth,
        ),
        assignment=ResolvedAssignmentSchema(
            type=assignment.assignment_type,
            id=assignment.assignment_id,
            priority=assignment.priority or 0,
        ),
    )


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "message": message},
        headers=NO_CACHE_HEADERS,
    )


def _map_resolution_error(location: str, exc: MenuResolutionError) -> JSONResponse:
    if isinstance(exc, UnauthorizedError):
        return _error_response(status.HTTP_401_UNAUTHORIZED, str(exc), "Unauthorized")
    if isinstance(exc, InvalidLocationError):
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), str(exc))
    if isinstance(exc, TenantRequiredError):
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            str(exc),
            f"The menu location '{location}' does not exist and no company/tenant is selected. "
            "Select a company or create the location in the Menu Settings page.",
        )
    if isinstance(exc, LocationNotFoundError):
        return _error_response(
            status.HTTP_404_NOT_FOUND,
            str(exc),
            f"The menu location '{location}' does not exist. Please create it in the Menu Settings page.",
        )
    if isinstance(exc, DataAccessError) and exc.is_tenant_related:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), TENANT_REMEDIATION)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "Failed to resolve menu")


@router.get(
    "/{location}",
    response_model=MenuResolutionResponse,
    summary="Resolve the menu for a location",
    description="Pick the menu assigned to the caller at a location (user > role > branch > default), "
    "filtered by the caller's role. Optional userId/roleId/branchId override the session values.",
)
def resolve_menu(
    location: str,
    response: Response,
    user_id: Annotated[str | None, Query(alias="userId", description="User ID override")] = None,
    role_id: Annotated[str | None, Query(alias="roleId", description="Role name override (e.g., Manager)")] = None,
    branch_id: Annotated[str | None, Query(alias="branchId", description="Branch ID")] = None,
    current_user: User | None = requesting_user_dependency,
    resolver: MenuResolver = resolver_dependency,
):
    if current_user is None:
        return _map_resolution_error(location, UnauthorizedError("Unauthorized"))
    requester = build_requester(current_user, user_id, role_id, branch_id)
    try:
        resolved = resolver.resolve(location, requester)
    except MenuResolutionError as exc:
        logger.warning(f"Menu resolution for '{location}' failed: {exc.__class__.__name__}: {exc}")
        return _map_resolution_error(location, exc)
    except Exception as e:
        logger.error(f"Error resolving menu for '{location}': {e}", exc_info=True)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e), "Failed to resolve menu")

    response.headers.update(NO_CACHE_HEADERS)
    if resolved is None:
        return MenuResolutionResponse(success=True, data=None, message="No menu assigned to this location")
    return MenuResolutionResponse(success=True, data=_serialize(resolved))
