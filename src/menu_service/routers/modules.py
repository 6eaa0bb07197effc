import logging

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from menu_service.db import get_db
from menu_service.dependencies.authz import get_current_user, require_admin
from menu_service.models.module import InstalledModule
from menu_service.models.user import User
from menu_service.schemas.menu_schemas import ApiResponse, ModuleSchema, UpsertModuleRequest
from menu_service.services.module_registry import ModuleRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/modules", tags=["Modules"])

# Module-level dependency objects to avoid calling Depends() in function defaults
db_dependency = Depends(get_db)
current_user_dependency = Depends(get_current_user)
admin_dependency = Depends(require_admin)


@router.get(
    "",
    response_model=ApiResponse[list[ModuleSchema]],
    summary="List installed modules",
    description="Installed modules with their icons. Inactive modules are only listed for admins.",
)
def list_modules(
    include_inactive: bool = False,
    current_user: User = current_user_dependency,
    db: Session = db_dependency,
):
    if include_inactive:
        require_admin(current_user)
    modules = ModuleRegistry(db).list_modules(include_inactive=include_inactive)
    return ApiResponse(data=[ModuleSchema.model_validate(m) for m in modules])


@router.put(
    "/{slug}",
    response_model=ApiResponse[ModuleSchema],
    summary="(admin) Register or update a module",
    description="Create the module entry for `slug` or update its name, icon, version and active flag.",
)
def upsert_module(
    request: UpsertModuleRequest,
    slug: str = Path(..., min_length=1, max_length=64, description="Module slug (e.g., accounting)"),
    _: User = admin_dependency,
    db: Session = db_dependency,
):
    try:
        module = db.query(InstalledModule).filter(InstalledModule.slug == slug).one_or_none()
        created = module is None
        if created:
            module = InstalledModule(slug=slug)
            db.add(module)
        module.name = request.name
        module.icon = request.icon
        module.version = request.version
        module.is_active = request.is_active
        db.commit()
        db.refresh(module)
        logger.info(f"Module '{slug}' {'registered' if created else 'updated'} (icon={module.icon})")
        return ApiResponse(
            data=ModuleSchema.model_validate(module),
            message="Module registered successfully" if created else "Module updated successfully",
        )

    except Exception as e:
        db.rollback()
        logger.error(f"Error saving module '{slug}': {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save module",
        ) from e
