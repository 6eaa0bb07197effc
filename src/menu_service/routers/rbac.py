from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException
from sqlalchemy.orm import Session

from menu_service.db import get_db
from menu_service.dependencies.authz import ensure_can_modify, require_admin
from menu_service.models.rbac import Role
from menu_service.models.user import User
from menu_service.utils.roles import RoleTier
from menu_service.utils.tenancy import tenant_or_global

router = APIRouter(prefix="/api/rbac", tags=["RBAC_Management"])

# Module-level dependency object to avoid calling Depends() in function defaults
admin_dependency = Depends(require_admin)
db_dependency = Depends(get_db)


# ---- Roles ----
@router.post(
    "/roles",
    summary="(admin) Create role",
    description="Create a role for the caller's tenant (or a global role for admins without a tenant). "
    "Role-type menu assignments reference roles by ID.",
)
def create_role(
    name: Annotated[str, Form(description="Role display name as carried by sessions (e.g., Manager)")],
    description: Annotated[str, Form(description="Role description (optional) (e.g., Branch managers)")] = "",
    db: Session = db_dependency,
    user: User = admin_dependency,
):
    existing = db.query(Role).filter(Role.name == name)
    if user.tenant_id is None:
        existing = existing.filter(Role.tenant_id.is_(None))
    else:
        existing = existing.filter(Role.tenant_id == user.tenant_id)
    if existing.one_or_none():
        raise HTTPException(409, "role already exists")
    r = Role(name=name, description=description, tenant_id=user.tenant_id)
    db.add(r)
    db.commit()
    db.refresh(r)
    return {"id": r.id, "name": r.name, "description": r.description, "tenant_id": r.tenant_id}


@router.get(
    "/roles",
    summary="(admin) List roles",
    description="Roles of the caller's tenant plus global roles. Admin privileges required.",
)
def list_roles(user: User = admin_dependency, db: Session = db_dependency):
    roles = db.query(Role).filter(tenant_or_global(Role.tenant_id, user.tenant_id)).order_by(Role.name, Role.id).all()
    return {
        "roles": [
            {
                "id": r.id,
                "name": r.name,
                "description": r.description,
                "tenant_id": r.tenant_id,
                "tier": RoleTier.from_role_name(r.name).value,
            }
            for r in roles
        ]
    }


@router.delete(
    "/roles/{role_id}",
    summary="(admin) Delete role",
    description="Delete a role of the caller's tenant by ID. Global roles can only be deleted by a superadmin.",
)
def delete_role(role_id: int, db: Session = db_dependency, user: User = admin_dependency):
    r = db.query(Role).filter(Role.id == role_id, tenant_or_global(Role.tenant_id, user.tenant_id)).one_or_none()
    if not r:
        raise HTTPException(404, "role not found")
    ensure_can_modify(r.tenant_id, user, "global roles can only be deleted by a superadmin")
    db.delete(r)
    db.commit()
    return {"deleted": role_id}
