from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from menu_service.db import get_db
from menu_service.models.user import User as DBUser
from menu_service.utils.auth import decode_jwt, get_user
from menu_service.utils.roles import RoleTier

bearer = HTTPBearer(auto_error=False)


# Module-level dependency object to avoid calling Depends() in function defaults
bearer_dep = Depends(bearer)
db_dep = Depends(get_db)


def get_current_user(
    cred: HTTPAuthorizationCredentials = bearer_dep,
    db: Session = db_dep,
) -> DBUser:
    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(401, "missing or invalid authorization header", headers={"WWW-Authenticate": "Bearer"})

    # Clients pasting "Bearer <token>" into Swagger UI end up with a doubled prefix
    token = cred.credentials
    if isinstance(token, str) and token.lower().startswith("bearer "):
        token = token.split(" ", 1)[1]

    payload = decode_jwt(token)
    if not payload or payload.get("type") != "access":
        raise HTTPException(401, "invalid or expired token", headers={"WWW-Authenticate": "Bearer"})

    user = get_user(db, payload.get("sub"))
    if not user or not user.is_active:
        raise HTTPException(401, "user not found or inactive")

    if payload.get("ver") != user.token_version:
        raise HTTPException(401, "token no longer valid (revoked)")

    return user


# Module-level dependency object to avoid calling Depends() in function defaults
current_user_dependency = Depends(get_current_user)


def require_admin(user: DBUser = current_user_dependency) -> DBUser:
    if not RoleTier.from_role_name(user.role_name).is_admin:
        raise HTTPException(403, "admin privileges required")
    return user


def ensure_can_modify(row_tenant_id: int | None, user: DBUser, detail: str) -> None:
    """Rows of another scope (in practice global rows) are read-only unless the caller is a superadmin."""
    if row_tenant_id != user.tenant_id and RoleTier.from_role_name(user.role_name) != RoleTier.superadmin:
        raise HTTPException(403, detail)
