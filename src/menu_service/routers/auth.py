import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException
from sqlalchemy.orm import Session

from menu_service.db import get_db
from menu_service.dependencies.authz import get_current_user, require_admin
from menu_service.models.user import User as DBUser
from menu_service.schemas.auth_schemas import TokenResponse, TokenRevokedResponse, UserResponse
from menu_service.utils import auth as auth_utils
from menu_service.utils.roles import RoleTier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])
# module-level dependency to avoid calling Depends() inside function defaults
db_dependency = Depends(get_db)
admin_dependency = Depends(require_admin)
current_user_dependency = Depends(get_current_user)


def _user_response_dict(user: DBUser) -> dict:
    """Build a consistent user response dict for auth endpoints."""
    tier = RoleTier.from_role_name(user.role_name)
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "tenant_id": user.tenant_id,
        "role": user.role_name,
        "tier": tier.value,
        "branch_id": user.branch_id,
        "is_admin": tier.is_admin,
    }


@router.post(
    "/login",
    summary="Login with username/password",
    description="Authenticate against the local user store and receive access and refresh JWTs.",
    response_model=TokenResponse,
)
def login(
    username: Annotated[str, Form(description="Username for authentication (e.g., jsmith)")],
    password: Annotated[
        str,
        Form(description="User password (e.g., SuperSecret123)", json_schema_extra={"format": "password"}),
    ],
    db: Session = db_dependency,
):
    user = auth_utils.authenticate_user(db, username, password)
    if not user:
        logger.info(f"Failed login attempt for '{username}'")
        raise HTTPException(status_code=401, detail="invalid credentials", headers={"WWW-Authenticate": "Bearer"})

    user.last_login = datetime.now(UTC)
    db.commit()

    return {
        "access_token": auth_utils.create_access_token(user),
        "refresh_token": auth_utils.create_refresh_token(user),
        "token_type": "bearer",
        "user": _user_response_dict(user),
    }


@router.get(
    "/me",
    summary="Get current user info",
    description="Return the active user's profile, including tenant, role and role tier.",
    response_model=UserResponse,
)
def me(user: DBUser = current_user_dependency):
    return _user_response_dict(user)


@router.post(
    "/token/refresh",
    summary="Refresh an access token using a REFRESH JWT",
    description="Validate a refresh token, enforce token versioning, and return rotated JWTs.",
    response_model=TokenResponse,
)
def token_refresh(
    refresh_token: Annotated[str, Form(description="JWT refresh token (e.g., eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9)")],
    db: Session = db_dependency,
):
    payload = auth_utils.decode_jwt(refresh_token)
    if not payload or payload.get("type") != "refresh":
        raise HTTPException(401, "invalid refresh token", headers={"WWW-Authenticate": "Bearer"})

    user = auth_utils.get_user(db, payload.get("sub"))
    if not user or not user.is_active:
        raise HTTPException(401, "user not found or inactive")

    # version check enforces stateless revocation for refresh tokens
    if payload.get("ver") != user.token_version:
        raise HTTPException(401, "refresh token no longer valid (revoked)")

    return {
        "access_token": auth_utils.create_access_token(user),
        "refresh_token": auth_utils.create_refresh_token(user),
        "token_type": "bearer",
    }


@router.post(
    "/revoke/{username}",
    summary="(admin) Revoke all tokens of a user",
    description="Bump the user's token version so every issued access and refresh token stops working.",
    response_model=TokenRevokedResponse,
)
def revoke(username: str, db: Session = db_dependency, _: DBUser = admin_dependency):
    user = auth_utils.get_user(db, username)
    if not user:
        raise HTTPException(404, "user not found")
    user = auth_utils.revoke_user_tokens(db, user)
    return {"revoked": user.username, "token_version": user.token_version}
