from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login credentials schema with masked password in Swagger UI."""

    username: str = Field(..., description="Username for authentication", json_schema_extra={"example": "john_doe"})
    password: str = Field(
        ...,
        description="User password",
        json_schema_extra={"format": "password", "example": "secure_password123"},
    )


class TokenResponse(BaseModel):
    """JWT token response schema."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("bearer", description="Token type")
    user: "UserResponse | None" = Field(None, description="User information (optional)")


class UserResponse(BaseModel):
    """User profile response schema."""

    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    email: str | None = Field(None, description="User email address")
    tenant_id: int | None = Field(None, description="Tenant the user belongs to (null for platform users)")
    role: str = Field(..., description="Role display name (e.g. Admin)")
    tier: str = Field(..., description="Normalized role tier (viewer/staff/manager/admin/superadmin)")
    branch_id: str | None = Field(None, description="Default branch used for menu resolution")
    is_admin: bool = Field(..., description="True for admin and superadmin tiers")


class TokenRevokedResponse(BaseModel):
    """Token revocation response schema."""

    revoked: str = Field(..., description="Username with revoked tokens")
    token_version: int = Field(..., description="New token version")


TokenResponse.model_rebuild()
