import asyncio
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from menu_service.db.init_db import init_db
from menu_service.dependencies.config import get_settings

logger = logging.getLogger(__name__)

load_dotenv()


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    if settings.auto_create_tables:
        init_db()
        logger.info("Database tables created (AUTO_CREATE_TABLES)")
    logger.info(f"{settings.app_name} started")

    try:
        yield
    except asyncio.CancelledError:
        logger.info("Application shutdown requested (CancelledError). Exiting gracefully.")
    except Exception:
        logger.exception("Unhandled exception during application lifespan shutdown.")
        raise
    finally:
        logger.info(f"{settings.app_name} stopped")


settings = get_settings()

tags_metadata = [
    {"name": "Root", "description": "Basic status endpoint."},
    {"name": "Auth", "description": "Authentication and token management endpoints."},
    {"name": "Menu_Resolver", "description": "Resolve the menu that applies to the caller at a UI location. Responses are never cached."},
    {"name": "Menu_Locations", "description": "Menu locations and menu assignments. 🔒 Mutations require admin privileges."},
    {"name": "Menus", "description": "Menus and menu items. 🔒 Mutations require admin privileges."},
    {"name": "Modules", "description": "Installed module registry (module icons)."},
    {"name": "RBAC_Management", "description": "🔒 **Admin Only** - Role administration APIs. Requires admin authentication."},
    {"name": "Health", "description": "Health, readiness and liveness probes."},
]

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    openapi_tags=tags_metadata,
    docs_url="/swagger",
    swagger_ui_parameters={"displayRequestDuration": True, "persistAuthorization": True},
    redoc_url="/redoc",
    lifespan=_lifespan,
)

_original_openapi = app.openapi


def _custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = _original_openapi()

    # Ensure we have a bearer security scheme so Swagger UI shows the Authorize button
    components = schema.setdefault("components", {})
    security_schemes = components.setdefault("securitySchemes", {})
    security_schemes["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
        "description": "Provide a Bearer token obtained from /api/auth/login",
    }

    # Remap the auto-generated HTTPBearer scheme to the canonical name
    other_bearers = [
        k
        for k, v in list(security_schemes.items())
        if k != "BearerAuth" and isinstance(v, dict) and v.get("type") == "http" and str(v.get("scheme", "")).lower() == "bearer"
    ]
    for k in other_bearers:
        security_schemes.pop(k, None)

    if other_bearers:
        for path_item in schema.get("paths", {}).values():
            if not isinstance(path_item, dict):
                continue
            for op in path_item.values():
                if not isinstance(op, dict) or "security" not in op:
                    continue
                op["security"] = [
                    {("BearerAuth" if k in other_bearers else k): scopes for k, scopes in requirement.items()}
                    for requirement in op["security"]
                ]

    root_op = schema.get("paths", {}).get("/", {}).get("get")
    if root_op is not None:
        root_op["tags"] = ["Root"]

    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = _custom_openapi


# Basic root endpoint
@app.get("/")
async def root():
    return {"message": settings.app_name}


# Set up GZip compression middleware (BEFORE CORS)
app.add_middleware(
    GZipMiddleware,
    minimum_size=1000,  # Only compress responses > 1KB
    compresslevel=6,
)

logger.info(f"CORS enabled for origins: {settings.cors_origin_list}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include routers
from .routers import (  # noqa: E402
    auth,
    health,
    menu_locations,
    menu_resolver,
    menus,
    modules,
    rbac,
)

app.include_router(auth.router)
app.include_router(health.router)
app.include_router(menu_locations.router)
app.include_router(menu_resolver.router)
app.include_router(menus.router)
app.include_router(modules.router)
app.include_router(rbac.router)


__all__ = ["app"]
