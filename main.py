from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.errors import AuthError, AuthErrorReason, MarketplaceError
from core.logging_config import logger

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.admin import router as admin_router
from routers.sub_admins import router as sub_admins_router
from routers.profiles import router as profiles_router
from routers.listings import products_router, requests_router
from routers.categories import router as categories_router
from routers.health import router as health_router


def _should_clear_session(request: Request, exc: AuthError) -> bool:
    if getattr(request.state, "clear_session", False):
        return True
    return exc.reason in (AuthErrorReason.malformed, AuthErrorReason.expired)


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="BRICSZ Marketplace API: country-scoped B2B trade listings",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info("Starting BRICSZ Marketplace API")
        validate_config_on_startup()
        for route in app.routes:
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.debug(f"Route {methods:10s} {route.path}")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(MarketplaceError)
    async def handle_marketplace(request: Request, exc: MarketplaceError):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"{type(exc).__name__} ({exc.status_code}) at {request.url.path}: {exc.message}"
            )

        headers = None
        if isinstance(exc, AuthError):
            headers = {"WWW-Authenticate": "Bearer"}

        response = JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=headers,
        )

        if isinstance(exc, AuthError) and _should_clear_session(request, exc):
            response.delete_cookie(settings.SESSION_COOKIE_NAME)

        return response

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url} - {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Auth
    app.include_router(auth_router)
    app.include_router(admin_router)

    # Back office
    app.include_router(sub_admins_router)
    app.include_router(profiles_router)

    # Marketplace
    app.include_router(products_router)
    app.include_router(requests_router)
    app.include_router(categories_router)

    # Health
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()
