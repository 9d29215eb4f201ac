import os
import sys
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.logging_config import logger
from core.messages import msg
from core.session import SupabaseSessionMiddleware

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.admin import router as admin_router
from routers.auth import router as auth_router
from routers.documents import router as documents_router
from routers.health import router as health_router
from routers.invites import router as invites_router
from routers.profile import router as profile_router
from routers.public import router as public_router


def error_response(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Vaad Bayit API: building committee onboarding, invites and documents",
    )

    # -------------------------------------------------
    # Middleware (last added runs first: CORS wraps the session layer)
    # -------------------------------------------------
    app.add_middleware(SupabaseSessionMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup logging
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.ENV})")
        validate_config_on_startup()

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(f"HTTP {exc.status_code} at {request.url.path}: {exc.detail}")
        return error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        logger.info(f"Invalid request body at {request.url.path}: {exc.errors()}")
        return error_response(400, msg("invalid_request"))

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url.path, exc_info=exc)
        return error_response(500, msg("internal_error"))

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Auth + session
    app.include_router(auth_router)
    app.include_router(profile_router)

    # Onboarding
    app.include_router(admin_router)
    app.include_router(invites_router)

    # Documents
    app.include_router(documents_router)

    # Public intake
    app.include_router(public_router)

    # Health
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()
