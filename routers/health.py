# routers/health.py

from fastapi import APIRouter

from core.config import settings
from core.config_validator import validate_required_config
from core.supabase_client import ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + table queries
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
def health_db():
    """
    Verifies Supabase connectivity.
    - Reports missing configuration keys
    - Queries the core tables (profiles, buildings, members, invites)

    Safe for external health monitors (no auth required).
    """
    missing = validate_required_config()
    if missing:
        return {
            "service": "Supabase",
            "status": "not_configured",
            "missing": missing,
        }

    try:
        status = ping_supabase()
        return {
            "service": "Supabase",
            "status": status.get("status", "unknown"),
            "details": status,
        }

    except Exception as e:
        return {
            "service": "Supabase",
            "status": "error",
            "error": str(e),
        }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app():
    """
    Lightweight liveness check for uptime monitors.
    """
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
        "env": settings.ENV,
    }
