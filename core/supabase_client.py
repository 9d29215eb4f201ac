# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from supabase.lib.client_options import SyncClientOptions

from core.config import settings
from core.errors import ConfigurationError
from core.logging_config import logger


# ============================================================
# Client options
# ============================================================

def _client_options() -> SyncClientOptions:
    """
    Clients are per request and never hold a session of their own:
    no background refresh timer, no in-memory session storage.
    """
    return SyncClientOptions(auto_refresh_token=False, persist_session=False)


# ============================================================
# Supabase Client Factory (service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    REQUIRED for:
        - auth.admin.create_user / delete_user / list_users
        - writes that bypass row-level security (profiles, building_members,
          pending_invites, onboarding_sagas)
    Returns None when credentials are missing.
    """
    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not supabase_key:
        logger.error("Missing Supabase credentials")
        logger.error(f"   URL: {supabase_url}")
        logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
        return None

    try:
        return create_client(supabase_url, supabase_key, options=_client_options())
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


def get_anon_client() -> Optional[Client]:
    """
    Client using the public ANON KEY.
    Used to validate / refresh end-user sessions and to exchange
    auth codes; a fresh client per request keeps sessions isolated.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        return None

    try:
        return create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            options=_client_options(),
        )
    except Exception as e:
        logger.error(f"Supabase anon client init error: {e}", exc_info=True)
        return None


def require_admin_client() -> Client:
    """Service-role client or ConfigurationError."""
    client = get_supabase_client()
    if client is None:
        raise ConfigurationError()
    return client


# ============================================================
# Ping Supabase for health checks
# ============================================================

def ping_supabase() -> dict:
    """
    Simple connectivity check.
    Does NOT query auth tables.
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    tables = ["profiles", "buildings", "building_members", "building_invites"]
    results = {}

    for t in tables:
        try:
            res = client.table(t).select("id").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or []),
            }
        except Exception as err:
            results[t] = {"status": "error", "detail": str(err)}

    status = "ok" if all(r["status"] == "ok" for r in results.values()) else "degraded"

    return {
        "service": "Supabase",
        "status": status,
        "tables": results,
    }
