from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.session import clear_session_cookies, set_session_cookies
from core.supabase_client import get_anon_client
from core.utils import is_safe_redirect_path


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)

CALLBACK_TYPE_RECOVERY = "recovery"
CALLBACK_TYPES_VERIFY = ("signup", "email")


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _redirect(request: Request, path: str) -> RedirectResponse:
    return RedirectResponse(f"{_origin(request)}{path}", status_code=307)


# ============================================================
# AUTH CALLBACK (email links: signup confirmation, recovery)
# ============================================================
@router.get("/callback", summary="Exchange an auth code for a session and redirect")
def auth_callback(
    request: Request,
    code: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="recovery | signup | email"),
    next: Optional[str] = Query(None, description="Relative path to continue to"),
):
    locale = settings.DEFAULT_LOCALE
    error_path = f"/{locale}/login?error=auth_callback_error"

    if not code:
        return _redirect(request, error_path)

    client = get_anon_client()
    if client is None:
        logger.error("Auth callback hit but Supabase anon client is not configured")
        return _redirect(request, error_path)

    params = {"auth_code": code}
    verifier = request.cookies.get(settings.CODE_VERIFIER_COOKIE)
    if verifier:
        params["code_verifier"] = verifier

    try:
        resp = client.auth.exchange_code_for_session(params)
    except Exception as e:
        logger.warning(f"Auth code exchange failed: {extract_supabase_error(e)}")
        return _redirect(request, error_path)

    session = getattr(resp, "session", None)
    if not session or not session.access_token:
        logger.warning("Auth code exchange returned no session")
        return _redirect(request, error_path)

    if type == CALLBACK_TYPE_RECOVERY:
        target = f"/{locale}/reset-password"
    elif type in CALLBACK_TYPES_VERIFY:
        # Opened from an email in a new tab: send back to login
        target = f"/{locale}/login?verified=true"
    elif next and is_safe_redirect_path(next):
        target = next
    else:
        target = f"/{locale}/dashboard"

    response = _redirect(request, target)
    set_session_cookies(response, session.access_token, session.refresh_token)
    response.delete_cookie(settings.CODE_VERIFIER_COOKIE, path="/")
    return response


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="Clear the session cookies")
def logout(request: Request):
    token = request.cookies.get(settings.ACCESS_TOKEN_COOKIE)
    client = get_anon_client()

    if token and client is not None:
        try:
            client.auth.admin.sign_out(token)
        except Exception as e:
            logger.info(f"Remote sign-out failed (cookies cleared anyway): {extract_supabase_error(e)}")

    response = JSONResponse({"success": True})
    clear_session_cookies(response)
    return response
