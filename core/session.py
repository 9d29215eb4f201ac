# core/session.py

"""
Cookie session handling for page requests.

Every page request validates the access-token cookie against Supabase
Auth; an expired token is refreshed with the refresh-token cookie and
the rotated pair is written back on the response (including redirects),
otherwise the browser would keep presenting a dead refresh token and be
logged out on the next request.
"""

import re
from dataclasses import dataclass
from typing import Optional

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import get_logger
from core.supabase_client import get_anon_client
from dependencies.auth import SessionUser


log = get_logger("session")

PROTECTED_PREFIXES = ("/dashboard", "/admin", "/tenant")
AUTH_ONLY_PREFIXES = ("/login", "/register", "/forgot-password")

# Paths served by the API itself, never page routes
SKIPPED_PREFIXES = ("/api/", "/auth/", "/health/", "/docs", "/openapi.json", "/redoc")

ROUTE_PROTECTED = "protected"
ROUTE_AUTH_ONLY = "auth_only"
ROUTE_PUBLIC = "public"


def _locale_pattern() -> re.Pattern:
    locales = "|".join(re.escape(loc) for loc in settings.SUPPORTED_LOCALES)
    return re.compile(rf"^/({locales})(?=/|$)")


def split_locale(path: str) -> tuple:
    """
    "/en/dashboard/x" → ("en", "/dashboard/x")
    "/dashboard"      → (DEFAULT_LOCALE, "/dashboard")
    "/he"             → ("he", "/")
    """
    match = _locale_pattern().match(path)
    if not match:
        return settings.DEFAULT_LOCALE, path or "/"
    return match.group(1), path[match.end():] or "/"


def classify_path(path: str) -> str:
    _, bare = split_locale(path)
    if any(bare.startswith(p) for p in PROTECTED_PREFIXES):
        return ROUTE_PROTECTED
    if any(bare.startswith(p) for p in AUTH_ONLY_PREFIXES):
        return ROUTE_AUTH_ONLY
    return ROUTE_PUBLIC


def should_skip(path: str) -> bool:
    if any(path.startswith(p) for p in SKIPPED_PREFIXES):
        return True
    # static assets (favicon.ico, robots.txt, ...)
    return "." in path.rsplit("/", 1)[-1]


# ============================================================
# Session resolution
# ============================================================
@dataclass
class SessionState:
    user: Optional[object] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    rotated: bool = False
    cleared: bool = False

    @property
    def authenticated(self) -> bool:
        return self.user is not None


def resolve_session(access_token: Optional[str], refresh_token: Optional[str]) -> SessionState:
    """
    Validate the access token; fall back to refreshing the session.
    Blocking (Supabase client is synchronous): call via threadpool.
    """
    if not access_token and not refresh_token:
        return SessionState()

    client = get_anon_client()
    if client is None:
        return SessionState()

    if access_token:
        try:
            resp = client.auth.get_user(access_token)
            if resp and resp.user:
                return SessionState(user=resp.user, access_token=access_token, refresh_token=refresh_token)
        except Exception as e:
            log.debug(f"Access token rejected: {extract_supabase_error(e)}")

    if refresh_token:
        try:
            resp = client.auth.refresh_session(refresh_token)
            session = getattr(resp, "session", None)
            if session and resp.user:
                return SessionState(
                    user=resp.user,
                    access_token=session.access_token,
                    refresh_token=session.refresh_token,
                    rotated=True,
                )
        except Exception as e:
            log.info(f"Session refresh failed: {extract_supabase_error(e)}")

    # Both tokens are dead; drop them so the browser stops sending them
    return SessionState(cleared=True)


def set_session_cookies(response: Response, access_token: str, refresh_token: str):
    for name, value in (
        (settings.ACCESS_TOKEN_COOKIE, access_token),
        (settings.REFRESH_TOKEN_COOKIE, refresh_token),
    ):
        response.set_cookie(
            name,
            value,
            max_age=settings.COOKIE_MAX_AGE_SECONDS,
            path="/",
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite="lax",
        )


def clear_session_cookies(response: Response):
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(settings.REFRESH_TOKEN_COOKIE, path="/")


def apply_session_cookies(response: Response, state: SessionState) -> Response:
    if state.rotated:
        set_session_cookies(response, state.access_token, state.refresh_token)
    elif state.cleared:
        clear_session_cookies(response)
    return response


# ============================================================
# Middleware
# ============================================================
class SupabaseSessionMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if should_skip(path) or not settings.SUPABASE_URL:
            return await call_next(request)

        state = await run_in_threadpool(
            resolve_session,
            request.cookies.get(settings.ACCESS_TOKEN_COOKIE),
            request.cookies.get(settings.REFRESH_TOKEN_COOKIE),
        )

        route_class = classify_path(path)
        locale, _ = split_locale(path)

        if not state.authenticated and route_class == ROUTE_PROTECTED:
            url = request.url.replace(path=f"/{locale}/login")
            return apply_session_cookies(RedirectResponse(str(url), status_code=307), state)

        if state.authenticated and route_class == ROUTE_AUTH_ONLY:
            url = request.url.replace(path=f"/{locale}/dashboard")
            return apply_session_cookies(RedirectResponse(str(url), status_code=307), state)

        if state.authenticated:
            request.state.session_user = SessionUser(id=state.user.id, email=state.user.email)

        response = await call_next(request)
        return apply_session_cookies(response, state)
