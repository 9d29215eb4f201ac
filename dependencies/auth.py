from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from core.config import settings
from core.errors import AuthenticationRequired, AuthorizationDenied, ConfigurationError
from core.logging_config import logger
from core.permission_helpers import (
    load_profile,
    is_admin_profile,
    get_membership,
)
from core.supabase_client import get_anon_client, get_supabase_client
from models.enums import MemberRole, UserRole


# Bearer header is optional: browsers send the session cookie instead
bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# Session identity (Supabase Auth user, no profile data)
# ============================================================
class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None


# ============================================================
# Capability tokens returned by the guards
# ============================================================
class RoleGrant(BaseModel):
    """Proof that the caller holds one of the required system roles."""
    user_id: str
    email: Optional[str] = None
    role: str
    full_name: Optional[str] = None


class BuildingGrant(RoleGrant):
    """Proof that the caller may act on a specific building."""
    building_id: str
    member_id: Optional[str] = None
    member_role: Optional[str] = None


def _access_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.ACCESS_TOKEN_COOKIE)


# ============================================================
# AUTH DECODING (Supabase validates the JWT)
# ============================================================
def get_session_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> SessionUser:

    # Session middleware may already have resolved the caller
    resolved = getattr(request.state, "session_user", None)
    if resolved is not None:
        return resolved

    token = _access_token(request, credentials)
    if not token:
        raise AuthenticationRequired()

    client = get_anon_client() or get_supabase_client()
    if client is None:
        raise ConfigurationError()

    try:
        auth_resp = client.auth.get_user(token)
    except Exception as e:
        logger.info(f"Session validation failed: {type(e).__name__}")
        raise AuthenticationRequired()

    if not auth_resp or not auth_resp.user:
        raise AuthenticationRequired()

    return SessionUser(id=auth_resp.user.id, email=auth_resp.user.email)


def get_optional_session_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[SessionUser]:
    """
    Optional authentication dependency.
    Returns None instead of raising when there is no valid session.
    """
    try:
        return get_session_user(request, credentials)
    except AuthenticationRequired:
        return None


# ============================================================
# ROLE GUARD (system role from profiles)
# ============================================================
def require_role(*roles: str, message_key: str = "forbidden"):
    """
    Usage:
        grant: RoleGrant = Depends(require_role("admin"))
    """
    allowed = [str(r) for r in roles]

    def checker(user: SessionUser = Depends(get_session_user)) -> RoleGrant:
        profile = load_profile(user.id)
        role = (profile or {}).get("role")

        if role not in allowed:
            logger.warning(f"User {user.id} with role {role!r} denied; requires one of {allowed}")
            raise AuthorizationDenied(message_key)

        return RoleGrant(
            user_id=user.id,
            email=user.email,
            role=role,
            full_name=(profile or {}).get("full_name"),
        )

    return checker


require_admin = require_role(UserRole.admin, message_key="forbidden_admin")


# ============================================================
# BUILDING GUARD (per-building role, admins bypass)
# ============================================================
def require_building_role(*member_roles: str):
    """
    Usage (route must have a {building_id} path parameter):
        grant: BuildingGrant = Depends(require_building_role("committee"))
    """
    allowed = [str(r) for r in member_roles]

    def checker(building_id: str, user: SessionUser = Depends(get_session_user)) -> BuildingGrant:
        profile = load_profile(user.id)

        if is_admin_profile(profile):
            return BuildingGrant(
                user_id=user.id,
                email=user.email,
                role=UserRole.admin.value,
                full_name=profile.get("full_name"),
                building_id=building_id,
            )

        membership = get_membership(user.id, building_id)
        if not membership or membership.get("role") not in allowed:
            raise AuthorizationDenied(
                "forbidden_committee" if allowed == [MemberRole.committee.value] else "forbidden"
            )

        return BuildingGrant(
            user_id=user.id,
            email=user.email,
            role=(profile or {}).get("role") or membership["role"],
            full_name=(profile or {}).get("full_name"),
            building_id=building_id,
            member_id=membership.get("id"),
            member_role=membership.get("role"),
        )

    return checker


require_committee = require_building_role(MemberRole.committee)
