# routers/profile.py

from fastapi import APIRouter, Depends

from core.errors import AuthorizationDenied, ValidationError, upstream_failure
from core.logging_config import logger
from core.permission_helpers import load_profile
from core.supabase_client import require_admin_client
from core.utils import sanitize
from dependencies.auth import SessionUser, get_session_user
from models.profile import ProfileRead, ProfileUpdate


router = APIRouter(
    prefix="/api/profile",
    tags=["Profile"],
)


@router.get("", response_model=ProfileRead, summary="Current user's profile")
def read_profile(user: SessionUser = Depends(get_session_user)):
    profile = load_profile(user.id)
    if not profile:
        # Authenticated but never provisioned (no building yet)
        raise AuthorizationDenied("forbidden")
    return profile


@router.patch("", response_model=ProfileRead, summary="Update own name / phone")
def update_profile(
    payload: ProfileUpdate,
    user: SessionUser = Depends(get_session_user),
):
    """
    Self-service edit. Only full_name and phone are writable here;
    the role is changed by admins through /api/admin/update-role.
    """
    updates = sanitize(payload.model_dump(exclude_unset=True))
    if not updates:
        raise ValidationError("no_fields_to_update")

    # full_name is NOT NULL in profiles
    if "full_name" in updates and not updates["full_name"]:
        raise ValidationError("missing_fields")

    client = require_admin_client()

    try:
        result = (
            client.table("profiles")
            .update(updates)
            .eq("id", user.id)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Profile update failed for {user.id}", "update_profile_failed")

    if not result.data:
        raise AuthorizationDenied("forbidden")

    logger.info(f"User {user.id} updated their profile: {sorted(updates)}")
    return result.data[0]
