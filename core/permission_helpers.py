from typing import Optional

from core.errors import upstream_failure
from core.supabase_client import require_admin_client
from models.enums import MemberRole, UserRole


# -----------------------------------------------------
# Profile lookup (profiles.role is the system role)
# -----------------------------------------------------
def load_profile(user_id: str) -> Optional[dict]:
    client = require_admin_client()

    try:
        result = (
            client.table("profiles")
            .select("id, full_name, phone, role, created_at")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Profile lookup failed for {user_id}")

    return result.data[0] if result.data else None


def is_admin_profile(profile: Optional[dict]) -> bool:
    return bool(profile) and profile.get("role") == UserRole.admin.value


# -----------------------------------------------------
# Building membership lookup
# -----------------------------------------------------
def get_membership(user_id: str, building_id: str) -> Optional[dict]:
    """
    The caller's building_members row for this building, if any.
    """
    client = require_admin_client()

    try:
        result = (
            client.table("building_members")
            .select("id, building_id, user_id, role, apartment_number")
            .eq("building_id", building_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Membership lookup failed for {user_id} in {building_id}")

    return result.data[0] if result.data else None


def is_committee(membership: Optional[dict]) -> bool:
    return bool(membership) and membership.get("role") == MemberRole.committee.value
