# services/invites.py

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from supabase import Client

from core.errors import (
    ConflictError,
    ValidationError,
    extract_supabase_error,
    upstream_failure,
)
from core.logging_config import get_logger
from core.utils import sanitize
from models.enums import MemberRole
from models.invite import InviteCreate, PendingInviteCreate
from services.onboarding import membership_exists


log = get_logger("invites")

INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6
INVITE_CODE_ATTEMPTS = 3


# ============================================================
# Validity
# ============================================================
def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed is not None and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_invite_usable(invite: dict, now: Optional[datetime] = None):
    """
    Raise ConflictError unless the invite is active, unexpired and
    under its use cap. A max_uses of None (or 0) means unlimited.
    """
    now = now or datetime.now(timezone.utc)

    if not invite.get("is_active"):
        raise ConflictError("invite_inactive")

    expires_at = _parse_timestamp(invite.get("expires_at"))
    if expires_at is not None and expires_at < now:
        raise ConflictError("invite_expired")

    max_uses = invite.get("max_uses")
    if max_uses and (invite.get("uses_count") or 0) >= max_uses:
        raise ConflictError("invite_exhausted")


def is_invite_usable(invite: dict, now: Optional[datetime] = None) -> bool:
    try:
        check_invite_usable(invite, now)
    except ConflictError:
        return False
    return True


# ============================================================
# Staging (before the invitee has an account)
# ============================================================
def stage_pending_invite(client: Client, payload: PendingInviteCreate) -> dict:
    """
    Validate the referenced invite server-side, then upsert the
    pending invite keyed by email (last write wins).
    """
    try:
        result = (
            client.table("building_invites")
            .select("id, building_id, is_active, expires_at, max_uses, uses_count")
            .eq("id", payload.invite_id)
            .eq("building_id", payload.building_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        log.warning(f"Invite lookup failed for {payload.invite_id}: {extract_supabase_error(e)}")
        raise ValidationError("invite_invalid")

    if not result.data:
        raise ValidationError("invite_invalid")

    check_invite_usable(result.data[0])

    row = sanitize({
        "user_email": payload.user_email,
        "building_id": payload.building_id,
        "invite_id": payload.invite_id,
        "apartment_number": payload.apartment_number,
        "full_name": payload.full_name,
        "phone": payload.phone,
    })
    row["default_role"] = str(payload.default_role or MemberRole.tenant)

    try:
        client.table("pending_invites").upsert(row, on_conflict="user_email").execute()
    except Exception as e:
        raise upstream_failure(e, f"Pending invite upsert failed for {payload.user_email}", "pending_invite_failed")

    log.info(f"Staged pending invite for {payload.user_email} → building {payload.building_id}")
    return {"success": True}


# ============================================================
# Claim (first authenticated request after signup)
# ============================================================
def claim_pending_invite(client: Client, user_id: str, email: str) -> dict:
    """
    Turn the caller's pending invite into a building membership.
    The pending row is removed whether or not a membership was added.
    """
    email = (email or "").strip().lower()

    try:
        result = (
            client.table("pending_invites")
            .select("*")
            .eq("user_email", email)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Pending invite lookup failed for {email}", "claim_invite_failed")

    if not result.data:
        return {"success": True, "joined": False, "buildingId": None}

    pending = result.data[0]
    building_id = pending["building_id"]
    joined = False

    if not membership_exists(client, user_id, building_id):
        try:
            client.table("building_members").insert({
                "building_id": building_id,
                "user_id": user_id,
                "full_name": pending.get("full_name"),
                "apartment_number": pending.get("apartment_number"),
                "role": pending.get("default_role") or MemberRole.tenant.value,
                "phone": pending.get("phone"),
                "email": email,
            }).execute()
        except Exception as e:
            raise upstream_failure(e, f"Membership insert failed for {user_id}", "claim_invite_failed")

        joined = True
        _increment_invite_uses(client, pending.get("invite_id"))
        log.info(f"User {user_id} joined building {building_id} via pending invite")

    try:
        client.table("pending_invites").delete().eq("id", pending["id"]).execute()
    except Exception as e:
        log.warning(f"Could not delete pending invite {pending['id']}: {extract_supabase_error(e)}")

    return {"success": True, "joined": joined, "buildingId": building_id}


def _increment_invite_uses(client: Client, invite_id: Optional[str]):
    # read-then-write: concurrent claims may undercount
    if not invite_id:
        return
    try:
        current = (
            client.table("building_invites")
            .select("uses_count")
            .eq("id", invite_id)
            .limit(1)
            .execute()
        ).data
        if current:
            client.table("building_invites").update(
                {"uses_count": (current[0].get("uses_count") or 0) + 1}
            ).eq("id", invite_id).execute()
    except Exception as e:
        log.warning(f"Could not bump uses_count on invite {invite_id}: {extract_supabase_error(e)}")


# ============================================================
# Building invites (committee)
# ============================================================
def generate_invite_code(length: int = INVITE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def create_invite(client: Client, building_id: str, payload: InviteCreate, created_by: str) -> dict:
    expires_at = None
    if payload.expires_days:
        expires_at = (datetime.now(timezone.utc) + timedelta(days=payload.expires_days)).isoformat()

    last_error = None
    for _ in range(INVITE_CODE_ATTEMPTS):
        row = {
            "building_id": building_id,
            "code": generate_invite_code(),
            "default_role": str(payload.default_role),
            "max_uses": payload.max_uses,
            "expires_at": expires_at,
            "created_by": created_by,
        }
        try:
            result = client.table("building_invites").insert(row).execute()
        except Exception as e:
            last_error = e
            detail = extract_supabase_error(e).lower()
            if "duplicate" in detail or "unique" in detail:
                continue
            break
        else:
            log.info(f"Invite {row['code']} created for building {building_id} by {created_by}")
            return result.data[0] if result.data else row

    raise upstream_failure(last_error, f"Invite creation failed for {building_id}", "invite_create_failed")


def list_invites(client: Client, building_id: str) -> list:
    try:
        result = (
            client.table("building_invites")
            .select("*")
            .eq("building_id", building_id)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Invite list failed for {building_id}")

    return result.data or []


def delete_invite(client: Client, building_id: str, invite_id: str):
    try:
        (
            client.table("building_invites")
            .delete()
            .eq("id", invite_id)
            .eq("building_id", building_id)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Invite delete failed for {invite_id}", "invite_delete_failed")


def lookup_invite(client: Client, code: str) -> dict:
    """Active invite by code, with its building, if still usable."""
    try:
        result = (
            client.table("building_invites")
            .select("*, buildings(id, name, address, city)")
            .eq("code", code.strip().upper())
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        log.warning(f"Invite lookup failed for code {code}: {extract_supabase_error(e)}")
        raise ValidationError("invite_invalid")

    if not result.data:
        raise ValidationError("invite_invalid")

    invite = result.data[0]
    check_invite_usable(invite)
    return invite
