# services/onboarding.py

"""
Onboarding orchestration: add a member to a building (creating the
Supabase Auth account when needed), delete a user together with every
row that references it, and change a profile's system role.

Each multi-step operation is tracked by an OnboardingSaga. Callers
(routes) have already verified configuration, session and admin role.
"""

import secrets
import string
from typing import List, Optional

from supabase import Client

from core.config import settings
from core.errors import (
    ConflictError,
    NotFoundError,
    UpstreamFailure,
    extract_supabase_error,
    upstream_failure,
)
from core.logging_config import get_logger
from core.messages import msg
from core.roles import profile_role_for_member_role
from models.enums import SagaOperation, SagaStatus
from models.onboarding import AdminCreateUser
from services.onboarding_saga import OnboardingSaga, SAGA_TABLE


log = get_logger("onboarding")

LIST_USERS_PAGE_SIZE = 200

TEMP_PASSWORD_LENGTH = 24
_PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*-_"

# (table, column) pairs that reference a user without ON DELETE rules.
# Cleared to NULL before the profile row can be removed.
USER_REFERENCE_COLUMNS = [
    ("buildings", "created_by"),
    ("expenses", "created_by"),
    ("messages", "created_by"),
    ("documents", "uploaded_by"),
    ("building_invites", "created_by"),
]


# ============================================================
# Helpers
# ============================================================
def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """Random password with at least one lower, upper, digit and symbol."""
    while True:
        password = "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))
        if (
            any(c.islower() for c in password)
            and any(c.isupper() for c in password)
            and any(c.isdigit() for c in password)
            and any(not c.isalnum() for c in password)
        ):
            return password


def extract_user_list(result) -> list:
    """Normalize Supabase list_users() result."""
    if isinstance(result, list):
        return result
    if isinstance(result, dict) and "users" in result:
        return result["users"]
    users_attr = getattr(result, "users", None)
    if users_attr is not None:
        return users_attr
    return []


def find_auth_user_by_email(client: Client, email: str):
    """
    Page through auth users until one matches `email`
    (case-insensitive). Returns the GoTrue user or None.
    """
    target = email.strip().lower()
    page = 1

    while True:
        try:
            raw = client.auth.admin.list_users(page=page, per_page=LIST_USERS_PAGE_SIZE)
        except Exception as e:
            raise upstream_failure(e, "Supabase list users failed")

        users = extract_user_list(raw)
        for user in users:
            if (getattr(user, "email", None) or "").lower() == target:
                return user

        if len(users) < LIST_USERS_PAGE_SIZE:
            return None
        page += 1


def membership_exists(client: Client, user_id: str, building_id: str) -> bool:
    try:
        result = (
            client.table("building_members")
            .select("id")
            .eq("building_id", building_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Membership lookup failed for {user_id}")

    return bool(result.data)


# ============================================================
# ADD MEMBER
# ============================================================
def add_member(client: Client, payload: AdminCreateUser, requested_by: str) -> dict:
    """
    Attach `payload.email` to `payload.building_id`, creating the
    auth account + profile first when the email is unknown.

    Raises ConflictError when the user is already a member (no writes).
    """
    existing = find_auth_user_by_email(client, payload.email)

    if existing is not None:
        user_id = existing.id
        if membership_exists(client, user_id, payload.building_id):
            log.info(f"{payload.email} already a member of {payload.building_id}")
            raise ConflictError("already_member")

    saga = OnboardingSaga(
        client,
        SagaOperation.add_member,
        target_email=payload.email,
        target_user_id=existing.id if existing is not None else None,
        building_id=payload.building_id,
        requested_by=requested_by,
    ).begin()

    if existing is None:
        user_id = _create_account(client, saga, payload)

    _insert_membership(client, saga, user_id, payload, is_new_user=existing is None)
    saga.finish(SagaStatus.completed)

    return {
        "success": True,
        "userId": user_id,
        "isNewUser": existing is None,
        "message": msg("new_user_created" if existing is None else "existing_user_added"),
        "sagaId": saga.id,
    }


def _create_account(client: Client, saga: OnboardingSaga, payload: AdminCreateUser) -> str:
    # 1) Auth account, confirmed, random password
    saga.enter("create_auth_user")
    try:
        resp = client.auth.admin.create_user(
            {
                "email": payload.email,
                "password": generate_temp_password(),
                "email_confirm": True,
                "user_metadata": {"full_name": payload.full_name},
            }
        )
    except Exception as e:
        saga.finish(SagaStatus.failed, error=extract_supabase_error(e))
        raise upstream_failure(e, f"Supabase user creation failed for {payload.email}", "create_user_failed")

    user_id = getattr(getattr(resp, "user", None), "id", None)
    if not user_id:
        saga.finish(SagaStatus.failed, error="create_user returned no user")
        log.error(f"Supabase user creation returned no user for {payload.email}")
        raise UpstreamFailure("create_user_failed")

    saga.target_user_id = user_id
    saga.done("create_auth_user", compensation="delete_auth_user")
    log.info(f"Created auth user {user_id} for {payload.email}")

    # 2) Profile (upsert: a database trigger may already have created it)
    saga.enter("create_profile")
    try:
        client.table("profiles").upsert(
            {
                "id": user_id,
                "full_name": payload.full_name,
                "phone": payload.phone,
                "role": profile_role_for_member_role(payload.role),
            },
            on_conflict="id",
        ).execute()
    except Exception as e:
        detail = extract_supabase_error(e)
        log.error(f"Profile creation failed for {user_id}: {detail}; rolling back auth user")
        failed = saga.compensate(error=detail)
        if failed:
            log.error(f"Rollback incomplete for {user_id}: {failed}")
        raise UpstreamFailure("create_profile_failed")

    saga.done("create_profile", compensation="delete_profile")

    # 3) Password recovery email (non-fatal: "forgot password" still works)
    saga.enter("send_recovery_email")
    try:
        client.auth.reset_password_for_email(
            payload.email,
            {"redirect_to": f"{settings.APP_URL.rstrip('/')}/{settings.DEFAULT_LOCALE}/reset-password"},
        )
        saga.done("send_recovery_email")
    except Exception as e:
        log.warning(f"Recovery email failed for {payload.email}: {extract_supabase_error(e)}")

    return user_id


def _insert_membership(
    client: Client,
    saga: OnboardingSaga,
    user_id: str,
    payload: AdminCreateUser,
    is_new_user: bool,
):
    saga.enter("insert_membership")
    row = {
        "building_id": payload.building_id,
        "user_id": user_id,
        "full_name": payload.full_name,
        "apartment_number": payload.apartment_number,
        "role": payload.role,
        "phone": payload.phone,
        "phone2": payload.phone2,
        "email": payload.email,
    }

    try:
        client.table("building_members").insert(row).execute()
    except Exception as e:
        detail = extract_supabase_error(e)
        log.error(f"Adding {user_id} to building {payload.building_id} failed: {detail}")
        # New account + profile stay; the saga keeps their compensations
        # so an admin can undo them from /api/admin/onboarding-sagas.
        saga.finish(SagaStatus.partial if is_new_user else SagaStatus.failed, error=detail)
        raise UpstreamFailure("member_insert_failed" if is_new_user else "member_add_failed")

    saga.done("insert_membership")
    log.info(f"Added {user_id} to building {payload.building_id} as {payload.role}")


# ============================================================
# DELETE MEMBER
# ============================================================
def delete_member(client: Client, user_id: str, requested_by: str) -> dict:
    """
    Remove a user and everything pointing at it, in foreign-key order.

    Steps before the profile delete are best-effort. Profile and auth
    deletion failures abort with an error.
    """
    saga = OnboardingSaga(
        client,
        SagaOperation.delete_member,
        target_user_id=user_id,
        requested_by=requested_by,
    ).begin()

    # 1) Email (needed to clear pending invites)
    email = _resolve_email(client, saga, user_id)
    saga.target_email = email

    # 2) Message responses written by any of the user's memberships
    _best_effort(saga, "delete_message_responses", lambda: _delete_message_responses(client, user_id))

    # 3) Pending invites staged under the user's email
    if email:
        _best_effort(
            saga,
            "delete_pending_invites",
            lambda: client.table("pending_invites").delete().eq("user_email", email).execute(),
        )

    # 4) Creator / uploader references → NULL
    for table, column in USER_REFERENCE_COLUMNS:
        _best_effort(
            saga,
            f"nullify_{table}_{column}",
            lambda t=table, c=column: client.table(t).update({c: None}).eq(c, user_id).execute(),
        )

    # 5) Memberships
    _best_effort(
        saga,
        "delete_memberships",
        lambda: client.table("building_members").delete().eq("user_id", user_id).execute(),
    )

    # 6) Profile
    saga.enter("delete_profile")
    try:
        result = client.table("profiles").delete().eq("id", user_id).execute()
    except Exception as e:
        saga.finish(SagaStatus.failed, error=extract_supabase_error(e))
        raise upstream_failure(e, f"Profile delete failed for {user_id}", "delete_profile_failed")

    if not result.data:
        saga.finish(SagaStatus.failed, error="profile not found")
        log.warning(f"Delete requested for {user_id} but no profile row exists")
        raise ConflictError("user_not_found")

    saga.done("delete_profile")

    # 7) Auth account last
    saga.enter("delete_auth_user")
    try:
        client.auth.admin.delete_user(user_id)
    except Exception as e:
        # Profile is gone but the login still works; retrying the auth
        # delete is recorded as the outstanding action
        saga.compensations.append("delete_auth_user")
        saga.finish(SagaStatus.partial, error=extract_supabase_error(e))
        raise upstream_failure(e, f"Supabase delete failed for {user_id}", "delete_user_failed")

    saga.done("delete_auth_user")
    saga.finish(SagaStatus.completed)
    log.info(f"User {user_id} deleted by {requested_by}")

    return {"success": True, "message": msg("user_deleted")}


def _resolve_email(client: Client, saga: OnboardingSaga, user_id: str) -> Optional[str]:
    saga.enter("resolve_email")
    try:
        resp = client.auth.admin.get_user_by_id(user_id)
        email = getattr(getattr(resp, "user", None), "email", None)
    except Exception as e:
        log.warning(f"Could not resolve email for {user_id}: {extract_supabase_error(e)}")
        return None

    saga.done("resolve_email")
    return email


def _delete_message_responses(client: Client, user_id: str):
    rows = (
        client.table("building_members")
        .select("id")
        .eq("user_id", user_id)
        .execute()
    ).data or []

    member_ids: List[str] = [r["id"] for r in rows]
    if member_ids:
        client.table("message_responses").delete().in_("member_id", member_ids).execute()


def _best_effort(saga: OnboardingSaga, step: str, action):
    saga.enter(step)
    try:
        action()
    except Exception as e:
        log.warning(f"Saga {saga.id}: step {step} failed (continuing): {extract_supabase_error(e)}")
        return
    saga.done(step)


# ============================================================
# ROLE MUTATION
# ============================================================
def update_role(client: Client, user_id: str, role: str) -> dict:
    try:
        result = (
            client.table("profiles")
            .update({"role": role})
            .eq("id", user_id)
            .execute()
        )
    except Exception as e:
        raise upstream_failure(e, f"Role update failed for {user_id}", "update_role_failed")

    if not result.data:
        raise ConflictError("user_not_found")

    log.info(f"Role of {user_id} set to {role}")
    return {"success": True, "message": msg("role_updated")}


# ============================================================
# SAGA ADMINISTRATION
# ============================================================
def list_sagas(client: Client, status: Optional[str] = None) -> list:
    try:
        query = client.table(SAGA_TABLE).select("*")
        if status:
            query = query.eq("status", status)
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise upstream_failure(e, "Saga list failed")

    return result.data or []


def compensate_saga(client: Client, saga_id: str) -> dict:
    """Undo what a partial (or crashed) saga left committed."""
    try:
        result = client.table(SAGA_TABLE).select("*").eq("id", saga_id).limit(1).execute()
    except Exception as e:
        raise upstream_failure(e, f"Saga lookup failed for {saga_id}")

    if not result.data:
        raise NotFoundError("saga_not_found")

    saga = OnboardingSaga.from_row(client, result.data[0])
    if saga.status not in (SagaStatus.partial.value, SagaStatus.running.value):
        raise ConflictError("saga_not_compensable")
    # Membership committed: the account is live and owned by a building
    if "insert_membership" in saga.completed_steps:
        raise ConflictError("saga_not_compensable")

    failed = saga.compensate()
    if failed:
        raise UpstreamFailure("saga_compensation_failed")

    return {"success": True, "message": msg("saga_compensated"), "sagaId": saga.id}
