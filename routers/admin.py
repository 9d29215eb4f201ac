# routers/admin.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.config_validator import require_config
from core.errors import ValidationError
from core.logging_config import logger
from core.roles import ASSIGNABLE_SYSTEM_ROLES, BUILDING_ROLES
from core.supabase_client import require_admin_client
from dependencies.auth import RoleGrant, require_admin
from models.enums import SagaStatus
from models.onboarding import (
    ActionResult,
    AdminCreateUser,
    AdminUpdateRole,
    OnboardingResult,
)
from models.saga import SagaRead
from services import onboarding


# Credentials are checked before the session so a misconfigured
# deployment answers with a configuration error, not a 401.
router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_config)],
)


# -----------------------------------------------------
# 1️⃣ CREATE USER / ADD TO BUILDING
# -----------------------------------------------------
@router.post(
    "/create-user",
    response_model=OnboardingResult,
    summary="Admin: Add a member to a building (creating the account if needed)",
)
def create_user(
    payload: AdminCreateUser,
    grant: RoleGrant = Depends(require_admin),
):
    if payload.missing_required():
        raise ValidationError("missing_fields_create_user")

    if payload.role not in BUILDING_ROLES:
        raise ValidationError("invalid_role")

    client = require_admin_client()

    logger.info(
        f"Admin {grant.user_id} adding {payload.email} to building "
        f"{payload.building_id} as {payload.role}"
    )
    return onboarding.add_member(client, payload, requested_by=grant.user_id)


# -----------------------------------------------------
# 2️⃣ DELETE USER
# -----------------------------------------------------
@router.delete(
    "/delete-user",
    response_model=ActionResult,
    summary="Admin: Delete a user and clean up references",
)
def delete_user(
    userId: Optional[str] = Query(None, description="User to delete"),
    grant: RoleGrant = Depends(require_admin),
):
    if not userId:
        raise ValidationError("user_id_required")

    if userId == grant.user_id:
        raise ValidationError("cannot_delete_self")

    client = require_admin_client()

    logger.info(f"Admin {grant.user_id} deleting user {userId}")
    return onboarding.delete_member(client, userId, requested_by=grant.user_id)


# -----------------------------------------------------
# 3️⃣ UPDATE SYSTEM ROLE
# -----------------------------------------------------
@router.post(
    "/update-role",
    response_model=ActionResult,
    summary="Admin: Change a user's system role (admin | tenant)",
)
def update_role(
    payload: AdminUpdateRole,
    grant: RoleGrant = Depends(require_admin),
):
    if not payload.userId or not payload.role:
        raise ValidationError("user_and_role_required")

    # Committee is granted through building membership only
    if payload.role not in ASSIGNABLE_SYSTEM_ROLES:
        raise ValidationError("invalid_role")

    if payload.userId == grant.user_id:
        raise ValidationError("cannot_change_own_role")

    client = require_admin_client()

    logger.info(f"Admin {grant.user_id} setting role of {payload.userId} to {payload.role}")
    return onboarding.update_role(client, payload.userId, payload.role)


# -----------------------------------------------------
# 4️⃣ ONBOARDING SAGAS
# -----------------------------------------------------
@router.get(
    "/onboarding-sagas",
    summary="Admin: List onboarding saga records",
)
def list_onboarding_sagas(
    status: Optional[SagaStatus] = Query(None, description="Filter by saga status"),
    grant: RoleGrant = Depends(require_admin),
):
    client = require_admin_client()
    rows = onboarding.list_sagas(client, str(status) if status else None)
    return {"success": True, "data": [SagaRead(**row).model_dump() for row in rows]}


@router.post(
    "/onboarding-sagas/{saga_id}/compensate",
    summary="Admin: Undo what an interrupted onboarding left behind",
)
def compensate_onboarding_saga(
    saga_id: str,
    grant: RoleGrant = Depends(require_admin),
):
    client = require_admin_client()

    logger.info(f"Admin {grant.user_id} compensating saga {saga_id}")
    return onboarding.compensate_saga(client, saga_id)
