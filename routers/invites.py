# routers/invites.py

from fastapi import APIRouter, Depends, Request

from core.errors import ValidationError
from core.logging_config import logger
from core.messages import msg
from core.rate_limiter import require_rate_limit
from core.supabase_client import require_admin_client
from dependencies.auth import (
    BuildingGrant,
    SessionUser,
    get_session_user,
    require_committee,
)
from models.invite import InviteCreate, InviteRead, PendingInviteCreate
from services import invites as invite_service


router = APIRouter(
    prefix="/api",
    tags=["Invites"],
)


# -----------------------------------------------------
# PUBLIC: Stage a pending invite before email verification
# -----------------------------------------------------
@router.post("/pending-invite", summary="Public: Stage an invite for a not-yet-verified email")
def create_pending_invite(payload: PendingInviteCreate, request: Request):
    require_rate_limit(request, max_requests=10, window_seconds=60)

    if payload.missing_required():
        raise ValidationError("missing_fields")

    client = require_admin_client()
    return invite_service.stage_pending_invite(client, payload)


# -----------------------------------------------------
# AUTH: Claim the caller's pending invite
# -----------------------------------------------------
@router.post("/pending-invite/claim", summary="Join the building staged for the caller's email")
def claim_pending_invite(user: SessionUser = Depends(get_session_user)):
    client = require_admin_client()
    result = invite_service.claim_pending_invite(client, user.id, user.email)

    if result["joined"]:
        result["message"] = msg("joined_building")
    return result


# -----------------------------------------------------
# PUBLIC: Resolve an invite code (register page)
# -----------------------------------------------------
@router.get("/invites/{code}", summary="Public: Validate an invite code")
def get_invite_by_code(code: str, request: Request):
    require_rate_limit(request, max_requests=30, window_seconds=60)

    client = require_admin_client()
    invite = invite_service.lookup_invite(client, code)

    building = invite.pop("buildings", None)
    return {
        "success": True,
        "data": {
            **InviteRead(**invite).model_dump(),
            "building": building,
        },
    }


# -----------------------------------------------------
# COMMITTEE: Manage building invite links
# -----------------------------------------------------
@router.get("/buildings/{building_id}/invites", summary="Committee: List invite links")
def list_building_invites(
    building_id: str,
    grant: BuildingGrant = Depends(require_committee),
):
    client = require_admin_client()
    rows = invite_service.list_invites(client, building_id)

    data = []
    for row in rows:
        item = InviteRead(**row).model_dump()
        item["is_usable"] = invite_service.is_invite_usable(row)
        data.append(item)

    return {"success": True, "data": data}


@router.post("/buildings/{building_id}/invites", summary="Committee: Create invite link")
def create_building_invite(
    building_id: str,
    payload: InviteCreate,
    grant: BuildingGrant = Depends(require_committee),
):
    client = require_admin_client()
    row = invite_service.create_invite(client, building_id, payload, created_by=grant.user_id)
    return {"success": True, "data": InviteRead(**row).model_dump() if row.get("id") else row}


@router.delete("/buildings/{building_id}/invites/{invite_id}", summary="Committee: Delete invite link")
def delete_building_invite(
    building_id: str,
    invite_id: str,
    grant: BuildingGrant = Depends(require_committee),
):
    client = require_admin_client()
    invite_service.delete_invite(client, building_id, invite_id)

    logger.info(f"Invite {invite_id} deleted from building {building_id} by {grant.user_id}")
    return {"success": True, "message": msg("invite_deleted")}
