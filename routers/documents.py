# routers/documents.py

from fastapi import APIRouter, Depends

from core.config import settings
from core.errors import (
    AuthorizationDenied,
    NotFoundError,
    UpstreamFailure,
    upstream_failure,
)
from core.logging_config import logger
from core.permission_helpers import (
    get_membership,
    is_admin_profile,
    is_committee,
    load_profile,
)
from core.supabase_client import require_admin_client
from dependencies.auth import SessionUser, get_session_user


router = APIRouter(
    prefix="/api/documents",
    tags=["Documents"],
)


# -----------------------------------------------------
# Document visibility
# -----------------------------------------------------
def can_view_document(profile: dict, membership: dict, document: dict) -> bool:
    """
    Admins and the building committee see everything in the building.
    Other members see building-wide documents (no member_id) and
    documents attached to their own membership.
    """
    if is_admin_profile(profile):
        return True
    if not membership:
        return False
    if is_committee(membership):
        return True

    owner = document.get("member_id")
    return owner is None or owner == membership.get("id")


@router.get("/{document_id}/signed-url", summary="Time-limited download URL for a document")
def get_document_signed_url(
    document_id: str,
    user: SessionUser = Depends(get_session_user),
):
    client = require_admin_client()

    try:
        rows = (
            client.table("documents")
            .select("id, building_id, member_id, file_path")
            .eq("id", document_id)
            .limit(1)
            .execute()
        ).data
    except Exception as e:
        raise upstream_failure(e, f"Document lookup failed for {document_id}")

    if not rows:
        raise NotFoundError("document_not_found")

    document = rows[0]
    profile = load_profile(user.id)
    membership = None if is_admin_profile(profile) else get_membership(user.id, document["building_id"])

    if not can_view_document(profile, membership, document):
        logger.warning(f"User {user.id} denied document {document_id}")
        raise AuthorizationDenied("forbidden")

    ttl = settings.SIGNED_URL_TTL_SECONDS

    try:
        signed = client.storage.from_(settings.DOCUMENTS_BUCKET).create_signed_url(document["file_path"], ttl)
    except Exception as e:
        raise upstream_failure(e, f"Signed URL failed for {document['file_path']}", "signed_url_failed")

    url = (signed or {}).get("signedURL") or (signed or {}).get("signedUrl")
    if not url:
        logger.error(f"Storage returned no signed URL for {document['file_path']}")
        raise UpstreamFailure("signed_url_failed")

    return {"success": True, "signedUrl": url, "expiresIn": ttl}
