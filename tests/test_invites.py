# tests/test_invites.py

"""
Tests for invite links, pending-invite staging and claiming.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from core.errors import ConflictError
from core.messages import msg
from services.invites import (
    INVITE_CODE_ALPHABET,
    check_invite_usable,
    generate_invite_code,
    is_invite_usable,
)


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def invite_row(**overrides):
    row = {
        "id": "invite-1",
        "building_id": "building-1",
        "code": "ABC234",
        "default_role": "tenant",
        "is_active": True,
        "expires_at": None,
        "max_uses": None,
        "uses_count": 0,
    }
    row.update(overrides)
    return row


def pending_payload(**overrides):
    payload = {
        "user_email": "Noa@Gmail.com",
        "building_id": "building-1",
        "invite_id": "invite-1",
        "apartment_number": "12",
        "full_name": "Noa Cohen",
        "phone": "0521112233",
    }
    payload.update(overrides)
    return payload


# ============================================================
# Validity rules
# ============================================================
def test_active_unlimited_invite_is_usable():
    check_invite_usable(invite_row(), NOW)
    assert is_invite_usable(invite_row(max_uses=0, uses_count=50), NOW)


@pytest.mark.parametrize(
    "overrides, key",
    [
        ({"is_active": False}, "invite_inactive"),
        ({"expires_at": "2026-02-28T00:00:00Z"}, "invite_expired"),
        ({"max_uses": 3, "uses_count": 3}, "invite_exhausted"),
    ],
)
def test_unusable_invites(overrides, key):
    with pytest.raises(ConflictError) as exc:
        check_invite_usable(invite_row(**overrides), NOW)

    assert exc.value.message_key == key
    assert exc.value.status_code == 400


def test_future_expiry_and_remaining_uses_are_usable():
    row = invite_row(expires_at=(NOW + timedelta(days=1)).isoformat(), max_uses=3, uses_count=2)
    assert is_invite_usable(row, NOW)


def test_invite_codes_use_unambiguous_alphabet():
    code = generate_invite_code()

    assert len(code) == 6
    assert all(c in INVITE_CODE_ALPHABET for c in code)
    assert not set(code) & set("01IO")


# ============================================================
# POST /api/pending-invite
# ============================================================
def test_stage_pending_invite(client: TestClient, supabase):
    supabase.db.seed("building_invites", invite_row())

    response = client.post("/api/pending-invite", json=pending_payload())

    assert response.status_code == 200
    assert response.json() == {"success": True}

    rows = supabase.db.rows("pending_invites")
    assert len(rows) == 1
    assert rows[0]["user_email"] == "noa@gmail.com"
    assert rows[0]["default_role"] == "tenant"
    assert rows[0]["apartment_number"] == "12"


def test_stage_pending_invite_last_write_wins(client: TestClient, supabase):
    supabase.db.seed("building_invites", invite_row())

    client.post("/api/pending-invite", json=pending_payload())
    client.post("/api/pending-invite", json=pending_payload(apartment_number=14))

    rows = supabase.db.rows("pending_invites")
    assert len(rows) == 1
    assert rows[0]["apartment_number"] == "14"


@pytest.mark.parametrize(
    "overrides, key",
    [
        ({"is_active": False}, "invite_inactive"),
        ({"expires_at": "2020-01-01T00:00:00Z"}, "invite_expired"),
        ({"max_uses": 1, "uses_count": 1}, "invite_exhausted"),
    ],
)
def test_stage_rejects_unusable_invite(client: TestClient, supabase, overrides, key):
    supabase.db.seed("building_invites", invite_row(**overrides))

    response = client.post("/api/pending-invite", json=pending_payload())

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": msg(key)}
    assert supabase.db.rows("pending_invites") == []


def test_stage_rejects_unknown_invite(client: TestClient, supabase):
    supabase.db.seed("building_invites", invite_row(building_id="other-building"))

    response = client.post("/api/pending-invite", json=pending_payload())

    assert response.status_code == 400
    assert response.json()["error"] == msg("invite_invalid")


def test_stage_requires_fields(client: TestClient, supabase):
    response = client.post("/api/pending-invite", json=pending_payload(full_name=""))

    assert response.status_code == 400
    assert response.json()["error"] == msg("missing_fields")


def test_stage_is_rate_limited(client: TestClient, supabase):
    supabase.db.seed("building_invites", invite_row())

    for _ in range(10):
        assert client.post("/api/pending-invite", json=pending_payload()).status_code == 200

    response = client.post("/api/pending-invite", json=pending_payload())

    assert response.status_code == 429
    assert response.json()["error"] == msg("rate_limited")
    assert response.headers["Retry-After"] == "60"


# ============================================================
# POST /api/pending-invite/claim
# ============================================================
def test_claim_pending_invite_joins_building(client: TestClient, supabase, login_as):
    supabase.db.seed("building_invites", invite_row(uses_count=2))
    supabase.db.seed(
        "pending_invites",
        {
            "user_email": "noa@gmail.com",
            "building_id": "building-1",
            "invite_id": "invite-1",
            "apartment_number": "12",
            "full_name": "Noa Cohen",
            "default_role": "tenant",
        },
    )
    login_as("noa-id", "Noa@gmail.com")

    response = client.post("/api/pending-invite/claim")

    assert response.status_code == 200
    body = response.json()
    assert body["joined"] is True
    assert body["buildingId"] == "building-1"
    assert body["message"] == msg("joined_building")

    members = supabase.db.rows("building_members")
    assert len(members) == 1
    assert members[0]["user_id"] == "noa-id"
    assert members[0]["role"] == "tenant"
    assert supabase.db.rows("pending_invites") == []
    assert supabase.db.rows("building_invites")[0]["uses_count"] == 3


def test_claim_when_already_member_only_clears_pending(client: TestClient, supabase, login_as):
    supabase.db.seed("building_members", {"building_id": "building-1", "user_id": "noa-id", "role": "tenant"})
    supabase.db.seed("pending_invites", {"user_email": "noa@gmail.com", "building_id": "building-1"})
    login_as("noa-id", "noa@gmail.com")

    response = client.post("/api/pending-invite/claim")

    assert response.json()["joined"] is False
    assert len(supabase.db.rows("building_members")) == 1
    assert supabase.db.rows("pending_invites") == []


def test_claim_without_pending_invite(client: TestClient, supabase, login_as):
    login_as("noa-id", "noa@gmail.com")

    response = client.post("/api/pending-invite/claim")

    assert response.json() == {"success": True, "joined": False, "buildingId": None}


# ============================================================
# GET /api/invites/{code}
# ============================================================
def test_lookup_invite_by_code(client: TestClient, supabase):
    building = {"id": "building-1", "name": "Herzl 12", "address": "Herzl 12", "city": "Tel Aviv"}
    supabase.db.seed("building_invites", invite_row(buildings=building))

    response = client.get("/api/invites/abc234")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["code"] == "ABC234"
    assert data["building"]["name"] == "Herzl 12"


def test_lookup_inactive_invite(client: TestClient, supabase):
    supabase.db.seed("building_invites", invite_row(is_active=False))

    response = client.get("/api/invites/ABC234")

    assert response.status_code == 400
    assert response.json()["error"] == msg("invite_invalid")


# ============================================================
# Committee invite management
# ============================================================
@pytest.fixture
def committee(supabase, login_as):
    supabase.db.seed("profiles", {"id": "committee-id", "full_name": "Vaad", "role": "committee"})
    supabase.db.seed(
        "building_members",
        {"id": "m-committee", "building_id": "building-1", "user_id": "committee-id", "role": "committee"},
    )
    return login_as("committee-id", "vaad@gmail.com")


def test_committee_creates_invite(client: TestClient, supabase, committee):
    response = client.post(
        "/api/buildings/building-1/invites",
        json={"default_role": "tenant", "max_uses": 5, "expires_days": 7},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["code"]) == 6
    assert data["max_uses"] == 5
    assert data["created_by"] == "committee-id"
    assert data["expires_at"] is not None


def test_committee_lists_invites_with_usability(client: TestClient, supabase, committee):
    supabase.db.seed(
        "building_invites",
        invite_row(id="i1", created_at="2026-01-02T00:00:00Z"),
        invite_row(id="i2", code="XYZ789", is_active=False, created_at="2026-01-01T00:00:00Z"),
    )

    response = client.get("/api/buildings/building-1/invites")

    assert response.status_code == 200
    usable = {item["id"]: item["is_usable"] for item in response.json()["data"]}
    assert usable == {"i1": True, "i2": False}


def test_committee_deletes_invite(client: TestClient, supabase, committee):
    supabase.db.seed("building_invites", invite_row())

    response = client.delete("/api/buildings/building-1/invites/invite-1")

    assert response.status_code == 200
    assert response.json()["message"] == msg("invite_deleted")
    assert supabase.db.rows("building_invites") == []


def test_tenant_cannot_manage_invites(client: TestClient, supabase, login_as):
    supabase.db.seed("profiles", {"id": "tenant-id", "role": "tenant"})
    supabase.db.seed("building_members", {"building_id": "building-1", "user_id": "tenant-id", "role": "tenant"})
    login_as("tenant-id", "tenant@gmail.com")

    response = client.get("/api/buildings/building-1/invites")

    assert response.status_code == 403
    assert response.json()["error"] == msg("forbidden_committee")


def test_committee_of_other_building_is_denied(client: TestClient, supabase, committee):
    response = client.post("/api/buildings/building-2/invites", json={})

    assert response.status_code == 403


def test_admin_manages_any_building(client: TestClient, supabase, admin):
    response = client.post("/api/buildings/building-9/invites", json={})

    assert response.status_code == 200
    assert response.json()["data"]["building_id"] == "building-9"
