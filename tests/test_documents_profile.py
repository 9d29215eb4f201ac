# tests/test_documents_profile.py

"""
Tests for document signed URLs and profile self-service.
"""

import pytest
from fastapi.testclient import TestClient

from core.messages import msg


@pytest.fixture
def documents(supabase):
    supabase.db.seed(
        "building_members",
        {"id": "m-tenant", "building_id": "building-1", "user_id": "tenant-id", "role": "tenant"},
        {"id": "m-other", "building_id": "building-1", "user_id": "other-id", "role": "tenant"},
        {"id": "m-committee", "building_id": "building-1", "user_id": "committee-id", "role": "committee"},
    )
    supabase.db.seed(
        "profiles",
        {"id": "tenant-id", "full_name": "Tenant", "role": "tenant"},
        {"id": "committee-id", "full_name": "Vaad", "role": "committee"},
        {"id": "outsider-id", "full_name": "Outsider", "role": "tenant"},
    )
    supabase.db.seed(
        "documents",
        {"id": "doc-shared", "building_id": "building-1", "member_id": None, "file_path": "building-1/rules.pdf"},
        {"id": "doc-own", "building_id": "building-1", "member_id": "m-tenant", "file_path": "building-1/m-tenant/lease.pdf"},
        {"id": "doc-other", "building_id": "building-1", "member_id": "m-other", "file_path": "building-1/m-other/lease.pdf"},
    )
    return supabase


# ============================================================
# GET /api/documents/{id}/signed-url
# ============================================================
@pytest.mark.parametrize("document_id", ["doc-shared", "doc-own"])
def test_tenant_gets_building_and_own_documents(client: TestClient, documents, login_as, document_id):
    login_as("tenant-id")

    response = client.get(f"/api/documents/{document_id}/signed-url")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["expiresIn"] == 3600
    assert body["signedUrl"].startswith("https://storage.test/documents/building-1/")


def test_tenant_cannot_read_other_members_document(client: TestClient, documents, login_as):
    login_as("tenant-id")

    response = client.get("/api/documents/doc-other/signed-url")

    assert response.status_code == 403
    assert response.json()["error"] == msg("forbidden")
    assert documents.storage.signed == []


def test_committee_reads_any_building_document(client: TestClient, documents, login_as):
    login_as("committee-id")

    response = client.get("/api/documents/doc-other/signed-url")

    assert response.status_code == 200
    assert documents.storage.signed == [("documents", "building-1/m-other/lease.pdf", 3600)]


def test_admin_reads_any_document(client: TestClient, documents, admin):
    response = client.get("/api/documents/doc-other/signed-url")

    assert response.status_code == 200


def test_non_member_is_denied(client: TestClient, documents, login_as):
    login_as("outsider-id")

    response = client.get("/api/documents/doc-shared/signed-url")

    assert response.status_code == 403


def test_missing_document(client: TestClient, documents, login_as):
    login_as("tenant-id")

    response = client.get("/api/documents/nope/signed-url")

    assert response.status_code == 404
    assert response.json()["error"] == msg("document_not_found")


def test_signed_url_requires_session(client: TestClient, documents):
    response = client.get("/api/documents/doc-shared/signed-url")

    assert response.status_code == 401


# ============================================================
# /api/profile
# ============================================================
def test_read_profile(client: TestClient, documents, login_as):
    login_as("tenant-id")

    response = client.get("/api/profile")

    assert response.status_code == 200
    assert response.json()["full_name"] == "Tenant"
    assert response.json()["role"] == "tenant"


def test_profile_missing_is_forbidden(client: TestClient, supabase, login_as):
    login_as("ghost-id")

    response = client.get("/api/profile")

    assert response.status_code == 403


def test_update_profile_keeps_phone_as_text(client: TestClient, documents, login_as):
    login_as("tenant-id")

    response = client.patch("/api/profile", json={"phone": " 0501234567 "})

    assert response.status_code == 200
    assert response.json()["phone"] == "0501234567"
    profile = next(p for p in documents.db.rows("profiles") if p["id"] == "tenant-id")
    assert profile["phone"] == "0501234567"
    assert profile["role"] == "tenant"


def test_update_profile_ignores_role(client: TestClient, documents, login_as):
    login_as("tenant-id")

    response = client.patch("/api/profile", json={"full_name": "New Name", "role": "admin"})

    assert response.status_code == 200
    profile = next(p for p in documents.db.rows("profiles") if p["id"] == "tenant-id")
    assert profile["full_name"] == "New Name"
    assert profile["role"] == "tenant"


def test_update_profile_requires_fields(client: TestClient, documents, login_as):
    login_as("tenant-id")

    response = client.patch("/api/profile", json={})

    assert response.status_code == 400
    assert response.json()["error"] == msg("no_fields_to_update")


def test_update_profile_rejects_blank_name(client: TestClient, documents, login_as):
    login_as("tenant-id")

    response = client.patch("/api/profile", json={"full_name": "   "})

    assert response.status_code == 400
