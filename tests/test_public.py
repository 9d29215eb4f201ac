# tests/test_public.py

"""
Tests for the public contact form, bug reports and health checks.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from core.messages import msg


def contact_payload(**overrides):
    payload = {
        "full_name": "Yossi Katz",
        "email": "Yossi@Gmail.com",
        "phone": "0549876543",
        "address": "Bialik 3",
        "city": "Haifa",
        "message": "נשמח לשמוע פרטים",
    }
    payload.update(overrides)
    return payload


# ============================================================
# POST /api/contact
# ============================================================
def test_contact_request_is_stored(client: TestClient, supabase):
    with patch("routers.public.send_webhook_message") as mock_webhook:
        response = client.post("/api/contact", json=contact_payload())

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": msg("contact_received")}

    row = supabase.db.rows("contact_requests")[0]
    assert row["email"] == "yossi@gmail.com"
    assert row["status"] == "new"
    assert row["phone"] == "0549876543"
    mock_webhook.assert_called_once()
    assert "Yossi Katz" in mock_webhook.call_args[0][0]


def test_contact_request_validation(client: TestClient, supabase):
    response = client.post("/api/contact", json=contact_payload(address=""))

    assert response.status_code == 400
    assert response.json()["error"] == msg("invalid_request")
    assert supabase.db.rows("contact_requests") == []


def test_contact_insert_failure(client: TestClient, supabase):
    supabase.db.fail("contact_requests", "insert")

    with patch("routers.public.send_webhook_message") as mock_webhook:
        response = client.post("/api/contact", json=contact_payload())

    assert response.status_code == 500
    assert response.json()["error"] == msg("contact_failed")
    mock_webhook.assert_not_called()


def test_contact_is_rate_limited(client: TestClient, supabase):
    with patch("routers.public.send_webhook_message"):
        for _ in range(5):
            assert client.post("/api/contact", json=contact_payload()).status_code == 200
        response = client.post("/api/contact", json=contact_payload())

    assert response.status_code == 429


# ============================================================
# POST /api/bug-report
# ============================================================
def test_bug_report_with_screenshot(client: TestClient):
    with patch("routers.public.send_email") as mock_send:
        response = client.post(
            "/api/bug-report",
            data={
                "type": "bug",
                "name": "Dana",
                "email": "dana@gmail.com",
                "description": "הכפתור לא עובד",
            },
            files={"screenshot": ("shot.png", b"\x89PNG fake", "image/png")},
        )

    assert response.status_code == 200
    assert response.json()["message"] == msg("bug_report_sent")

    kwargs = mock_send.call_args.kwargs
    assert kwargs["subject"] == "[באג] דיווח חדש מ-Dana"
    assert kwargs["reply_to"] == "dana@gmail.com"
    assert kwargs["attachments"][0]["filename"] == "shot.png"
    assert kwargs["attachments"][0]["content"] == b"\x89PNG fake"
    assert "לא צוין" in kwargs["body"]


def test_suggestion_subject(client: TestClient):
    with patch("routers.public.send_email") as mock_send:
        response = client.post(
            "/api/bug-report",
            data={"type": "suggestion", "name": "Dana", "email": "dana@gmail.com", "description": "רעיון"},
        )

    assert response.status_code == 200
    assert mock_send.call_args.kwargs["subject"] == "[הצעת שיפור] פנייה חדשה מ-Dana"
    assert mock_send.call_args.kwargs["attachments"] == []


def test_bug_report_requires_fields(client: TestClient):
    with patch("routers.public.send_email") as mock_send:
        response = client.post("/api/bug-report", data={"type": "bug", "name": "Dana"})

    assert response.status_code == 400
    assert response.json()["error"] == msg("missing_fields")
    mock_send.assert_not_called()


def test_bug_report_email_failure(client: TestClient):
    with patch("routers.public.send_email", side_effect=RuntimeError("SMTP credentials missing")):
        response = client.post(
            "/api/bug-report",
            data={"type": "bug", "name": "Dana", "email": "dana@gmail.com", "description": "x"},
        )

    assert response.status_code == 500
    assert response.json()["error"] == msg("bug_report_failed")


# ============================================================
# Health
# ============================================================
def test_health_app(client: TestClient):
    response = client.get("/health/app")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_db(client: TestClient, supabase):
    with patch("core.supabase_client.get_supabase_client", return_value=supabase):
        response = client.get("/health/db")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert set(body["details"]["tables"]) == {"profiles", "buildings", "building_members", "building_invites"}


def test_health_db_not_configured(client: TestClient, monkeypatch):
    from core.config import settings

    monkeypatch.setattr(settings, "SUPABASE_URL", None)

    response = client.get("/health/db")

    assert response.json()["status"] == "not_configured"
    assert "SUPABASE_URL" in response.json()["missing"]
