# tests/test_notifications.py

"""
Tests for SMTP email and webhook helpers.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from core.config import settings
from core.notifications import send_email, send_webhook_message


@pytest.fixture
def smtp_settings(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.gmail.com")
    monkeypatch.setattr(settings, "SMTP_PORT", 465)
    monkeypatch.setattr(settings, "SMTP_USER", "support@vaad.co.il")
    monkeypatch.setattr(settings, "SMTP_PASS", "app-password")
    monkeypatch.setattr(settings, "SUPPORT_EMAIL", None)


def test_send_email_defaults_to_support_inbox(smtp_settings):
    with patch("core.notifications.smtplib.SMTP_SSL") as mock_smtp:
        server = mock_smtp.return_value.__enter__.return_value

        send_email(
            subject="[באג] דיווח חדש מ-Dana",
            body="text",
            html_body="<p>html</p>",
            attachments=[{"filename": "shot.png", "content": b"png", "content_type": "image/png"}],
            reply_to="dana@gmail.com",
        )

    mock_smtp.assert_called_once_with("smtp.gmail.com", 465)
    server.login.assert_called_once_with("support@vaad.co.il", "app-password")
    message = server.send_message.call_args[0][0]
    assert message["To"] == "support@vaad.co.il"
    assert message["Reply-To"] == "dana@gmail.com"
    filenames = [part.get_filename() for part in message.walk() if part.get_filename()]
    assert filenames == ["shot.png"]


def test_send_email_without_credentials_raises(monkeypatch):
    monkeypatch.setattr(settings, "SMTP_HOST", None)
    monkeypatch.setattr(settings, "SUPPORT_EMAIL", "support@vaad.co.il")

    with pytest.raises(RuntimeError):
        send_email(subject="s", body="b")


def test_webhook_skipped_when_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "CONTACT_WEBHOOK_URL", None)

    with patch("core.notifications.requests.post") as mock_post:
        assert send_webhook_message("hello") is False

    mock_post.assert_not_called()


def test_webhook_failure_is_swallowed(monkeypatch):
    monkeypatch.setattr(settings, "CONTACT_WEBHOOK_URL", "https://hooks.example/abc")

    with patch("core.notifications.requests.post", side_effect=requests.ConnectionError("down")):
        assert send_webhook_message("hello") is False


def test_webhook_posts_content(monkeypatch):
    monkeypatch.setattr(settings, "CONTACT_WEBHOOK_URL", "https://hooks.example/abc")

    with patch("core.notifications.requests.post", return_value=Mock(status_code=204, ok=True)) as mock_post:
        assert send_webhook_message("hello") is True

    mock_post.assert_called_once_with(
        "https://hooks.example/abc",
        json={"content": "hello"},
        timeout=10,
    )
