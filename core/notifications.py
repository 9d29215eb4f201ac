# core/notifications.py
import requests
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.mime.base import MIMEBase
from email import encoders
from typing import List, Optional
from core.config import settings
from core.logging_config import get_logger

log = get_logger("notifications")

WEBHOOK_TIMEOUT_SECONDS = 10


# -----------------------------------------------------
# 📨 Send webhook (Discord, Slack, etc.)
# -----------------------------------------------------
def send_webhook_message(message: str, webhook_url: Optional[str] = None) -> bool:
    """
    Post `message` to a chat webhook. Never raises: a failed
    notification must not fail the request that triggered it.
    """
    webhook_url = webhook_url or settings.CONTACT_WEBHOOK_URL
    if not webhook_url:
        log.debug("Webhook URL not configured, skipping.")
        return False

    try:
        response = requests.post(
            webhook_url,
            json={"content": message},
            timeout=WEBHOOK_TIMEOUT_SECONDS,
        )
        log.info(f"Webhook sent (status {response.status_code})")
        return response.ok
    except requests.RequestException as e:
        log.warning(f"Webhook failed: {e}")
        return False


# -----------------------------------------------------
# 📧 Send email (SMTP)
# -----------------------------------------------------
def smtp_configured() -> bool:
    return all([settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASS])


def support_recipient() -> Optional[str]:
    return settings.SUPPORT_EMAIL or settings.SMTP_USER


def send_email(
    subject: str,
    body: str,
    recipients: Optional[List[str]] = None,
    attachments: Optional[List[dict]] = None,
    html_body: Optional[str] = None,
    reply_to: Optional[str] = None,
):
    """
    Send email via SMTP (SSL).

    Args:
        subject: Email subject
        body: Plain text email body
        recipients: Recipient addresses (defaults to the support inbox)
        attachments: List of dicts with 'filename', 'content' (bytes)
                     and optionally 'content_type' ("image/png")
        html_body: Optional HTML email body
        reply_to: Address replies should go to (the reporter)

    Raises whatever smtplib raises; callers decide whether that is fatal.
    """
    recipient_list = recipients or [r for r in [support_recipient()] if r]

    if not recipient_list:
        raise RuntimeError("No email recipients configured")

    if not smtp_configured():
        raise RuntimeError("SMTP credentials missing")

    msg = MIMEMultipart("mixed")
    msg["From"] = settings.SMTP_USER
    msg["To"] = ", ".join(recipient_list)
    msg["Subject"] = subject
    if reply_to:
        msg["Reply-To"] = reply_to

    text = MIMEMultipart("alternative")
    text.attach(MIMEText(body, "plain", "utf-8"))
    if html_body:
        text.attach(MIMEText(html_body, "html", "utf-8"))
    msg.attach(text)

    for attachment in attachments or []:
        maintype, _, subtype = (attachment.get("content_type") or "application/octet-stream").partition("/")
        part = MIMEBase(maintype, subtype or "octet-stream")
        part.set_payload(attachment["content"])
        encoders.encode_base64(part)
        part.add_header(
            "Content-Disposition",
            "attachment",
            filename=attachment["filename"],
        )
        msg.attach(part)

    with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT) as server:
        server.login(settings.SMTP_USER, settings.SMTP_PASS)
        server.send_message(msg)

    log.info(f"Email sent to {', '.join(recipient_list)}")
