# routers/public.py

"""
Unauthenticated intake endpoints used by the landing page and the
in-app feedback dialog. Both are rate limited per client IP.
"""

from html import escape
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from core.errors import UpstreamFailure, ValidationError, upstream_failure
from core.logging_config import get_logger
from core.messages import msg
from core.notifications import send_email, send_webhook_message
from core.rate_limiter import get_rate_limit_identifier, require_rate_limit
from core.supabase_client import require_admin_client
from core.utils import sanitize
from models.contact import ContactRequestCreate
from models.enums import ContactStatus, ReportType

log = get_logger("public")

router = APIRouter(
    prefix="/api",
    tags=["Public"],
)

MAX_SCREENSHOT_BYTES = 5 * 1024 * 1024
PHONE_NOT_GIVEN = "לא צוין"


# ============================================================
# POST: Contact request (landing page)
# ============================================================
@router.post("/contact", summary="Submit a contact request (public)")
def submit_contact(payload: ContactRequestCreate, request: Request):
    require_rate_limit(
        request,
        get_rate_limit_identifier(request, "contact"),
        max_requests=5,
        window_seconds=60,
    )

    row = sanitize(payload.model_dump())
    row["email"] = str(payload.email).lower()
    row["status"] = ContactStatus.new.value

    client = require_admin_client()

    try:
        client.table("contact_requests").insert(row).execute()
    except Exception as e:
        raise upstream_failure(e, f"Contact request insert failed for {row['email']}", "contact_failed")

    log.info(f"New contact request from {row['email']} ({row.get('city') or '-'})")

    send_webhook_message(
        f"📬 New contact request\n"
        f"Name: {row['full_name']}\n"
        f"Email: {row['email']}\n"
        f"Phone: {row.get('phone') or '-'}\n"
        f"Address: {row['address']}, {row.get('city') or ''}"
    )

    return {"success": True, "message": msg("contact_received")}


# ============================================================
# POST: Bug report / improvement suggestion
# ============================================================
def _report_subject(report_type: ReportType, name: str) -> str:
    if report_type == ReportType.bug:
        return f"[באג] דיווח חדש מ-{name}"
    return f"[הצעת שיפור] פנייה חדשה מ-{name}"


def _report_html(report_type: ReportType, name: str, email: str, phone: str, description: str, has_screenshot: bool) -> str:
    is_bug = report_type == ReportType.bug
    color = "#dc2626" if is_bug else "#ca8a04"
    title = "🐛 דיווח באג" if is_bug else "💡 הצעת שיפור"
    section = "תיאור הבעיה" if is_bug else "תיאור ההצעה"
    attached = '<p style="color: #6b7280;">📎 צילום מסך מצורף</p>' if has_screenshot else ""

    return f"""
<div dir="rtl" style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: {color};">{title}</h2>
  <p><strong>שם:</strong> {escape(name)}</p>
  <p><strong>אימייל:</strong> {escape(email)}</p>
  <p><strong>טלפון:</strong> {escape(phone)}</p>
  <h3>{section}</h3>
  <p style="white-space: pre-wrap;">{escape(description)}</p>
  {attached}
</div>
"""


@router.post("/bug-report", summary="Send a bug report or suggestion to support (public)")
async def submit_bug_report(
    request: Request,
    type: ReportType = Form(ReportType.bug),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    screenshot: Optional[UploadFile] = File(None),
):
    require_rate_limit(
        request,
        get_rate_limit_identifier(request, "bug-report"),
        max_requests=5,
        window_seconds=60,
    )

    fields = sanitize({"name": name, "email": email, "phone": phone, "description": description})
    if not fields["name"] or not fields["email"] or not fields["description"]:
        raise ValidationError("missing_fields")

    attachments = []
    if screenshot is not None and screenshot.filename:
        content = await screenshot.read()
        if len(content) > MAX_SCREENSHOT_BYTES:
            raise ValidationError("invalid_request")
        attachments.append(
            {
                "filename": screenshot.filename or "screenshot.png",
                "content": content,
                "content_type": screenshot.content_type,
            }
        )

    phone_text = fields["phone"] or PHONE_NOT_GIVEN
    body = (
        f"{'Bug' if type == ReportType.bug else 'Suggestion'} from {fields['name']}\n"
        f"Email: {fields['email']}\n"
        f"Phone: {phone_text}\n\n"
        f"{fields['description']}\n"
    )

    try:
        await run_in_threadpool(
            send_email,
            subject=_report_subject(type, fields["name"]),
            body=body,
            html_body=_report_html(type, fields["name"], fields["email"], phone_text, fields["description"], bool(attachments)),
            attachments=attachments,
            reply_to=fields["email"],
        )
    except Exception as e:
        log.error(f"Bug report email failed ({fields['email']}): {e}")
        raise UpstreamFailure("bug_report_failed")

    log.info(f"{type.value} report sent from {fields['email']}")
    return {"success": True, "message": msg("bug_report_sent")}
