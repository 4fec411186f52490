"""
Operator email over SMTP (STARTTLS). Best effort: every public function returns a result dict and never raises,
so alert delivery can run after the response without affecting the submitter.
"""

import os
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

from app.logging_structured import log_notification
from app.moderation import UrgentVerdict
from app.notify.renderer import render_general_notification_text, render_urgent_alert_html, type_label

SMTP_HOST = (os.getenv("SMTP_HOST") or "").strip()
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = (os.getenv("SMTP_USER") or "").strip()
SMTP_PASS = os.getenv("SMTP_PASS") or ""
SMTP_FROM = (os.getenv("SMTP_FROM") or SMTP_USER).strip()
SMTP_TLS = (os.getenv("SMTP_TLS") or "true").strip().lower() in {"1", "true", "yes"}
SMTP_TIMEOUT_SEC = 20
ADMIN_EMAIL = (os.getenv("ADMIN_EMAIL") or "").strip()
INFO_EMAIL = (os.getenv("INFO_EMAIL") or "").strip()
DASHBOARD_URL = os.getenv("DASHBOARD_URL", "https://vaelorinverse.com/admin/dashboard.html")


class DeliveryError(RuntimeError):
    pass


def _build_message(*, to: str, subject: str, text: str, html: str | None = None) -> EmailMessage:
    if not SMTP_HOST or not SMTP_FROM:
        raise DeliveryError("SMTP host/from not configured")
    if not to:
        raise DeliveryError("recipient address not configured")
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f'"Content Moderation Alerts" <{SMTP_FROM}>'
    msg["To"] = to
    msg["Message-ID"] = make_msgid()
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


def _send(msg: EmailMessage) -> str:
    """Send one message; returns the Message-ID header value."""
    with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT_SEC) as server:
        if SMTP_TLS:
            server.starttls()
        if SMTP_USER and SMTP_PASS:
            server.login(SMTP_USER, SMTP_PASS)
        server.send_message(msg)
    return msg.get("Message-ID") or ""


def _deliver(kind: str, submission_type: str, build) -> dict:
    try:
        msg = build()
        message_id = _send(msg)
    except Exception as exc:
        log_notification(kind=kind, submission_type=submission_type, success=False, error=str(exc))
        return {"success": False, "error": str(exc)}
    log_notification(kind=kind, submission_type=submission_type, success=True, message_id=message_id)
    return {"success": True, "message_id": message_id}


def send_urgent_alert(submission: dict, verdict: UrgentVerdict, submission_type: str = "whisper") -> dict:
    """Email ADMIN_EMAIL about crisis content. Returns {"success": bool, ...}; failures are logged, not raised."""
    label = type_label(submission_type)

    def build() -> EmailMessage:
        html = render_urgent_alert_html(
            submission,
            reason=verdict.reason,
            matches=list(verdict.matches),
            submission_type=submission_type,
            dashboard_url=DASHBOARD_URL,
        )
        text = (
            f"URGENT {label.upper()} ALERT\n\nReason: {verdict.reason}\n"
            f"Detected keywords: {', '.join(verdict.matches) or 'N/A'}\n\nReview: {DASHBOARD_URL}"
        )
        return _build_message(
            to=ADMIN_EMAIL,
            subject=f"URGENT: Crisis Language Detected in {label}",
            text=text,
            html=html,
        )

    return _deliver("urgent_alert", submission_type, build)


def send_general_notification(submission: dict, submission_type: str = "whisper") -> dict:
    """Email INFO_EMAIL that a clean submission is waiting for review."""
    label = type_label(submission_type)

    def build() -> EmailMessage:
        body = render_general_notification_text(submission, submission_type=submission_type, dashboard_url=DASHBOARD_URL)
        return _build_message(to=INFO_EMAIL, subject=f"New {label} Pending Review", text=body)

    return _deliver("general_notification", submission_type, build)


def verify_smtp_config() -> bool:
    """Connect (and log in, if credentials are set) without sending. True when the SMTP settings work."""
    if not SMTP_HOST:
        return False
    try:
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=SMTP_TIMEOUT_SEC) as server:
            if SMTP_TLS:
                server.starttls()
            if SMTP_USER and SMTP_PASS:
                server.login(SMTP_USER, SMTP_PASS)
            server.noop()
    except (smtplib.SMTPException, OSError):
        return False
    return True
