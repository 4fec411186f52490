"""
Render operator emails for moderated submissions. Deterministic section order.
Every submitter-supplied value is HTML-escaped before it reaches the template.
"""

from datetime import datetime
from html import escape

ALERT_ACTIONS = [
    "Crisis resources automatically shown to user",
    "Submission flagged for urgent review",
    "Admin notification sent (this email)",
    "Saved to database with urgent status",
]

_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .alert-header { background: #ef4444; color: white; padding: 20px; border-radius: 8px 8px 0 0; }
    .alert-body { background: #f9fafb; padding: 20px; border: 1px solid #e5e7eb; border-top: none; }
    .content-box { background: white; padding: 15px; border-left: 4px solid #ef4444; margin: 15px 0; }
    .label { font-weight: 600; color: #6b7280; }
    .actions-list { background: #fef3c7; padding: 15px; border-radius: 6px; margin: 15px 0; }
    .keywords { background: #fee2e2; padding: 10px; border-radius: 6px; color: #991b1b; }
    .btn { display: inline-block; background: #fbbf24; color: #000; padding: 12px 24px; text-decoration: none; border-radius: 6px; }
"""


def type_label(submission_type: str) -> str:
    return "Memorial Tribute" if submission_type == "tribute" else "Whisper"


def _meta_row(label: str, value: str) -> str:
    return f'<p><span class="label">{label}:</span> {escape(value)}</p>\n'


def _submission_content(submission: dict, submission_type: str) -> str:
    if submission_type == "tribute":
        return submission.get("message") or ""
    return submission.get("text") or ""


def render_urgent_alert_html(
    submission: dict,
    *,
    reason: str,
    matches: list[str],
    submission_type: str,
    dashboard_url: str,
    submitted_at: datetime | None = None,
) -> str:
    """
    Build the urgent-alert HTML body. submission is the stored record as a dict:
    whispers carry "text"; tributes carry "name", "message" and optional "email".
    """
    label = type_label(submission_type)
    when = (submitted_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    meta = [
        '<p><span class="label">Status:</span> <strong style="color: #ef4444;">Requires Immediate Review</strong></p>\n',
        _meta_row("Reason", reason),
        _meta_row("Submitted", when),
    ]
    if submission.get("id") is not None:
        meta.append(_meta_row("Record ID", str(submission["id"])))
    if submission_type == "tribute":
        meta.append(_meta_row("Name", submission.get("name") or ""))
        if submission.get("email"):
            meta.append(_meta_row("Email", submission["email"]))

    heading = "Tribute Message:" if submission_type == "tribute" else "Whisper Content:"
    keywords = ", ".join(matches) if matches else "N/A"
    actions = "\n".join(f"<li>{a}</li>" for a in ALERT_ACTIONS)

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<style>{_STYLE}</style>
</head>
<body>
<div class="container">
<div class="alert-header"><h1 style="margin: 0; font-size: 24px;">URGENT {label.upper()} ALERT</h1></div>
<div class="alert-body">
{"".join(meta)}
<h3>{heading}</h3>
<div class="content-box">"{escape(_submission_content(submission, submission_type))}"</div>
<h3>Detected Keywords:</h3>
<div class="keywords">{escape(keywords)}</div>
<div class="actions-list">
<h3 style="margin-top: 0;">Actions Taken:</h3>
<ul>
{actions}
</ul>
</div>
<p><a href="{escape(dashboard_url, quote=True)}" class="btn">View in Dashboard</a></p>
<p style="color: #6b7280; font-size: 14px;">This is an automated alert from the content moderation system.</p>
</div>
</div>
</body>
</html>
"""


def render_general_notification_text(submission: dict, *, submission_type: str, dashboard_url: str) -> str:
    """Plain-text body for a new submission that passed automated moderation and awaits review."""
    label = type_label(submission_type)
    lines = [f"A new {label.lower()} is pending review.", ""]
    if submission.get("id") is not None:
        lines.append(f"Record ID: {submission['id']}")
    if submission_type == "tribute":
        lines.append(f"Name: {submission.get('name') or ''}")
    lines.extend(["", _submission_content(submission, submission_type), "", f"Review: {dashboard_url}"])
    return "\n".join(lines)
