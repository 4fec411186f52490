import json

from db import RejectedSubmission, Tribute, Whisper, get_session_factory
from app.moderation import PendingVerdict, RejectedVerdict, UrgentVerdict

_STORED_MODELS = {"whisper": Whisper, "tribute": Tribute}


def _moderation_fields(verdict: UrgentVerdict | PendingVerdict | RejectedVerdict, ip_address: str) -> dict:
    return {
        "status": verdict.status,
        "approved": verdict.approved,
        "rejected": isinstance(verdict, RejectedVerdict),
        "moderation_result": verdict.reason,
        "flag_reason": verdict.flag_reason if isinstance(verdict, UrgentVerdict) else None,
        "crisis_resources_shown": isinstance(verdict, UrgentVerdict),
        "detected_keywords_json": json.dumps(list(verdict.matches)),
        "ip_address": ip_address or "unknown",
    }


def _require_storable(verdict) -> None:
    if isinstance(verdict, RejectedVerdict):
        raise ValueError("Rejected submissions are logged with log_rejected_submission, not stored")


def save_whisper(text: str, verdict: UrgentVerdict | PendingVerdict, ip_address: str = "unknown") -> int:
    """Store a pending or urgent whisper. Returns whisper id."""
    _require_storable(verdict)
    SessionLocal = get_session_factory()
    with SessionLocal() as session:
        whisper = Whisper(text=text, **_moderation_fields(verdict, ip_address))
        session.add(whisper)
        session.commit()
        session.refresh(whisper)
        return whisper.id


def save_tribute(
    name: str,
    message: str,
    email: str | None,
    verdict: UrgentVerdict | PendingVerdict,
    ip_address: str = "unknown",
) -> int:
    """Store a pending or urgent tribute. Returns tribute id."""
    _require_storable(verdict)
    SessionLocal = get_session_factory()
    with SessionLocal() as session:
        tribute = Tribute(name=name, message=message, email=email, **_moderation_fields(verdict, ip_address))
        session.add(tribute)
        session.commit()
        session.refresh(tribute)
        return tribute.id


def log_rejected_submission(
    submission_type: str,
    content: str,
    verdict: RejectedVerdict,
    *,
    name: str | None = None,
    email: str | None = None,
    ip_address: str = "unknown",
) -> int:
    """Record a rejected submission for monitoring. Returns log row id."""
    SessionLocal = get_session_factory()
    with SessionLocal() as session:
        row = RejectedSubmission(
            submission_type=submission_type,
            content=content,
            name=name,
            email=email,
            rejection_reason=verdict.rejection_reason,
            **_moderation_fields(verdict, ip_address),
        )
        session.add(row)
        session.commit()
        session.refresh(row)
        return row.id


def _row_to_dict(row) -> dict:
    out = {
        "id": row.id,
        "status": row.status,
        "approved": row.approved,
        "rejected": row.rejected,
        "moderation_result": row.moderation_result,
        "flag_reason": row.flag_reason,
        "crisis_resources_shown": row.crisis_resources_shown,
        "detected_keywords": json.loads(row.detected_keywords_json or "[]"),
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
    if isinstance(row, Whisper):
        out["text"] = row.text
    else:
        out.update({"name": row.name, "message": row.message, "email": row.email})
    return out


def list_submissions(submission_type: str, status: str | None = None) -> list[dict]:
    """Return stored whispers or tributes (newest first), optionally filtered by status."""
    model = _STORED_MODELS[submission_type]
    SessionLocal = get_session_factory()
    with SessionLocal() as session:
        query = session.query(model)
        if status:
            query = query.filter(model.status == status)
        rows = query.order_by(model.created_at.desc(), model.id.desc()).all()
        return [_row_to_dict(r) for r in rows]


def count_rejected(submission_type: str | None = None) -> int:
    SessionLocal = get_session_factory()
    with SessionLocal() as session:
        query = session.query(RejectedSubmission)
        if submission_type:
            query = query.filter(RejectedSubmission.submission_type == submission_type)
        return query.count()
