"""
Structured JSON logging and in-memory metrics.
One JSON line per request or event on stderr; /metrics returns counters as JSON.
"""

import json
import sys
import uuid
from typing import Any

# In-memory counters for /metrics
_metrics: dict[str, int | dict[str, int]] = {
    "requests_total": 0,
    "by_status": {},
    "by_submission_type": {},
    "urgent_alerts_total": 0,
    "notification_failures_total": 0,
    "submission_errors_total": 0,
}


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, default=str), file=sys.stderr, flush=True)


def _bump(key: str, label: str) -> None:
    bucket = _metrics.setdefault(key, {})
    bucket[label] = (bucket.get(label) or 0) + 1


def log_request(
    *,
    request_id: str,
    submission_type: str,
    latency_ms: float,
    status: str | None = None,
    action: str | None = None,
    match_count: int = 0,
) -> None:
    """Emit one JSON log line per submission and update counters. status is None when validation or storage failed."""
    _emit(
        {
            "request_id": request_id,
            "submission_type": submission_type,
            "latency_ms": round(latency_ms, 2),
            "status": status,
            "action": action,
            "match_count": match_count,
        }
    )

    _metrics["requests_total"] = (_metrics["requests_total"] or 0) + 1
    _bump("by_submission_type", submission_type)
    if status:
        _bump("by_status", status)


def log_moderation_trigger(
    *,
    request_id: str,
    submission_type: str,
    action: str,
    reason: str,
    matches: list[str],
) -> None:
    """Log when moderation flags or rejects a submission."""
    _emit(
        {
            "event": "moderation_trigger",
            "request_id": request_id,
            "submission_type": submission_type,
            "action": action,
            "reason": reason,
            "matches": matches,
        }
    )
    if action == "flag-urgent":
        _metrics["urgent_alerts_total"] = (_metrics["urgent_alerts_total"] or 0) + 1


def log_notification(
    *,
    kind: str,
    submission_type: str,
    success: bool,
    message_id: str | None = None,
    error: str | None = None,
) -> None:
    """Log outcome of an alert/notification email. Failures are counted, never raised."""
    _emit(
        {
            "event": "notification_sent" if success else "notification_failed",
            "kind": kind,
            "submission_type": submission_type,
            "message_id": message_id,
            "error": error,
        }
    )
    if not success:
        _metrics["notification_failures_total"] = (_metrics["notification_failures_total"] or 0) + 1


def log_submission_error(*, request_id: str, submission_type: str, error: str) -> None:
    """Log an unexpected failure while handling a submission (storage or otherwise)."""
    _emit(
        {
            "event": "submission_error",
            "request_id": request_id,
            "submission_type": submission_type,
            "error": error,
        }
    )
    _metrics["submission_errors_total"] = (_metrics["submission_errors_total"] or 0) + 1


def get_metrics() -> dict[str, Any]:
    """Return current counters as JSON-serializable dict."""
    return {
        "requests_total": _metrics.get("requests_total", 0),
        "by_status": dict(_metrics.get("by_status") or {}),
        "by_submission_type": dict(_metrics.get("by_submission_type") or {}),
        "urgent_alerts_total": _metrics.get("urgent_alerts_total", 0),
        "notification_failures_total": _metrics.get("notification_failures_total", 0),
        "submission_errors_total": _metrics.get("submission_errors_total", 0),
    }


def generate_request_id() -> str:
    return str(uuid.uuid4())
