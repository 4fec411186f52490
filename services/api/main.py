import os
import re
import secrets
import time
from contextlib import asynccontextmanager
from typing import Any, Literal

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

from db import init_db
from repo import list_submissions, log_rejected_submission, save_tribute, save_whisper
from app.logging_structured import (
    generate_request_id,
    get_metrics,
    log_moderation_trigger,
    log_request,
    log_submission_error,
)
from app.moderation import PendingVerdict, RejectedVerdict, UrgentVerdict, classify, crisis_resources, rejection_message
from app.notify import send_general_notification, send_urgent_alert

APP_ENV = os.getenv("APP_ENV", "production")
# Moderator token for the review queue. Unset means the queue is closed.
ADMIN_API_TOKEN = (os.getenv("ADMIN_API_TOKEN") or "").strip()

WHISPER_MAX_CHARS = 280
TRIBUTE_MAX_CHARS = 1000
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Whispers & Tributes Moderation API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


class SubmissionValidationError(ValueError):
    """Bad or missing submission field; message is shown to the submitter."""


@app.exception_handler(SubmissionValidationError)
async def _validation_error_handler(request: Request, exc: SubmissionValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def _malformed_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> dict:
    """Basic counters as JSON (no Prometheus)."""
    return get_metrics()


# Fields are untyped so a wrong JSON type gets the same 400 message as a missing field.
class WhisperRequest(BaseModel):
    text: Any = None


class TributeRequest(BaseModel):
    name: Any = None
    message: Any = None
    email: Any = None


def _required_text(value: Any, *, missing: str, empty: str, max_chars: int | None = None, too_long: str = "") -> str:
    if not value or not isinstance(value, str):
        raise SubmissionValidationError(missing)
    trimmed = value.strip()
    if not trimmed:
        raise SubmissionValidationError(empty)
    if max_chars is not None and len(trimmed) > max_chars:
        raise SubmissionValidationError(too_long)
    return trimmed


def _optional_email(value: Any) -> str | None:
    if not value:
        return None
    if not isinstance(value, str) or not EMAIL_RE.fullmatch(value):
        raise SubmissionValidationError("Invalid email address")
    return value.strip()


def _client_ip(request: Request) -> str:
    return request.headers.get("x-forwarded-for") or request.headers.get("client-ip") or "unknown"


def _failure_response(submission_type: str, exc: Exception) -> JSONResponse:
    body: dict[str, Any] = {"error": f"Failed to submit {submission_type}. Please try again."}
    if APP_ENV == "development":
        body["details"] = str(exc)
    return JSONResponse(status_code=500, content=body)


def _urgent_body(submission_type: str, record_id: int) -> dict:
    resources = crisis_resources().model_dump(by_alias=True, exclude_none=True)
    return {
        "success": True,
        "urgent": True,
        "message": resources["message"],
        "resources": resources["resources"],
        "closingMessage": resources["closingMessage"],
        f"{submission_type}Received": True,
        "id": record_id,
    }


def _moderate(
    *,
    request_id: str,
    submission_type: Literal["whisper", "tribute"],
    text: str,
    store,
    log_rejected,
    submission: dict,
    background_tasks: BackgroundTasks,
    pending_message: str,
) -> tuple[JSONResponse, UrgentVerdict | RejectedVerdict | PendingVerdict]:
    """
    Classify once and branch on the verdict action. store(verdict) persists pending/urgent records and returns the id;
    log_rejected(verdict) writes the monitoring row. Alerts are queued as background tasks after storage succeeds.
    """
    verdict = classify(text, submission_type)

    if verdict.action == "flag-urgent":
        log_moderation_trigger(
            request_id=request_id,
            submission_type=submission_type,
            action=verdict.action,
            reason=verdict.reason,
            matches=list(verdict.matches),
        )
        record_id = store(verdict)
        background_tasks.add_task(send_urgent_alert, {**submission, "id": record_id}, verdict, submission_type)
        return JSONResponse(status_code=200, content=_urgent_body(submission_type, record_id)), verdict

    if verdict.action == "reject":
        log_moderation_trigger(
            request_id=request_id,
            submission_type=submission_type,
            action=verdict.action,
            reason=verdict.reason,
            matches=list(verdict.matches),
        )
        log_rejected(verdict)
        info = rejection_message(verdict.reason, submission_type)
        return JSONResponse(status_code=400, content=info.model_dump(by_alias=True)), verdict

    record_id = store(verdict)
    if submission_type == "whisper":
        background_tasks.add_task(send_general_notification, {**submission, "id": record_id}, submission_type)
    body = {"success": True, "message": pending_message, f"{submission_type}Id": record_id}
    return JSONResponse(status_code=200, content=body), verdict


@app.post("/whispers")
def submit_whisper(payload: WhisperRequest, request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
    request_id = generate_request_id()
    start = time.perf_counter()

    text = _required_text(
        payload.text,
        missing="Whisper text is required",
        empty="Whisper cannot be empty",
        max_chars=WHISPER_MAX_CHARS,
        too_long=f"Whisper cannot exceed {WHISPER_MAX_CHARS} characters",
    )
    ip_address = _client_ip(request)

    try:
        response, verdict = _moderate(
            request_id=request_id,
            submission_type="whisper",
            text=text,
            store=lambda v: save_whisper(text, v, ip_address=ip_address),
            log_rejected=lambda v: log_rejected_submission("whisper", text, v, ip_address=ip_address),
            submission={"text": text},
            background_tasks=background_tasks,
            pending_message="Your whisper has been received and is pending review. Thank you for sharing.",
        )
    except Exception as exc:
        log_submission_error(request_id=request_id, submission_type="whisper", error=repr(exc))
        log_request(request_id=request_id, submission_type="whisper", latency_ms=(time.perf_counter() - start) * 1000)
        return _failure_response("whisper", exc)

    log_request(
        request_id=request_id,
        submission_type="whisper",
        latency_ms=(time.perf_counter() - start) * 1000,
        status=verdict.status,
        action=verdict.action,
        match_count=len(verdict.matches),
    )
    return response


@app.post("/tributes")
def submit_tribute(payload: TributeRequest, request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
    request_id = generate_request_id()
    start = time.perf_counter()

    name = _required_text(payload.name, missing="Name is required", empty="Name cannot be empty")
    message = _required_text(
        payload.message,
        missing="Message is required",
        empty="Message cannot be empty",
        max_chars=TRIBUTE_MAX_CHARS,
        too_long=f"Message cannot exceed {TRIBUTE_MAX_CHARS} characters",
    )
    email = _optional_email(payload.email)
    ip_address = _client_ip(request)

    try:
        # Name is moderated together with the message.
        response, verdict = _moderate(
            request_id=request_id,
            submission_type="tribute",
            text=f"{name} {message}",
            store=lambda v: save_tribute(name, message, email, v, ip_address=ip_address),
            log_rejected=lambda v: log_rejected_submission(
                "tribute", message, v, name=name, email=email, ip_address=ip_address
            ),
            submission={"name": name, "message": message, "email": email},
            background_tasks=background_tasks,
            pending_message=(
                "Your tribute has been received and is pending review. Thank you for honoring their memory."
            ),
        )
    except Exception as exc:
        log_submission_error(request_id=request_id, submission_type="tribute", error=repr(exc))
        log_request(request_id=request_id, submission_type="tribute", latency_ms=(time.perf_counter() - start) * 1000)
        return _failure_response("tribute", exc)

    log_request(
        request_id=request_id,
        submission_type="tribute",
        latency_ms=(time.perf_counter() - start) * 1000,
        status=verdict.status,
        action=verdict.action,
        match_count=len(verdict.matches),
    )
    return response


admin_token_header = APIKeyHeader(name="X-Admin-Token", auto_error=False)


def require_admin(token: str | None = Depends(admin_token_header)) -> None:
    if not token:
        raise HTTPException(status_code=401, detail="Admin token required")
    if not ADMIN_API_TOKEN or not secrets.compare_digest(token, ADMIN_API_TOKEN):
        raise HTTPException(status_code=403, detail="Invalid admin token")


@app.get("/submissions/{submission_type}", dependencies=[Depends(require_admin)])
def review_queue(
    submission_type: Literal["whispers", "tributes"],
    status: Literal["pending", "urgent-review"] | None = None,
) -> list[dict]:
    """Stored whispers or tributes for moderators, newest first. Rejected content is not served here."""
    return list_submissions(submission_type.rstrip("s"), status=status)
