"""
Deterministic moderation of whispers and tributes. Pure functions over the compiled rule tables; no I/O.
Priority: crisis > offensive > disrespectful (tributes only) > clean. Exactly one verdict per call.
"""

from typing import Annotated, Literal, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.moderation.rules import DEFAULT_TABLES, PatternTables

SubmissionType = Literal["whisper", "tribute"]

SELF_HARM_REASON = "Self-harm or suicidal language detected"
THREAT_REASON = "Threats of violence toward others detected"
CRISIS_REASON = "Crisis language detected"
OFFENSIVE_REASON = "Offensive language, hate speech, or slurs detected"
DISRESPECTFUL_REASON = "Disrespectful or trolling language detected"
CLEAN_REASON = "Content passed automated moderation"


class CategoryMatch(NamedTuple):
    hit: bool
    matches: list[str]
    reason: str


def _no_match() -> CategoryMatch:
    return CategoryMatch(False, [], "")


# --- Verdict models (tagged on action) ---


class _VerdictBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    reason: str
    matches: list[str] = Field(default_factory=list)
    approved: Literal[False] = False


class UrgentVerdict(_VerdictBase):
    """Crisis content: hold for urgent human review and show crisis resources."""

    action: Literal["flag-urgent"] = "flag-urgent"
    status: Literal["urgent-review"] = "urgent-review"
    flag_reason: str
    crisis_resources_shown: Literal[True] = True


class RejectedVerdict(_VerdictBase):
    """Offensive (any type) or disrespectful (tributes) content: auto-reject."""

    action: Literal["reject"] = "reject"
    status: Literal["rejected"] = "rejected"
    category: Literal["offensive", "disrespectful"]
    rejection_reason: str
    rejected: Literal[True] = True


class PendingVerdict(_VerdictBase):
    """Clean content: store and wait for normal review."""

    action: Literal["approve-pending"] = "approve-pending"
    status: Literal["pending"] = "pending"
    reason: str = CLEAN_REASON
    rejected: Literal[False] = False


Verdict = Annotated[Union[UrgentVerdict, RejectedVerdict, PendingVerdict], Field(discriminator="action")]


# --- Category checks ---


def _collect(text: str, patterns) -> list[str]:
    """First literal match of each pattern, in table order."""
    matches: list[str] = []
    for pat in patterns:
        m = pat.search(text)
        if m:
            matches.append(m.group(0))
    return matches


def _crisis_reason(text: str, tables: PatternTables) -> str:
    if tables.self_harm_markers.search(text):
        return SELF_HARM_REASON
    if tables.other_directed_markers.search(text):
        return THREAT_REASON
    return CRISIS_REASON


def check_crisis(text: str, tables: PatternTables = DEFAULT_TABLES) -> CategoryMatch:
    """
    Crisis/self-harm/threat check. On a hit, one reason is chosen:
    self-referential marker first, then other-directed marker, else generic crisis.
    """
    if not text:
        return _no_match()
    matches = _collect(text, tables.crisis)
    if not matches:
        return _no_match()
    return CategoryMatch(True, matches, _crisis_reason(text, tables))


def check_offensive(text: str, tables: PatternTables = DEFAULT_TABLES) -> CategoryMatch:
    if not text:
        return _no_match()
    matches = _collect(text, tables.offensive)
    return CategoryMatch(True, matches, OFFENSIVE_REASON) if matches else _no_match()


def check_disrespectful(text: str, tables: PatternTables = DEFAULT_TABLES) -> CategoryMatch:
    if not text:
        return _no_match()
    matches = _collect(text, tables.disrespectful)
    return CategoryMatch(True, matches, DISRESPECTFUL_REASON) if matches else _no_match()


# --- Priority merge ---


def classify(
    text: str,
    submission_type: SubmissionType = "whisper",
    *,
    tables: PatternTables = DEFAULT_TABLES,
) -> UrgentVerdict | RejectedVerdict | PendingVerdict:
    """
    Classify text for the given submission type. Total over any string (None treated as empty).
    Any submission_type other than "tribute" skips the disrespectful check.
    """
    text = text or ""
    crisis = check_crisis(text, tables)
    offensive = check_offensive(text, tables)
    disrespectful = check_disrespectful(text, tables) if submission_type == "tribute" else _no_match()

    if crisis.hit:
        return UrgentVerdict(reason=crisis.reason, flag_reason=crisis.reason, matches=crisis.matches)
    if offensive.hit:
        return RejectedVerdict(
            reason=offensive.reason,
            rejection_reason=offensive.reason,
            category="offensive",
            matches=offensive.matches,
        )
    if disrespectful.hit:
        return RejectedVerdict(
            reason=disrespectful.reason,
            rejection_reason=disrespectful.reason,
            category="disrespectful",
            matches=disrespectful.matches,
        )
    return PendingVerdict()
