"""
User-facing payloads shown after moderation: crisis resources for urgent verdicts and rejection info.
Constant text; no inputs beyond the echoed reason and submission type.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CRISIS_MESSAGE = (
    "We're concerned about your wellbeing. If you're in crisis or experiencing thoughts of self-harm, "
    "please reach out to these resources immediately:"
)
CRISIS_CLOSING_MESSAGE = (
    "Your message has been received and will be reviewed. "
    "Please know that you are not alone, and help is available."
)

TRIBUTE_GUIDELINES = (
    "Our memorial wall is a sacred space for honoring loved ones. Please ensure your tribute is respectful, "
    "compassionate, and free from hate speech, slurs, or harassment."
)
WHISPER_GUIDELINES = (
    "Whispers of the Veil is a space for reflection and healing. "
    "We cannot accept content containing hate speech, slurs, or harassment."
)


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CrisisResource(_Payload):
    """One hotline/directory entry. Exactly one of phone or url is set."""

    name: str
    phone: str | None = None
    url: str | None = None
    description: str


class CrisisResources(_Payload):
    message: str
    resources: list[CrisisResource] = Field(default_factory=list)
    closing_message: str


class RejectionInfo(_Payload):
    rejected: bool = True
    message: str
    reason: str
    guidelines: str
    can_resubmit: bool = True


_RESOURCES = (
    CrisisResource(
        name="National Suicide Prevention Lifeline",
        phone="988",
        description="24/7 crisis support in English and Spanish",
    ),
    CrisisResource(
        name="Crisis Text Line",
        phone="Text HOME to 741741",
        description="24/7 crisis support via text",
    ),
    CrisisResource(
        name="International Association for Suicide Prevention",
        url="https://www.iasp.info/resources/Crisis_Centres/",
        description="Find crisis centers worldwide",
    ),
    CrisisResource(
        name="Emergency Services",
        phone="911 (US) or your local emergency number",
        description="For immediate danger",
    ),
)


def crisis_resources() -> CrisisResources:
    """Fixed crisis bundle: intro message, four resources (hotline, text line, directory, emergency), closing message."""
    return CrisisResources(
        message=CRISIS_MESSAGE,
        resources=list(_RESOURCES),
        closing_message=CRISIS_CLOSING_MESSAGE,
    )


def rejection_message(reason: str, submission_type: str = "whisper") -> RejectionInfo:
    """Rejection payload for the submitter. reason is echoed verbatim; resubmission is always allowed."""
    type_label = "tribute" if submission_type == "tribute" else "whisper"
    return RejectionInfo(
        message=f"Your {type_label} could not be accepted.",
        reason=reason,
        guidelines=TRIBUTE_GUIDELINES if type_label == "tribute" else WHISPER_GUIDELINES,
    )
