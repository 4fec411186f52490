from app.moderation.classifier import (
    PendingVerdict,
    RejectedVerdict,
    UrgentVerdict,
    Verdict,
    check_crisis,
    check_disrespectful,
    check_offensive,
    classify,
)
from app.moderation.messages import CrisisResources, RejectionInfo, crisis_resources, rejection_message
from app.moderation.rules import PatternTables, RuleLoadError, load_pattern_tables

__all__ = [
    "classify",
    "check_crisis",
    "check_offensive",
    "check_disrespectful",
    "Verdict",
    "UrgentVerdict",
    "RejectedVerdict",
    "PendingVerdict",
    "crisis_resources",
    "rejection_message",
    "CrisisResources",
    "RejectionInfo",
    "PatternTables",
    "RuleLoadError",
    "load_pattern_tables",
]
