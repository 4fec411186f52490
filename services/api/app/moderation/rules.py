"""
English-only pattern tables for submission moderation. Case-insensitive regex rule text, compiled once at import.
Rule text is data: set MODERATION_RULES_PATH to a JSON file to replace any category without touching code.
Compiled with re.ASCII: word boundaries only count [A-Za-z0-9_] as word characters, so "ésuicide" still matches "suicide".
"""

import json
import os
import re
from pathlib import Path
from typing import NamedTuple

# Crisis: self-harm, harm to others, immediate danger
CRISIS_RULES: tuple[str, ...] = (
    r"\b(kill myself|suicide|end my life|take my life|want to die|should i die)\b",
    r"\b(cutting myself|hurt myself|harm myself|self harm)\b",
    r"\b(no reason to live|better off dead|worthless|can't go on)\b",
    r"\b(goodbye cruel world|final goodbye|last message)\b",
    r"\b(kill (them|him|her|you|everyone)|murder|shoot up|mass shooting)\b",
    r"\b(going to hurt|planning to attack|weapon|gun|knife|bomb)\b",
    r"\b(they deserve to die|make them pay|revenge)\b",
    r"\b(right now|tonight|today|soon|can't wait)\b.*\b(die|kill|end it|hurt)\b",
    r"\b(pills|overdose|hanging|jump off|bridge)\b",
)

# Offensive: slurs, hate speech, targeted harassment
OFFENSIVE_RULES: tuple[str, ...] = (
    r"\b(n[i1]gg[ae]r|n[i1]gg[ae]|f[a@]gg[o0]t|ch[i1]nk|sp[i1]c|k[i1]ke)\b",
    r"\b(wetb[a@]ck|beaner|gook|sand n[i1]gg[ae]r|towelhead)\b",
    r"\b(hate (blacks|whites|asians|hispanics|jews|muslims|christians|gays|trans))\b",
    r"\b((blacks|whites|asians|hispanics|jews|muslims) (are|should) (die|burn|suffer))\b",
    r"\b(wh[o0]re|sl[u*]t|c[u*]nt|b[i1]tch)\b.*\b(women|girls|female)\b",
    r"\b(f[a@]g|dyke|tr[a@]nny)\b",
    r"\b((gays|trans) (should|deserve to|need to) (die|burn|suffer))\b",
    r"\b(kill yourself|kys|neck yourself|rope yourself)\b",
    r"\b(subhuman|degenerate|vermin|scum)\b.*\b(race|religion|people)\b",
)

# Disrespectful: mockery/celebration/fraud accusations paired with death or grief (tributes only)
DISRESPECTFUL_RULES: tuple[str, ...] = (
    r"\b(lol|lmao|haha|rofl)\b.*\b(dead|died|death|rip)\b",
    r"\b(glad|happy|celebrate)\b.*\b(dead|died|death)\b",
    r"\b(deserved|had it coming|good riddance)\b",
    r"\b(fake|lying|scam|fraud|attention)\b.*\b(memorial|tribute|grief)\b",
    r"\b(rot in hell|burn in hell|hope (they|he|she) suffered)\b",
)

# Crisis disambiguation markers. Not word-anchored: plain substring presence.
SELF_HARM_MARKERS = r"(myself|my life|i want|i should|i can't)"
OTHER_DIRECTED_MARKERS = r"(them|him|her|you|everyone|they|shoot up|attack)"

_CATEGORY_KEYS = ("crisis", "offensive", "disrespectful")
_MARKER_KEYS = ("self_harm_markers", "other_directed_markers")


class RuleLoadError(ValueError):
    """Raised when a rule override file is unreadable or malformed."""


class PatternTables(NamedTuple):
    crisis: tuple[re.Pattern, ...]
    offensive: tuple[re.Pattern, ...]
    disrespectful: tuple[re.Pattern, ...]
    self_harm_markers: re.Pattern
    other_directed_markers: re.Pattern


def _compile(rule: str, source: str) -> re.Pattern:
    if not isinstance(rule, str) or not rule:
        raise RuleLoadError(f"{source}: rule must be a non-empty string, got {rule!r}")
    try:
        return re.compile(rule, re.IGNORECASE | re.ASCII)
    except re.error as exc:
        raise RuleLoadError(f"{source}: invalid pattern {rule!r}: {exc}") from exc


def _read_overrides(path: str | Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise RuleLoadError(f"cannot read moderation rules from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RuleLoadError(f"{path}: expected a JSON object of rule lists")
    unknown = set(data) - set(_CATEGORY_KEYS) - set(_MARKER_KEYS)
    if unknown:
        raise RuleLoadError(f"{path}: unknown rule keys {sorted(unknown)}")
    return data


def load_pattern_tables(path: str | Path | None = None) -> PatternTables:
    """
    Compile the rule tables. Without a path, the built-in tables are used.
    With a path, each key present in the JSON object replaces that category (list of strings)
    or marker (single string); missing keys keep the defaults.
    """
    raw: dict = {
        "crisis": list(CRISIS_RULES),
        "offensive": list(OFFENSIVE_RULES),
        "disrespectful": list(DISRESPECTFUL_RULES),
        "self_harm_markers": SELF_HARM_MARKERS,
        "other_directed_markers": OTHER_DIRECTED_MARKERS,
    }
    if path:
        overrides = _read_overrides(path)
        for key in _CATEGORY_KEYS:
            if key in overrides:
                if not isinstance(overrides[key], list):
                    raise RuleLoadError(f"{path}: '{key}' must be a list of patterns")
                raw[key] = overrides[key]
        for key in _MARKER_KEYS:
            if key in overrides:
                raw[key] = overrides[key]

    return PatternTables(
        crisis=tuple(_compile(r, "crisis") for r in raw["crisis"]),
        offensive=tuple(_compile(r, "offensive") for r in raw["offensive"]),
        disrespectful=tuple(_compile(r, "disrespectful") for r in raw["disrespectful"]),
        self_harm_markers=_compile(raw["self_harm_markers"], "self_harm_markers"),
        other_directed_markers=_compile(raw["other_directed_markers"], "other_directed_markers"),
    )


MODERATION_RULES_PATH = (os.getenv("MODERATION_RULES_PATH") or "").strip() or None

DEFAULT_TABLES = load_pattern_tables(MODERATION_RULES_PATH)
