import json

import pytest

from app.moderation import RuleLoadError, classify, load_pattern_tables
from app.moderation.rules import CRISIS_RULES, DEFAULT_TABLES, DISRESPECTFUL_RULES, OFFENSIVE_RULES


def _write(tmp_path, data) -> str:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_default_tables_compile_every_rule():
    assert len(DEFAULT_TABLES.crisis) == len(CRISIS_RULES)
    assert len(DEFAULT_TABLES.offensive) == len(OFFENSIVE_RULES)
    assert len(DEFAULT_TABLES.disrespectful) == len(DISRESPECTFUL_RULES)
    assert all(isinstance(t, tuple) for t in DEFAULT_TABLES[:3])


def test_rules_are_case_insensitive():
    assert DEFAULT_TABLES.crisis[0].search("SUICIDE")
    assert DEFAULT_TABLES.self_harm_markers.search("MYSELF")


def test_override_replaces_only_named_category(tmp_path):
    tables = load_pattern_tables(_write(tmp_path, {"offensive": [r"\bzorp\b"]}))
    assert len(tables.offensive) == 1
    assert [p.pattern for p in tables.crisis] == list(CRISIS_RULES)

    v = classify("you are a zorp", "whisper", tables=tables)
    assert v.action == "reject"
    assert v.matches == ["zorp"]
    # default offensive rules no longer apply
    assert classify("kys", "whisper", tables=tables).action == "approve-pending"


def test_override_markers(tmp_path):
    tables = load_pattern_tables(_write(tmp_path, {"self_harm_markers": r"(nobody)"}))
    v = classify("nobody would miss me if I took the pills", "whisper", tables=tables)
    assert v.action == "flag-urgent"
    assert v.reason == "Self-harm or suicidal language detected"


def test_invalid_pattern_raises(tmp_path):
    with pytest.raises(RuleLoadError):
        load_pattern_tables(_write(tmp_path, {"crisis": ["(unclosed"]}))


def test_category_must_be_list(tmp_path):
    with pytest.raises(RuleLoadError):
        load_pattern_tables(_write(tmp_path, {"crisis": "suicide"}))


def test_unknown_key_raises(tmp_path):
    with pytest.raises(RuleLoadError):
        load_pattern_tables(_write(tmp_path, {"spam": ["free money"]}))


def test_missing_file_raises(tmp_path):
    with pytest.raises(RuleLoadError):
        load_pattern_tables(str(tmp_path / "missing.json"))


def test_rule_load_error_is_value_error():
    assert issubclass(RuleLoadError, ValueError)
