"""
Eval suite: run moderation on eval/cases.jsonl and assert action and reason for every case.
Runnable as a script (exit code 1 on any failure) or collected by pytest.
"""

import json
import sys
from pathlib import Path

# API root
API_ROOT = Path(__file__).resolve().parent
if str(API_ROOT) not in sys.path:
    sys.path.insert(0, str(API_ROOT))

from app.moderation import classify, crisis_resources, rejection_message


def load_cases() -> list[dict]:
    path = API_ROOT / "eval" / "cases.jsonl"
    if not path.exists():
        raise FileNotFoundError(f"eval/cases.jsonl not found: {path}")
    cases = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            cases.append(json.loads(line))
    return cases


def run_case(case: dict) -> None:
    verdict = classify(case["text"], case["type"])
    assert verdict.action == case["expected_action"], (
        f"action {verdict.action} != expected {case['expected_action']}"
    )
    assert verdict.reason == case["expected_reason"], f"reason {verdict.reason!r} != {case['expected_reason']!r}"
    if verdict.action == "approve-pending":
        assert verdict.matches == [], "clean content must carry no matches"
    else:
        assert verdict.matches, "flagged content must carry matches"
    if verdict.action == "flag-urgent":
        assert len(crisis_resources().resources) == 4
    if verdict.action == "reject":
        info = rejection_message(verdict.reason, case["type"])
        assert info.reason == verdict.reason and info.can_resubmit


def main():
    cases = load_cases()
    assert len(cases) >= 20, f"Expected at least 20 cases, got {len(cases)}"

    failed = []
    for i, case in enumerate(cases):
        try:
            run_case(case)
        except AssertionError as e:
            failed.append((i + 1, case["text"][:50], str(e)))

    if failed:
        for idx, text, err in failed:
            print(f"Case {idx} FAILED ({text}...): {err}", file=sys.stderr)
        sys.exit(1)
    print(f"All {len(cases)} cases passed.")


def test_eval_suite_all_cases():
    """Pytest entry point: run full eval suite."""
    cases = load_cases()
    assert len(cases) >= 20, f"Expected at least 20 cases, got {len(cases)}"
    for case in cases:
        run_case(case)


if __name__ == "__main__":
    main()
