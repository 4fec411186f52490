#!/usr/bin/env python3
"""
Classify text with the moderation rules and print one JSON verdict per input.
Useful when editing rule tables: pass --rules to try an override file before deploying it.
"""

import argparse
import json
import sys
from pathlib import Path

# Ensure services/api is on path so app.moderation resolves
SCRIPT_DIR = Path(__file__).resolve().parent
API_ROOT = SCRIPT_DIR.parent
if str(API_ROOT) not in sys.path:
    sys.path.insert(0, str(API_ROOT))

from app.moderation import classify, load_pattern_tables
from app.moderation.rules import DEFAULT_TABLES


def iter_inputs(args: argparse.Namespace):
    """Yield texts from positional args, then from --file (one per non-blank line)."""
    for text in args.text:
        yield text
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield line


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run submission moderation over text.")
    parser.add_argument("text", nargs="*", help="Text to classify")
    parser.add_argument("--file", help="File with one submission per line")
    parser.add_argument("--type", choices=["whisper", "tribute"], default="whisper", help="Submission type")
    parser.add_argument("--rules", help="JSON rule override file (defaults to built-in rules)")
    args = parser.parse_args(argv)

    if not args.text and not args.file:
        parser.error("provide text or --file")

    tables = load_pattern_tables(args.rules) if args.rules else DEFAULT_TABLES
    counts: dict[str, int] = {}
    for text in iter_inputs(args):
        verdict = classify(text, args.type, tables=tables)
        counts[verdict.action] = counts.get(verdict.action, 0) + 1
        out = {"text": text, **verdict.model_dump(by_alias=True)}
        print(json.dumps(out, ensure_ascii=False))

    print(json.dumps({"summary": counts}), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
