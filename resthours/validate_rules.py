# resthours/validate_rules.py
# Run:
#   python -m resthours.validate_rules [rules_folder]
# Validates every .json in the folder (default: bundled resthours/rules) and
# prints errors with file/line/col, then the merged limits the engine would use.

import json
from pathlib import Path
import sys

from .load_rules import RULES_DIR, load_ruleset_from_folder
from .timeutils import minutes_to_hhmm


def validate_json_file(p: Path) -> bool:
    try:
        txt = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"{p.name}: ERROR reading file: {e}")
        return False
    try:
        json.loads(txt)
    except json.JSONDecodeError as e:
        print(f"{p.name}: JSON parse error: {e.msg} (line {e.lineno}, col {e.colno})")
        # small snippet around the error location
        lines = txt.splitlines()
        ln = e.lineno - 1
        start = max(0, ln - 2)
        end = min(len(lines), ln + 2)
        print("---- context ----")
        for i in range(start, end):
            marker = ">>" if i == ln else "  "
            print(f"{marker} {i + 1:4d}: {lines[i]}")
        print("-----------------")
        return False
    print(f"{p.name}: OK")
    return True


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    folder = Path(args[0]) if args else RULES_DIR
    if not folder.exists():
        print("Rules folder not found:", folder.resolve())
        return 1
    files = sorted(folder.glob("*.json"))
    if not files:
        print("No .json files found in:", folder.resolve())
        return 0

    bad_count = sum(1 for f in files if not validate_json_file(f))

    ruleset, invalid = load_ruleset_from_folder(folder)
    for report in invalid:
        where = report.get("file", "?")
        if "index" in report:
            where = f"{where}[{report['index']}]"
        print(f"{where}: {report.get('error')}")

    print(f"\nRuleset version: {ruleset.version}")
    print(f"  24h: rest >= {minutes_to_hhmm(ruleset.rest_24h.min_rest_minutes)} in {minutes_to_hhmm(ruleset.rest_24h.window_minutes)}")
    print(f"  7d:  rest >= {minutes_to_hhmm(ruleset.rest_7d.min_rest_minutes)} in {minutes_to_hhmm(ruleset.rest_7d.window_minutes)}")

    invalid_rules = sum(1 for r in invalid if "index" in r)
    print(f"\nSummary: {len(files) - bad_count} OK, {bad_count} INVALID ({len(files)} files checked), {invalid_rules} invalid rules")
    if bad_count or invalid_rules:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
