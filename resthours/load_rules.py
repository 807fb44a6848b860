# resthours/load_rules.py
"""
Rule loader for rest-hours JSON files.

Provides:
 - load_ruleset_from_folder(): validated RuleSpec objects merged into a RestRuleset
 - RULESET: the bundled rules folder, eager-loaded (STCW defaults if unusable)
 - INVALID_REPORTS: parse/validation errors from the eager load
"""
from pathlib import Path
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError, field_validator

from .compliance import STCW_DEFAULTS, RestLimit, RestRuleset

log = logging.getLogger("rule_loader")

# logic.window -> RestRuleset field
WINDOW_FIELDS = {"24h": "rest_24h", "7d": "rest_7d"}


# ---------------------------------------------------------
# RuleSpec Model
# ---------------------------------------------------------
class RuleLogic(BaseModel):
    type: str
    window: str
    window_minutes: int
    min_rest_minutes: int

    @field_validator("window")
    @classmethod
    def _known_window(cls, v):
        if v not in WINDOW_FIELDS:
            raise ValueError(f"window must be one of {sorted(WINDOW_FIELDS)}")
        return v


class RuleSpec(BaseModel):
    id: str
    title: str
    logic: RuleLogic
    stcw_reference: Optional[Any] = None
    enabled: bool = True
    version: Optional[str] = None

    @field_validator("id")
    @classmethod
    def _id_not_empty(cls, v):
        if not v or not isinstance(v, str) or v.strip() == "":
            raise ValueError("id must be non-empty string")
        return v


# ---------------------------------------------------------
# Helper: Extract rule objects from mixed JSON formats
# ---------------------------------------------------------
def _iter_rule_objects_from_raw(raw: Any) -> List[Dict[str, Any]]:
    if raw is None:
        return []

    # List of rules
    if isinstance(raw, list):
        return raw

    if isinstance(raw, dict):
        # wrapper { "meta": {...}, "rules": [ ... ] }
        if "rules" in raw and isinstance(raw["rules"], list):
            return raw["rules"]

        # dict-of-rule-objects keyed by id
        values = list(raw.values())
        if values and all(isinstance(v, dict) and "logic" in v for v in values):
            out = []
            for k, v in raw.items():
                vr = dict(v)
                vr.setdefault("id", k)
                out.append(vr)
            return out

        # Single rule
        return [raw]

    return []


def _meta_version(raw: Any) -> Optional[str]:
    if isinstance(raw, dict):
        meta = raw.get("meta") or {}
        if isinstance(meta, dict) and meta.get("version"):
            return str(meta["version"])
    return None


# ---------------------------------------------------------
# Main Loader
# ---------------------------------------------------------
def load_ruleset_from_folder(folder: Path) -> Tuple[RestRuleset, List[Dict[str, Any]]]:
    """
    Loads all rule JSON files from folder (sorted, deterministic).
    Windows not covered by any valid rule keep their STCW default.
    Returns:
        (ruleset, invalid_reports)
    """
    invalid: List[Dict[str, Any]] = []
    limits: Dict[str, RestLimit] = {}
    limit_sources: Dict[str, str] = {}
    source_files: List[str] = []
    version: Optional[str] = None

    folder = Path(folder)
    if not folder.exists() or not folder.is_dir():
        log.warning("Rules folder does not exist: %s", folder)
        return STCW_DEFAULTS, invalid

    for f in sorted(folder.glob("*.json")):
        fname = f.name
        try:
            parsed = json.loads(f.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            invalid.append({"file": fname, "error": f"read_error: {e}"})
            log.error("Failed to read %s: %s", fname, e)
            continue
        except json.JSONDecodeError as e:
            invalid.append({"file": fname, "error": f"json_parse_error: {e}"})
            log.error("JSON parse error in %s: %s", fname, e)
            continue

        version = _meta_version(parsed) or version
        loaded_from_file = False

        for idx, raw_rule in enumerate(_iter_rule_objects_from_raw(parsed)):
            try:
                rule = RuleSpec.model_validate(raw_rule)
            except ValidationError as e:
                invalid.append({"file": fname, "index": idx, "error": f"validation_error: {e.errors(include_url=False)}"})
                continue

            if not rule.enabled:
                log.info("Skipping disabled rule %s from %s", rule.id, fname)
                continue
            if rule.logic.type != "rest_window":
                invalid.append({"file": fname, "index": idx, "error": f"unsupported logic type: {rule.logic.type}"})
                continue

            field = WINDOW_FIELDS[rule.logic.window]
            if field in limits:
                invalid.append({"file": fname, "index": idx,
                                "error": f"duplicate {rule.logic.window} window rule: {rule.id}",
                                "existing_from": limit_sources[field]})
                log.error("Duplicate %s window rule %s in %s", rule.logic.window, rule.id, fname)
                continue

            try:
                limits[field] = RestLimit(window_minutes=rule.logic.window_minutes,
                                          min_rest_minutes=rule.logic.min_rest_minutes)
            except ValidationError as e:
                invalid.append({"file": fname, "index": idx, "error": f"validation_error: {e.errors(include_url=False)}"})
                continue

            limit_sources[field] = fname
            loaded_from_file = True
            log.info("Loaded rule %s from %s", rule.id, fname)

        if loaded_from_file and fname not in source_files:
            source_files.append(fname)

    ruleset = RestRuleset(
        version=version or STCW_DEFAULTS.version,
        source_files=source_files,
        **{field: limits.get(field, getattr(STCW_DEFAULTS, field)) for field in WINDOW_FIELDS.values()},
    )
    log.info("Rule loader summary: %d window rules, %d invalid, version %s",
             len(limits), len(invalid), ruleset.version)
    return ruleset, invalid


# ---------------------------------------------------------
# Eager load on import
# ---------------------------------------------------------
RULES_DIR = Path(__file__).parent / "rules"

try:
    RULESET, INVALID_REPORTS = load_ruleset_from_folder(RULES_DIR)
except Exception as e:
    log.exception("Failed to eager-load rules: %s", e)
    RULESET, INVALID_REPORTS = STCW_DEFAULTS, [{"file": "loader_exception", "error": str(e)}]

__all__ = [
    "load_ruleset_from_folder",
    "RULESET",
    "INVALID_REPORTS",
    "RULES_DIR",
    "RuleSpec",
]
