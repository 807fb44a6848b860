# resthours/records.py
"""
Decoder for log rows handed over by the persistence layer.

Rows arrive camelCase (mobile app) or snake_case (SQLite columns), with the
category-specific payloads still packed as JSON strings:
 - dailyWorkCategories  -> JSON array of category names
 - machineryMonitored   -> JSON object describing the engine watch
These are unpacked here, once, so the engine only ever sees typed entries.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import json
import logging
import re

from pydantic import TypeAdapter, ValidationError

from .models import DutyCategory, DutyLogEntry

log = logging.getLogger("resthours.records")

_ENTRY_ADAPTER = TypeAdapter(DutyLogEntry)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

_POSITION_KEYS = ("lat_deg", "lat_min", "lat_dir", "lon_deg", "lon_min", "lon_dir")
_BRIDGE_KEYS = ("course_deg", "speed_kn", "weather", "steering_minutes", "is_lookout")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", str(key)).lower()


def _snake_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {_snake(k): v for k, v in raw.items()}


def _first(flat: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if flat.get(k) is not None:
            return flat[k]
    return None


def _json_payload(value: Any, field: str) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, (dict, list)):
        return value
    try:
        return json.loads(value)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"{field}: payload is not valid JSON ({e})") from e


def _work_categories(value: Any) -> List[str]:
    payload = _json_payload(value, "daily_work_categories")
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError("daily_work_categories: expected a JSON array")
    return [str(c) for c in payload]


def _machinery(value: Any) -> Dict[str, Any]:
    payload = _json_payload(value, "machinery_monitored")
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("machinery_monitored: expected a JSON object")
    return _snake_keys(payload)


def decode_entry(row: Mapping[str, Any]) -> DutyLogEntry:
    """
    Typed log entry for one persistence row.
    Raises ValueError (pydantic.ValidationError for shape problems) on a bad row.
    """
    flat = _snake_keys(row)
    category = str(_first(flat, "category", "type") or "").strip().upper()

    data: Dict[str, Any] = {
        "id": flat.get("id"),
        "date": flat.get("date"),
        "category": category,
        "start": _first(flat, "start", "start_time"),
        "end": _first(flat, "end", "end_time"),
        "summary": flat.get("summary") or "",
        "remarks": flat.get("remarks"),
    }

    if category == DutyCategory.DAILY:
        data["work_categories"] = _work_categories(_first(flat, "work_categories", "daily_work_categories"))
    elif category == DutyCategory.BRIDGE:
        if any(flat.get(k) is not None for k in _POSITION_KEYS):
            data["position"] = {k: flat.get(k) for k in _POSITION_KEYS}
        elif isinstance(flat.get("position"), Mapping):
            data["position"] = _snake_keys(flat["position"])
        for k in _BRIDGE_KEYS:
            if flat.get(k) is not None:
                data[k] = flat[k]
    elif category == DutyCategory.ENGINE:
        data["machinery"] = _machinery(_first(flat, "machinery", "machinery_monitored"))
    elif category == DutyCategory.PORT:
        data["port_watch_type"] = flat.get("port_watch_type")

    return _ENTRY_ADAPTER.validate_python(data)


def decode_entries(rows: Iterable[Mapping[str, Any]]) -> Tuple[List[DutyLogEntry], List[Dict[str, Any]]]:
    """
    Decode many rows.
    Returns:
        (entries, invalid_reports) -- bad rows are reported, never raised.
    """
    entries: List[DutyLogEntry] = []
    invalid: List[Dict[str, Any]] = []
    seen: Dict[str, int] = {}

    for idx, row in enumerate(rows):
        if not isinstance(row, Mapping):
            invalid.append({"index": idx, "id": None, "error": f"unexpected row type: {type(row).__name__}"})
            log.error("Row %d is not a mapping", idx)
            continue
        row_id: Optional[Any] = row.get("id")
        try:
            entry = decode_entry(row)
        except ValidationError as e:
            invalid.append({"index": idx, "id": row_id, "error": f"validation_error: {e.errors(include_url=False)}"})
            log.error("Row %d (%s) failed validation: %s", idx, row_id, e)
            continue
        except ValueError as e:
            invalid.append({"index": idx, "id": row_id, "error": f"payload_error: {e}"})
            log.error("Row %d (%s) has a bad payload: %s", idx, row_id, e)
            continue

        if entry.id in seen:
            invalid.append({"index": idx, "id": entry.id, "error": f"duplicate entry id: {entry.id}", "first_index": seen[entry.id]})
            log.error("Duplicate entry id %s at row %d", entry.id, idx)
            continue
        seen[entry.id] = idx
        entries.append(entry)

    log.info("Decoded %d log entries, %d invalid", len(entries), len(invalid))
    return entries, invalid
