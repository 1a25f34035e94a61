"""
CSV row -> table row mapping for bulk imports.

Cell values arrive as strings and are coerced by shape and by the name of
the target column:

- JSON object / array text is parsed (left as text when it is not valid JSON)
- "a|b|c" becomes ["a", "b", "c"]
- "true" / "false" become booleans
- numbers become numbers when the column looks numeric (score, weight, ...)
- 6-digit hex colors lose their leading "#" in color columns
- empty cells become None
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional
import csv
import io
import json
import math
import re
import uuid

NUMERIC_HINTS = ("score", "weight", "order", "duration", "threshold", "value")
HEX_COLOR_RE = re.compile(r"^#?[0-9A-Fa-f]{6}$")


def parse_csv(csv_data: str) -> List[Dict[str, Any]]:
    """Parse CSV text with a header row into dicts keyed by header."""
    return list(csv.DictReader(io.StringIO(csv_data.lstrip("\ufeff"))))


def _number(value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() and re.fullmatch(r"\s*[-+]?\d+\s*", value) else number


def coerce_value(column: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value if value not in ("", None) else None
    if value.startswith("{") or value.startswith("["):
        try:
            return json.loads(value)
        except ValueError:
            return value
    if "|" in value:
        return [part.strip() for part in value.split("|") if part.strip()]
    if value in ("true", "false"):
        return value == "true"
    if value and any(hint in column for hint in NUMERIC_HINTS):
        number = _number(value)
        if number is not None:
            return number
    if "color" in column and HEX_COLOR_RE.match(value):
        return value.lstrip("#")
    return value or None


def _json_or_raw(value: Any) -> Any:
    if not value:
        return None
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def _agent_voice_fields(row: Mapping[str, Any], mapped: Dict[str, Any]) -> None:
    preview_url = row.get("previewAudioUrl")
    is_active = row.get("isActive")
    if preview_url or is_active is not None:
        settings = mapped.get("voice_settings") if isinstance(mapped.get("voice_settings"), dict) else {}
        mapped["voice_settings"] = {
            **settings,
            "previewAudioUrl": preview_url or None,
            "isActive": is_active in ("true", True),
        }


def _call_log_fields(row: Mapping[str, Any], mapped: Dict[str, Any]) -> None:
    metadata = mapped.get("metadata") if isinstance(mapped.get("metadata"), dict) else {}
    mapped["metadata"] = {
        **metadata,
        "conversationId": row.get("conversationId"),
        "callSid": row.get("callSid"),
        "campaignName": row.get("campaignName"),
        "transcript": _json_or_raw(row.get("transcript")),
        "analysis": _json_or_raw(row.get("analysis")),
        "formData": _json_or_raw(row.get("formData")),
    }


SPECIAL_FIELDS = {
    "agent_voices": _agent_voice_fields,
    "call_logs": _call_log_fields,
}


def map_row(
    row: Mapping[str, Any],
    column_mapping: Mapping[str, str],
    table: str,
    user_id: str,
    owner_column: Optional[str],
    now: Optional[str] = None,
) -> Dict[str, Any]:
    """Map one CSV record onto table columns and fill in system fields.

    The owner column always holds the importing user, whatever the CSV says.
    """
    mapped = {db_col: coerce_value(db_col, row.get(csv_col)) for csv_col, db_col in column_mapping.items()}

    special = SPECIAL_FIELDS.get(table)
    if special:
        special(row, mapped)

    if owner_column:
        mapped[owner_column] = user_id
    if not mapped.get("id"):
        mapped["id"] = str(uuid.uuid4())

    now = now or datetime.utcnow().isoformat()
    if not mapped.get("created_at"):
        mapped["created_at"] = row.get("created_date") or now
    if not mapped.get("updated_at"):
        mapped["updated_at"] = row.get("updated_date") or now
    return mapped


def batches(rows: List[Dict[str, Any]], size: int) -> Iterable[tuple]:
    """Yield (batch_number, first_row, last_row, rows); numbers and row positions are 1-based."""
    for start in range(0, len(rows), size):
        chunk = rows[start:start + size]
        yield start // size + 1, start + 1, start + len(chunk), chunk
