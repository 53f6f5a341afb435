"""Tolerant parsing of JSON embedded in model output."""

import json
import logging
from typing import Any

from eventscope.data import SynthesizedDetails
from eventscope.errors import SynthesisFormatError

RAW_OUTPUT_LOG_CHARS = 500

STRING_FIELDS = ("location", "details")
LIST_FIELDS = ("accused", "victims", "timeline")

logger = logging.getLogger(__name__)


def extract_embedded_json(text: str) -> dict[str, Any]:
    """Parse the JSON object embedded in a model response.

    Takes everything from the first ``{`` to the last ``}``, so prose or
    code fences around the object are ignored.

    Args:
        text: Raw model output.

    Returns:
        The decoded object.

    Raises:
        SynthesisFormatError: If no object is found or it does not parse.
    """
    cleaned = text.strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        logger.error("No JSON object in model output: %s", cleaned[:RAW_OUTPUT_LOG_CHARS])
        raise SynthesisFormatError("No JSON object found in model response")

    try:
        parsed = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in model output: %s", cleaned[:RAW_OUTPUT_LOG_CHARS])
        raise SynthesisFormatError(f"Invalid JSON in model response: {e.msg}") from e

    if not isinstance(parsed, dict):
        raise SynthesisFormatError("Model response JSON is not an object")
    return parsed


def _as_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return " ".join(_as_string(v) for v in value if v is not None).strip()
    return str(value)


def _as_string_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value.strip(),) if value.strip() else ()
    if not isinstance(value, list):
        return (str(value),)
    items = (_as_string(v) for v in value)
    return tuple(item for item in items if item)


def backfill_details(raw: dict[str, Any]) -> SynthesizedDetails:
    """Coerce a decoded model response into the fixed details schema.

    Missing or null fields become empty values; fields of the wrong shape are
    converted rather than rejected.
    """
    missing = [f for f in (*STRING_FIELDS, *LIST_FIELDS) if raw.get(f) is None]
    if missing:
        logger.info("Backfilling missing fields: %s", ", ".join(missing))

    return SynthesizedDetails(
        location=_as_string(raw.get("location")),
        details=_as_string(raw.get("details")),
        accused=_as_string_list(raw.get("accused")),
        victims=_as_string_list(raw.get("victims")),
        timeline=_as_string_list(raw.get("timeline")),
    )
