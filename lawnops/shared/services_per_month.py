"""
Reader/writer for the persisted ``servicesPerMonth`` column.

New writes are always a canonical JSON array of 12 integers. Older rows may
hold a brace-delimited list such as ``{2,2,2,2,1,1,1,1,2,2,2,2}``.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12

DEFAULT_SERVICES_PER_MONTH = [2] * MONTHS_PER_YEAR


def _coerce_counts(values: Any) -> list[int]:
    """Validate a decoded value as 12 non-negative integers"""
    if not isinstance(values, (list, tuple)) or len(values) != MONTHS_PER_YEAR:
        raise ValueError("expected a list of 12 monthly counts")

    counts = []
    for value in values:
        # bool is an int subclass; a stray true/false is not a count
        if isinstance(value, bool):
            raise ValueError(f"invalid monthly count: {value!r}")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or value < 0:
            raise ValueError(f"invalid monthly count: {value!r}")
        counts.append(value)
    return counts


def _parse_brace_list(raw: str) -> list[int]:
    inner = raw.strip()[1:-1]
    if not inner.strip():
        return []
    return [int(part.strip()) for part in inner.split(",")]


def parse_services_per_month(raw: Any) -> list[int]:
    """
    Decode a stored ``servicesPerMonth`` value.

    Accepts an already-decoded list, a JSON array string, or the legacy
    brace-delimited form. Anything unreadable falls back to
    ``DEFAULT_SERVICES_PER_MONTH`` instead of raising.
    """
    try:
        if isinstance(raw, (list, tuple)):
            return _coerce_counts(raw)

        if not isinstance(raw, str):
            raise ValueError(f"unsupported type {type(raw).__name__}")

        text = raw.strip()
        if text.startswith("{") and text.endswith("}"):
            return _coerce_counts(_parse_brace_list(text))

        return _coerce_counts(json.loads(text))
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning(f"⚠️ Unreadable servicesPerMonth {raw!r}, using default: {e}")
        return list(DEFAULT_SERVICES_PER_MONTH)


def serialize_services_per_month(counts: list[int]) -> str:
    """Encode monthly counts in the canonical JSON-array form"""
    return json.dumps(_coerce_counts(counts))
