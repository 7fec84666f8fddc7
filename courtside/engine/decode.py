"""Decode and normalize candidate start times.

Stored ``candidate_times`` arrive in one of three shapes depending on which
client wrote the row:

    ["19:00", "20:00"]            native list
    '["19:00", "20:00"]'          JSON text
    '{"19:00","20:00"}'           braced array literal
    '19:00, 20:00'                plain delimited text

All of them decode to the same ordered list of strings.
"""
import json
import re

_QUOTES = "\"'"


def _clean(value) -> str:
    """Strip whitespace and quoting artifacts from one entry."""
    if value is None:
        return ""
    return str(value).replace('"', "").replace("'", "").strip()


def decode_candidate_times(raw) -> list[str]:
    """
    Decode stored candidate times into an ordered list.

    Never raises: anything that cannot be interpreted yields an empty list.
    Empty entries are dropped; order is preserved.
    """
    if raw is None:
        return []

    if isinstance(raw, (list, tuple)):
        return [t for t in (_clean(v) for v in raw) if t]

    if not isinstance(raw, str):
        return []

    text = raw.strip()
    if not text:
        return []

    try:
        parsed = json.loads(text)
    except ValueError:
        pass
    else:
        if isinstance(parsed, list):
            return [t for t in (_clean(v) for v in parsed) if t]
        if isinstance(parsed, str):
            # Double-encoded value, e.g. '"[\"19:00\"]"'
            return decode_candidate_times(parsed)
        # null, true, 5, {...}: valid JSON but not a list of times
        return []

    # Braced literal or plain delimited text
    cleaned = re.sub(r"^\{|\}$", "", text)
    cleaned = re.sub(r"^\[|\]$", "", cleaned)
    if not cleaned.strip(_QUOTES + " "):
        return []
    return [t for t in (_clean(part) for part in cleaned.split(",")) if t]


def encode_candidate_times(times: list[str]) -> str:
    """Encode candidate times for storage."""
    return json.dumps(list(times))


def normalize_candidate_times(
    primary_time: str, times: list[str] | None, limit: int = 2
) -> list[str]:
    """
    Normalize candidate times entered by a host.

    Blank entries, duplicates and the primary time itself are removed,
    order is preserved and at most ``limit`` entries are kept.
    """
    result = []
    for value in times or []:
        t = _clean(value)
        if not t or t == primary_time or t in result:
            continue
        result.append(t)
    return result[:limit]


def candidate_list(primary_time: str, candidate_times: list[str]) -> list[str]:
    """Return ``[primary_time, *candidate_times]`` without duplicates."""
    ordered = [primary_time]
    for t in candidate_times:
        if t not in ordered:
            ordered.append(t)
    return ordered
