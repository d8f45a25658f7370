# core/utils.py

from datetime import datetime, timezone


def sanitize(data: dict) -> dict:
    """
    Sanitize dictionary data before it is written:
    - Empty strings → None
    - Strip string whitespace
    - Preserve booleans, numbers, lists, None values

    Strings are never coerced to numbers: phone numbers and country codes
    must survive untouched.
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped if stripped else None
            continue

        clean[k] = v

    return clean


def drop_none(data: dict) -> dict:
    """Remove None values so PATCH-style updates leave columns alone."""
    return {k: v for k, v in data.items() if v is not None}


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
