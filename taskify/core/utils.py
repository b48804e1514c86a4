"""
Shared utility functions for the taskify API.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone


_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w|y)?\s*$", re.IGNORECASE)

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
    "w": 60 * 60 * 24 * 7,
    "y": 60 * 60 * 24 * 365.25,
}


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "usr", "proj", "file")

    Returns:
        A unique ID like "proj_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def parse_duration(value: str | int) -> int:
    """
    Convert a duration like "15m", "7d" or "3600" to whole seconds.

    A bare number is read as seconds. Raises ValueError for anything else.
    """
    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f"Duration must be positive: {value}")
        return value

    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    seconds = int(float(amount) * _UNIT_SECONDS[(unit or "s").lower()])
    if seconds <= 0:
        raise ValueError(f"Duration must be at least one second: {value!r}")
    return seconds
