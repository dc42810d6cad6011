"""Timestamp parsing for the ``-A``/``-B`` fence options."""

from __future__ import annotations

import re
import time
from datetime import datetime, timezone

from dateutil import parser as dt_parser

_RELATIVE_RE = re.compile(r"^-?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?$", re.IGNORECASE)
_ABSOLUTE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}:\d{2})?$")
_UNIT_SECONDS = (7 * 86400, 86400, 3600, 60, 1)


def parse_timestamp(text: str, *, now: float | None = None) -> int:
    """Parse a fence timestamp into epoch seconds.

    Accepted forms:

    - epoch seconds, e.g. ``1577836800``
    - absolute UTC, ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:MM:SS``
    - relative to now, ``[-]NwNdNhNmNs`` with any subset of units,
      e.g. ``1w2d`` or ``-36h``

    Args:
        text: User input.
        now: Reference time for relative forms; defaults to the current time.

    Returns:
        Positive epoch seconds.

    Raises:
        ValueError: If the input is not a recognised timestamp or is zero.
    """
    value = text.strip()
    if not value:
        raise ValueError("empty timestamp")

    if value.isdigit():
        result = int(value)
    elif _ABSOLUTE_RE.match(value):
        parsed = dt_parser.isoparse(value.replace(" ", "T"))
        result = int(parsed.replace(tzinfo=timezone.utc).timestamp())
    else:
        match = _RELATIVE_RE.match(value)
        if match is None or not any(match.groups()):
            raise ValueError(f"bad timestamp: {text}")
        delta = sum(int(group or 0) * unit for group, unit in zip(match.groups(), _UNIT_SECONDS))
        reference = time.time() if now is None else now
        result = int(reference) - delta

    if result <= 0:
        raise ValueError(f"bad timestamp: {text}")
    return result


def format_timestamp(epoch: int) -> str:
    """Render epoch seconds the way absolute input is written."""
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
