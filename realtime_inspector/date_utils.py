"""Timestamp parsing, ordering and display helpers.

Log timestamps are normalized ISO-8601 UTC strings written by a single
logger, so lexical order equals chronological order. Ordering therefore
compares the strings directly; parsing happens only for display and
duration math.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone

_TIME_OF_DAY_RE = re.compile(r"T(\d{2}:\d{2}:\d{2})")


def timestamp_sort_key(value: str | None) -> str:
    return value or ""


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 token into an aware UTC datetime, or None."""
    cleaned = (value or "").strip()
    if not cleaned:
        return None
    try:
        parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        return None
    dt = parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_to_epoch_ms(value: str | None) -> int | None:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return int(round(parsed.timestamp() * 1000))


def duration_ms(start: str | None, end: str | None) -> int | None:
    start_ms = iso_to_epoch_ms(start)
    end_ms = iso_to_epoch_ms(end)
    if start_ms is None or end_ms is None:
        return None
    return max(0, end_ms - start_ms)


def format_timestamp(value: str) -> str:
    """Render a log timestamp as a 12-hour wall-clock time (UTC)."""
    parsed = parse_timestamp(value)
    if parsed is not None:
        return parsed.strftime("%I:%M:%S %p")
    match = _TIME_OF_DAY_RE.search(value or "")
    return match.group(1) if match else value


def format_duration(start: str, end: str) -> str:
    elapsed = duration_ms(start, end)
    if elapsed is None:
        return ""
    if elapsed < 1000:
        return f"{elapsed}ms"
    if elapsed < 60_000:
        return f"{elapsed / 1000:.1f}s"
    return f"{elapsed // 60_000}m {(elapsed % 60_000) // 1000}s"
