"""Split realtime session logs into timestamped records."""
from __future__ import annotations

import json
import logging
import re
from typing import Any

from realtime_inspector.models import ParseWarning, RawLogLine

logger = logging.getLogger("realtime_inspector.parser")

# {ISO_TIMESTAMP} [{SESSION_ID}] [{SOURCE}] {JSON_PAYLOAD}
_LOG_LINE_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}T[\d:.]+Z?)\s+\[([^\]]+)\]\s+\[(OPENAI|USER)\]\s+(.+)$")
_EXCERPT_LENGTH = 100

SOURCE_CLIENT = "USER"
SOURCE_SERVICE = "OPENAI"


def _event_type(payload: Any) -> str:
    if isinstance(payload, dict):
        value = payload.get("type")
        if isinstance(value, str) and value:
            return value
    return "unknown"


def parse_log_line(
    line: str,
    index: int,
    warnings: list[ParseWarning] | None = None,
) -> RawLogLine | None:
    """Parse one log line; `index` is the zero-based line index in the file.

    Blank lines return None silently. Lines that miss the grammar or carry
    invalid JSON return None and append a ParseWarning when `warnings` is
    given.
    """
    stripped = line.strip()
    if not stripped:
        return None

    match = _LOG_LINE_PATTERN.match(stripped)
    if not match:
        logger.warning("Failed to parse log line %s: %s", index + 1, stripped[:_EXCERPT_LENGTH])
        if warnings is not None:
            warnings.append(
                ParseWarning(
                    lineNumber=index + 1,
                    reason="grammar",
                    message="Line does not match 'TIMESTAMP [SESSION] [SOURCE] JSON'",
                    excerpt=stripped[:_EXCERPT_LENGTH],
                )
            )
        return None

    timestamp, session_id, source, json_text = match.groups()
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse JSON in log line %s: %s", index + 1, exc)
        if warnings is not None:
            warnings.append(
                ParseWarning(
                    lineNumber=index + 1,
                    reason="json",
                    message=f"Invalid JSON payload: {exc.msg} (column {exc.colno})",
                    excerpt=stripped[:_EXCERPT_LENGTH],
                )
            )
        return None

    return RawLogLine(
        id=f"log_{index}",
        timestamp=timestamp,
        sessionId=session_id,
        source=source,
        eventType=_event_type(payload),
        payload=payload,
        rawLine=stripped,
    )


def parse_log_file(content: str, warnings: list[ParseWarning] | None = None) -> list[RawLogLine]:
    """Parse every line of a log, keeping input order."""
    records: list[RawLogLine] = []
    for index, line in enumerate(content.split("\n")):
        record = parse_log_line(line, index, warnings)
        if record is not None:
            records.append(record)
    return records


def get_unique_sessions(records: list[RawLogLine]) -> list[str]:
    """Distinct session ids in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        seen.setdefault(record.sessionId, None)
    return list(seen)


def filter_by_session(records: list[RawLogLine], session_id: str) -> list[RawLogLine]:
    return [record for record in records if record.sessionId == session_id]
