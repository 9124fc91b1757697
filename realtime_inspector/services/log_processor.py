"""Log reconstruction entry point: raw log text in, inspector payload out."""
from __future__ import annotations

import logging
import time
from collections import Counter
from pathlib import Path

from realtime_inspector import config
from realtime_inspector.models import ParseWarning, ProcessedLog
from realtime_inspector.observability import record_log_processed, record_parser_failure, start_span
from realtime_inspector.parsers.events import to_parsed_event
from realtime_inspector.parsers.log_lines import filter_by_session, get_unique_sessions, parse_log_file
from realtime_inspector.parsers.session_config import extract_session_config
from realtime_inspector.parsers.timeline import build_timeline

logger = logging.getLogger("realtime_inspector.processor")


def _select_current_session(sessions: list[str], session_id: str | None, policy: str) -> str | None:
    if session_id:
        return session_id
    if not sessions:
        return None
    return sessions[0] if policy == "first" else sessions[-1]


def process_log_content(
    content: str,
    session_id: str | None = None,
    *,
    origin: str = "content",
    current_session_policy: str | None = None,
    max_warnings: int | None = None,
) -> ProcessedLog:
    """Reconstruct the conversation timeline for one complete log.

    When `session_id` is given, records are narrowed to that session before
    grouping so correlation ids never mix across sessions. `sessions` always
    lists every session present in the log.
    """
    policy = current_session_policy or config.CURRENT_SESSION_POLICY
    warning_cap = config.MAX_WARNINGS if max_warnings is None else max_warnings
    t0 = time.monotonic()

    with start_span("realtime_inspector.process_log", {"origin": origin, "session_filter": session_id}):
        warnings: list[ParseWarning] = []
        records = parse_log_file(content, warnings)
        sessions = get_unique_sessions(records)
        if session_id:
            records = filter_by_session(records, session_id)

        events = [to_parsed_event(record) for record in records]
        timeline = build_timeline(events)
        session_config = extract_session_config(events)

    for reason, count in Counter(warning.reason for warning in warnings).items():
        record_parser_failure(reason, count)
    if warnings:
        logger.info("Skipped %s malformed log lines", len(warnings))

    elapsed_ms = int((time.monotonic() - t0) * 1000)
    record_log_processed(origin, len(events), elapsed_ms)

    return ProcessedLog(
        sessions=sessions,
        currentSession=_select_current_session(sessions, session_id, policy),
        sessionConfig=session_config,
        conversationItems=timeline,
        rawEvents=events,
        totalEvents=len(events),
        warnings=warnings[: max(0, warning_cap)],
    )


def process_log_file(path: Path, session_id: str | None = None) -> ProcessedLog:
    """Read a log file fully and reconstruct it. I/O errors propagate."""
    content = path.read_text(encoding="utf-8")
    return process_log_content(content, session_id, origin="file")
