#!/usr/bin/env python3
"""Reconstruct a realtime session log offline and print its timeline.

Usage:
  python -m realtime_inspector.scripts.inspect_log session.log
  python -m realtime_inspector.scripts.inspect_log session.log --session sess_123
  python -m realtime_inspector.scripts.inspect_log session.log --json
"""
from __future__ import annotations

import argparse
import json
from pathlib import Path

from realtime_inspector.date_utils import format_duration, format_timestamp
from realtime_inspector.models import ProcessedLog, TimelineItem
from realtime_inspector.services.log_processor import process_log_file


def _summarize_item(item: TimelineItem) -> str:
    if item.responseGroup is not None:
        group = item.responseGroup
        parts = [f"response {group.responseId} ({group.type}, {group.status})"]
        if group.functionName:
            parts.append(f"call={group.functionName}({group.functionArgumentsRaw or ''})")
        if group.transcript:
            parts.append(f"transcript={group.transcript!r}")
        if group.textContent:
            parts.append(f"text={group.textContent!r}")
        if group.audioChunkCount:
            parts.append(f"audio_chunks={group.audioChunkCount}")
        if group.endTime:
            parts.append(f"took={format_duration(group.startTime, group.endTime)}")
        return " ".join(parts)
    if item.userInput is not None:
        user = item.userInput
        if user.inputType == "audio":
            return f"user audio ({user.audioChunkCount or 0} chunks)"
        return f"user {user.inputType}: {user.text!r}"
    if item.sessionSnapshot is not None:
        return f"session {item.sessionSnapshot.eventType} model={item.sessionSnapshot.model or '-'}"
    if item.errorDetail is not None:
        return f"error: {item.errorDetail.message}"
    if item.systemDescription is not None:
        return item.systemDescription.description
    return item.type


def render_text(result: ProcessedLog) -> list[str]:
    lines = [
        f"Sessions: {', '.join(result.sessions) or '-'}",
        f"Current session: {result.currentSession or '-'}",
        f"Events: {result.totalEvents}",
        f"Skipped lines: {len(result.warnings)}",
    ]
    if result.sessionConfig is not None:
        lines.append(f"Model: {result.sessionConfig.model or '-'} voice={result.sessionConfig.voice or '-'}")
    lines.append("")
    for item in result.conversationItems:
        lines.append(
            f"{format_timestamp(item.timestamp)}  [{item.type}]  {_summarize_item(item)}  "
            f"({len(item.sourceEvents)} events)"
        )
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("path")
    parser.add_argument("--session", default="")
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args(argv)

    log_path = Path(args.path)
    if not log_path.is_file():
        print(f"Log file not found: {log_path}")
        return 1

    result = process_log_file(log_path, args.session or None)
    if args.json:
        print(json.dumps(result.model_dump(), indent=2))
        return 0

    for line in render_text(result):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
