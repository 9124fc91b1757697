"""Rebuild streamed response fields from their delta events.

Every aggregator expects the events of one response, already sorted by
timestamp. When the terminal "done" event carries the complete value it
wins over the concatenated deltas.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from realtime_inspector.models import InputTokenDetails, OutputTokenDetails, ParsedEvent, TokenUsage
from realtime_inspector.parsers.chunks import merge_base64_chunks

logger = logging.getLogger("realtime_inspector.parser")


def _payload(event: ParsedEvent) -> dict[str, Any]:
    return event.payload if isinstance(event.payload, dict) else {}


def _payload_str(event: ParsedEvent, key: str) -> str | None:
    value = _payload(event).get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _coerce_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_arguments(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Function arguments are not valid JSON; keeping raw string (%s chars)", len(raw))
        return raw


def _aggregate_stream(
    events: list[ParsedEvent],
    delta_type: str,
    done_type: str,
    done_field: str,
) -> str:
    deltas: list[str] = []
    for event in events:
        if event.eventType == delta_type and event.delta:
            deltas.append(event.delta)
        elif event.eventType == done_type:
            complete = _payload_str(event, done_field)
            if complete:
                return complete
    return "".join(deltas)


def aggregate_text_deltas(events: list[ParsedEvent]) -> str:
    return _aggregate_stream(events, "response.text.delta", "response.text.done", "text")


def aggregate_audio_transcript_deltas(events: list[ParsedEvent]) -> str:
    return _aggregate_stream(
        events,
        "response.audio_transcript.delta",
        "response.audio_transcript.done",
        "transcript",
    )


def aggregate_function_call_deltas(events: list[ParsedEvent]) -> dict[str, Any]:
    """Return `name`, `callId`, `arguments` and `argumentsRaw` for a function call.

    Arguments are parsed as JSON; when that fails `arguments` holds the raw
    string instead.
    """
    deltas: list[str] = []
    name: str | None = None
    call_id: str | None = None

    for event in events:
        if event.eventType == "response.function_call_arguments.delta":
            call_id = call_id or event.callId
            if event.delta:
                deltas.append(event.delta)
        elif event.eventType == "response.function_call_arguments.done":
            name = _payload_str(event, "name") or name
            call_id = event.callId or call_id
            complete = _payload_str(event, "arguments")
            if complete:
                return {
                    "name": name,
                    "callId": call_id,
                    "arguments": _parse_arguments(complete),
                    "argumentsRaw": complete,
                }

    joined = "".join(deltas)
    if joined:
        return {
            "name": name,
            "callId": call_id,
            "arguments": _parse_arguments(joined),
            "argumentsRaw": joined,
        }
    return {"name": name, "callId": call_id, "arguments": None, "argumentsRaw": None}


def aggregate_audio_deltas(events: list[ParsedEvent]) -> tuple[str | None, int]:
    """Return the reassembled base64 audio and the number of delta events.

    Every audio delta counts as a chunk, empty or not.
    """
    fragments: list[str] = []
    chunk_count = 0

    for event in events:
        if event.eventType == "response.audio.delta":
            chunk_count += 1
            if event.delta:
                fragments.append(event.delta)
        elif event.eventType == "response.audio.done":
            complete = _payload_str(event, "audio")
            if complete:
                return complete, chunk_count

    if not fragments:
        return None, chunk_count
    merged = merge_base64_chunks(fragments)
    if not merged:
        logger.debug("Discarding unrecoverable audio stream (%s fragments)", len(fragments))
        return None, chunk_count
    return merged, chunk_count


def extract_token_usage(events: list[ParsedEvent]) -> TokenUsage | None:
    for event in events:
        if event.eventType != "response.done":
            continue
        response = _payload(event).get("response")
        usage = response.get("usage") if isinstance(response, dict) else None
        if not isinstance(usage, dict):
            continue

        input_details = usage.get("input_token_details")
        output_details = usage.get("output_token_details")
        return TokenUsage(
            totalTokens=_coerce_int(usage.get("total_tokens")),
            inputTokens=_coerce_int(usage.get("input_tokens")),
            outputTokens=_coerce_int(usage.get("output_tokens")),
            inputTokenDetails=InputTokenDetails(
                textTokens=_coerce_int(input_details.get("text_tokens")),
                audioTokens=_coerce_int(input_details.get("audio_tokens")),
                cachedTokens=_coerce_int(input_details.get("cached_tokens")),
            ) if isinstance(input_details, dict) else None,
            outputTokenDetails=OutputTokenDetails(
                textTokens=_coerce_int(output_details.get("text_tokens")),
                audioTokens=_coerce_int(output_details.get("audio_tokens")),
            ) if isinstance(output_details, dict) else None,
        )
    return None
