"""Group service events by response id into ResponseGroup summaries."""
from __future__ import annotations

from typing import Any

from realtime_inspector.date_utils import duration_ms, timestamp_sort_key
from realtime_inspector.models import ParsedEvent, ResponseGroup
from realtime_inspector.parsers.deltas import (
    aggregate_audio_deltas,
    aggregate_audio_transcript_deltas,
    aggregate_function_call_deltas,
    aggregate_text_deltas,
    extract_token_usage,
)


def group_events_by_response_id(events: list[ParsedEvent]) -> dict[str, list[ParsedEvent]]:
    """Partition events carrying a response id, keyed in first-seen order."""
    groups: dict[str, list[ParsedEvent]] = {}
    for event in events:
        if event.responseId:
            groups.setdefault(event.responseId, []).append(event)
    return groups


def _classify_response(events: list[ParsedEvent]) -> tuple[str, bool, bool, bool]:
    has_function_call = any("function_call" in event.eventType for event in events)
    has_audio = any("audio" in event.eventType for event in events)
    has_text = any("text" in event.eventType for event in events)

    response_type = "mixed"
    if has_function_call and not has_audio and not has_text:
        response_type = "function_call"
    elif has_audio and not has_function_call:
        response_type = "audio_response"
    elif has_text and not has_function_call and not has_audio:
        response_type = "text_response"
    return response_type, has_function_call, has_audio, has_text


def _service_status(done_event: ParsedEvent | None) -> str | None:
    if done_event is None or not isinstance(done_event.payload, dict):
        return None
    response = done_event.payload.get("response")
    if isinstance(response, dict):
        status = response.get("status")
        if isinstance(status, str) and status:
            return status
    return None


def create_response_group(response_id: str, events: list[ParsedEvent]) -> ResponseGroup:
    sorted_events = sorted(events, key=lambda event: timestamp_sort_key(event.timestamp))
    response_type, has_function_call, has_audio, has_text = _classify_response(sorted_events)
    done_event = next((event for event in sorted_events if event.eventType == "response.done"), None)

    start_time = sorted_events[0].timestamp if sorted_events else ""
    end_time = sorted_events[-1].timestamp if sorted_events else None

    fields: dict[str, Any] = {}
    if has_function_call:
        function_data = aggregate_function_call_deltas(sorted_events)
        fields.update(
            functionName=function_data["name"],
            callId=function_data["callId"],
            functionArguments=function_data["arguments"],
            functionArgumentsRaw=function_data["argumentsRaw"],
        )
    if has_audio:
        audio_data, chunk_count = aggregate_audio_deltas(sorted_events)
        fields.update(
            transcript=aggregate_audio_transcript_deltas(sorted_events) or None,
            audioData=audio_data,
            audioChunkCount=chunk_count,
        )
    if has_text:
        fields["textContent"] = aggregate_text_deltas(sorted_events) or None

    return ResponseGroup(
        responseId=response_id,
        events=sorted_events,
        startTime=start_time,
        endTime=end_time,
        durationMs=duration_ms(start_time, end_time),
        status="completed" if done_event is not None else "in_progress",
        responseStatus=_service_status(done_event),
        type=response_type,
        tokenUsage=extract_token_usage(sorted_events),
        **fields,
    )


def build_response_groups(events: list[ParsedEvent]) -> list[ResponseGroup]:
    return [
        create_response_group(response_id, group_events)
        for response_id, group_events in group_events_by_response_id(events).items()
    ]
