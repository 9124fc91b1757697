"""Event classification and correlation-field extraction."""
from __future__ import annotations

from typing import Any

from realtime_inspector.models import EventCategory, ParsedEvent, RawLogLine

_EVENT_CATEGORY_MAP: dict[str, EventCategory] = {
    # Session
    "session.created": "session",
    "session.updated": "session",
    "session_update": "session",
    # Client commands
    "conversation_input_text": "user_input",
    "audio_append": "user_input",
    "audio_commit": "user_input",
    "audio_clear": "user_input",
    "conversation_item_create": "user_input",
    "conversation_item_delete": "user_input",
    "conversation_item_truncate": "user_input",
    "response_create": "user_input",
    "response_cancel": "user_input",
    # Response lifecycle and text output
    "response.created": "response",
    "response.done": "response",
    "response.output_item.added": "response",
    "response.output_item.done": "response",
    "response.content_part.added": "response",
    "response.content_part.done": "response",
    "response.text.delta": "response",
    "response.text.done": "response",
    # Function calls
    "response.function_call_arguments.delta": "function_call",
    "response.function_call_arguments.done": "function_call",
    # Audio output
    "response.audio.delta": "audio",
    "response.audio.done": "audio",
    "response.audio_transcript.delta": "audio",
    "response.audio_transcript.done": "audio",
    # Input transcription
    "conversation.item.input_audio_transcription.delta": "transcript",
    "conversation.item.input_audio_transcription.completed": "transcript",
    # Conversation and input buffer
    "conversation.created": "system",
    "conversation.item.created": "system",
    "conversation.item.deleted": "system",
    "conversation.item.truncated": "system",
    "input_audio_buffer.committed": "system",
    "input_audio_buffer.cleared": "system",
    "input_audio_buffer.speech_started": "system",
    "input_audio_buffer.speech_stopped": "system",
    "rate_limits.updated": "system",
    # Custom backend events
    "realtime.data": "system",
    "data.confirmation.required": "system",
    "generation.started": "system",
    "agent.switch.required": "system",
    # Errors
    "error": "error",
    "permission.denied": "error",
}

_EVENT_DESCRIPTIONS: dict[str, str] = {
    "conversation.created": "Conversation initialized",
    "conversation.item.created": "Conversation item added",
    "conversation.item.deleted": "Conversation item removed",
    "conversation.item.truncated": "Conversation item truncated",
    "conversation.item.input_audio_transcription.delta": "User audio transcription in progress",
    "input_audio_buffer.committed": "Audio buffer committed",
    "input_audio_buffer.cleared": "Audio buffer cleared",
    "input_audio_buffer.speech_started": "Speech detected",
    "input_audio_buffer.speech_stopped": "Speech ended",
    "rate_limits.updated": "Rate limits updated",
    "realtime.data": "Realtime data received",
    "data.confirmation.required": "Data confirmation required",
    "generation.started": "Generation started",
    "agent.switch.required": "Agent switch requested",
    "response.created": "Response started",
    "response.done": "Response finished",
}

# Lifecycle events nest the response id under payload["response"]["id"].
_RESPONSE_LIFECYCLE_TYPES = {"response.created", "response.done"}


def get_event_category(event_type: str) -> EventCategory:
    return _EVENT_CATEGORY_MAP.get(event_type, "unknown")


def describe_event(event_type: str) -> str:
    return _EVENT_DESCRIPTIONS.get(event_type, event_type)


def _str_field(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _int_field(payload: dict[str, Any], key: str) -> int | None:
    value = payload.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _response_id(event_type: str, payload: dict[str, Any]) -> str | None:
    response_id = _str_field(payload, "response_id")
    if response_id:
        return response_id
    if event_type in _RESPONSE_LIFECYCLE_TYPES:
        response = payload.get("response")
        if isinstance(response, dict):
            return _str_field(response, "id")
    return None


def to_parsed_event(record: RawLogLine) -> ParsedEvent:
    """Annotate a parsed record with its category and correlation fields."""
    payload = record.payload if isinstance(record.payload, dict) else {}
    return ParsedEvent(
        **record.model_dump(),
        category=get_event_category(record.eventType),
        eventId=_str_field(payload, "event_id"),
        responseId=_response_id(record.eventType, payload),
        itemId=_str_field(payload, "item_id"),
        callId=_str_field(payload, "call_id"),
        outputIndex=_int_field(payload, "output_index"),
        delta=_str_field(payload, "delta"),
        obfuscation=_str_field(payload, "obfuscation"),
    )
