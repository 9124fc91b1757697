"""Extract realtime session configuration from session lifecycle events."""
from __future__ import annotations

from typing import Any

from realtime_inspector.models import ParsedEvent, SessionConfig, SessionSnapshot, SessionTool

SESSION_LIFECYCLE_TYPES = {"session.created", "session.updated"}


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _session_object(event: ParsedEvent) -> dict[str, Any] | None:
    if not isinstance(event.payload, dict):
        return None
    session = event.payload.get("session")
    return session if isinstance(session, dict) else None


def _tools(session: dict[str, Any]) -> list[SessionTool]:
    raw_tools = session.get("tools")
    if not isinstance(raw_tools, list):
        return []
    tools: list[SessionTool] = []
    for tool in raw_tools:
        if not isinstance(tool, dict):
            continue
        tools.append(
            SessionTool(
                type=_str_or_none(tool.get("type")),
                name=_str_or_none(tool.get("name")) or "",
                description=_str_or_none(tool.get("description")),
            )
        )
    return tools


def _modalities(session: dict[str, Any]) -> list[str]:
    raw = session.get("modalities")
    if not isinstance(raw, list):
        return []
    return [value for value in raw if isinstance(value, str)]


def _dict_or_none(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def _number_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _max_output_tokens(value: Any) -> int | str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, str)):
        return value
    return None


def extract_session_config(events: list[ParsedEvent]) -> SessionConfig | None:
    """Snapshot the configuration carried by the last session lifecycle event.

    `createdAt` is only set when that last event is itself `session.created`.
    """
    lifecycle = [event for event in events if event.eventType in SESSION_LIFECYCLE_TYPES]
    if not lifecycle:
        return None

    last_event = lifecycle[-1]
    session = _session_object(last_event)
    if session is None:
        return None

    return SessionConfig(
        id=_str_or_none(session.get("id")),
        model=_str_or_none(session.get("model")),
        voice=_str_or_none(session.get("voice")),
        instructions=_str_or_none(session.get("instructions")),
        tools=_tools(session),
        modalities=_modalities(session),
        turnDetection=_dict_or_none(session.get("turn_detection")),
        inputAudioFormat=_str_or_none(session.get("input_audio_format")),
        outputAudioFormat=_str_or_none(session.get("output_audio_format")),
        inputAudioTranscription=_dict_or_none(session.get("input_audio_transcription")),
        temperature=_number_or_none(session.get("temperature")),
        maxResponseOutputTokens=_max_output_tokens(session.get("max_response_output_tokens")),
        createdAt=last_event.timestamp if last_event.eventType == "session.created" else None,
        updatedAt=last_event.timestamp,
        raw=session,
    )


def session_snapshot_from_event(event: ParsedEvent) -> SessionSnapshot:
    """Summarize a single session lifecycle event for the timeline."""
    session = _session_object(event) or {}
    return SessionSnapshot(
        eventType="created" if event.eventType == "session.created" else "updated",
        model=_str_or_none(session.get("model")),
        voice=_str_or_none(session.get("voice")),
        instructions=_str_or_none(session.get("instructions")),
        tools=[SessionTool(name=tool.name, description=tool.description) for tool in _tools(session)],
        modalities=_modalities(session),
    )
