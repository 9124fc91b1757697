"""Merge annotated events into one ordered, deduplicated conversation timeline.

Every input event ends up in the `sourceEvents` of exactly one item. Events
of a response end up in its `response_group` item and consecutive audio
appends in one `user_input` item; everything else maps one event to one item,
except server echoes of typed user text, which are folded into the client's
item for the same text.
"""
from __future__ import annotations

import logging
from typing import Any

from realtime_inspector.date_utils import timestamp_sort_key
from realtime_inspector.models import (
    ErrorDetail,
    ParsedEvent,
    SystemDescription,
    TimelineItem,
    UserInput,
)
from realtime_inspector.parsers.chunks import merge_base64_chunks
from realtime_inspector.parsers.events import describe_event
from realtime_inspector.parsers.log_lines import SOURCE_CLIENT
from realtime_inspector.parsers.responses import build_response_groups
from realtime_inspector.parsers.session_config import SESSION_LIFECYCLE_TYPES, session_snapshot_from_event

logger = logging.getLogger("realtime_inspector.timeline")

_AUDIO_APPEND_TYPE = "audio_append"
_TEXT_INPUT_TYPE = "conversation_input_text"
_ITEM_CREATED_TYPE = "conversation.item.created"
_TRANSCRIPTION_COMPLETED_TYPE = "conversation.item.input_audio_transcription.completed"
_ERROR_TYPES = {"error", "permission.denied"}


def _payload(event: ParsedEvent) -> dict[str, Any]:
    return event.payload if isinstance(event.payload, dict) else {}


def _first_str(*values: Any) -> str | None:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return None


def _nested(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _audio_fragment(event: ParsedEvent) -> str | None:
    payload = _payload(event)
    inner = _nested(payload, "payload")
    return _first_str(inner.get("audio"), payload.get("audio"), inner.get("delta"), payload.get("delta"))


def _client_text(event: ParsedEvent) -> str | None:
    payload = _payload(event)
    return _first_str(_nested(payload, "payload").get("text"), payload.get("text"))


def _user_item_text(event: ParsedEvent) -> tuple[str | None, str | None]:
    """Return (text, item id) when a created item is a user-authored text message."""
    item = _nested(_payload(event), "item")
    if item.get("role") != "user":
        return None, None
    content = item.get("content")
    if not isinstance(content, list):
        return None, None
    for block in content:
        if isinstance(block, dict) and block.get("type") == "input_text":
            text = block.get("text")
            if isinstance(text, str):
                return text, _first_str(item.get("id"), event.itemId)
    return None, None


def _text_key(session_id: str, text: str) -> tuple[str, str]:
    return session_id, text.strip()


class _UserTextIndex:
    """Emitted client text inputs not yet paired with a server echo, newest last."""

    def __init__(self) -> None:
        self._pending: dict[tuple[str, str], list[TimelineItem]] = {}

    def add(self, event: ParsedEvent, item: TimelineItem, text: str) -> None:
        self._pending.setdefault(_text_key(event.sessionId, text), []).append(item)

    def claim(self, event: ParsedEvent, text: str) -> TimelineItem | None:
        candidates = self._pending.get(_text_key(event.sessionId, text))
        if not candidates:
            return None
        return candidates.pop()


def _audio_input_item(run: list[ParsedEvent]) -> TimelineItem:
    fragments = [fragment for fragment in (_audio_fragment(event) for event in run) if fragment]
    audio_data = merge_base64_chunks(fragments) if fragments else ""
    return TimelineItem(
        id=f"user_audio_{run[0].id}",
        type="user_input",
        timestamp=run[0].timestamp,
        sourceEvents=list(run),
        userInput=UserInput(
            inputType="audio",
            hasAudio=True,
            audioData=audio_data or None,
            audioChunkCount=len(run),
        ),
    )


def _merge_audio_runs(events: list[ParsedEvent]) -> tuple[list[TimelineItem], list[ParsedEvent]]:
    """Fold maximal runs of adjacent audio appends into audio input items."""
    items: list[TimelineItem] = []
    leftovers: list[ParsedEvent] = []
    run: list[ParsedEvent] = []
    for event in events:
        if event.eventType == _AUDIO_APPEND_TYPE:
            run.append(event)
            continue
        if run:
            items.append(_audio_input_item(run))
            run = []
        leftovers.append(event)
    if run:
        items.append(_audio_input_item(run))
    return items, leftovers


def _system_item(event: ParsedEvent, description: str) -> TimelineItem:
    return TimelineItem(
        id=f"system_{event.id}",
        type="system_event",
        timestamp=event.timestamp,
        sourceEvents=[event],
        systemDescription=SystemDescription(eventType=event.eventType, description=description),
    )


def _error_item(event: ParsedEvent) -> TimelineItem:
    payload = _payload(event)
    error = _nested(payload, "error")
    return TimelineItem(
        id=f"error_{event.id}",
        type="error",
        timestamp=event.timestamp,
        sourceEvents=[event],
        errorDetail=ErrorDetail(
            message=_first_str(error.get("message"), payload.get("message")) or "Unknown error",
            code=_first_str(error.get("code")),
            type=_first_str(error.get("type")),
            param=_first_str(error.get("param")),
            eventId=_first_str(error.get("event_id")),
        ),
    )


def _user_text_item(event: ParsedEvent, text: str | None, *, input_type: str = "text", item_id: str | None = None) -> TimelineItem:
    return TimelineItem(
        id=f"user_{event.id}",
        type="user_input",
        timestamp=event.timestamp,
        sourceEvents=[event],
        userInput=UserInput(inputType=input_type, text=text, itemId=item_id),
    )


def build_timeline(events: list[ParsedEvent]) -> list[TimelineItem]:
    """Build the ordered timeline for one engine pass over `events` (input order)."""
    items: list[TimelineItem] = []
    consumed: set[str] = set()

    for group in build_response_groups(events):
        items.append(
            TimelineItem(
                id=f"response_{group.responseId}",
                type="response_group",
                timestamp=group.startTime,
                sourceEvents=list(group.events),
                responseGroup=group,
            )
        )
        consumed.update(event.id for event in group.events)

    audio_items, remaining = _merge_audio_runs([event for event in events if event.id not in consumed])
    items.extend(audio_items)

    pending_text = _UserTextIndex()
    merged_echoes = 0
    for event in remaining:
        if event.eventType in SESSION_LIFECYCLE_TYPES:
            items.append(
                TimelineItem(
                    id=f"session_{event.id}",
                    type="session_event",
                    timestamp=event.timestamp,
                    sourceEvents=[event],
                    sessionSnapshot=session_snapshot_from_event(event),
                )
            )
            continue

        if event.source == SOURCE_CLIENT:
            if event.eventType == _TEXT_INPUT_TYPE:
                text = _client_text(event)
                item = _user_text_item(event, text)
                if text:
                    pending_text.add(event, item, text)
                items.append(item)
            else:
                description = describe_event(event.eventType)
                if description == event.eventType:
                    description = f"User action: {event.eventType}"
                items.append(_system_item(event, description))
            continue

        if event.eventType in _ERROR_TYPES:
            items.append(_error_item(event))
            continue

        if event.eventType == _ITEM_CREATED_TYPE:
            text, item_id = _user_item_text(event)
            if text is not None:
                existing = pending_text.claim(event, text)
                if existing is not None and existing.userInput is not None:
                    existing.sourceEvents.append(event)
                    existing.userInput.itemId = existing.userInput.itemId or item_id
                    merged_echoes += 1
                else:
                    items.append(_user_text_item(event, text, item_id=item_id))
                continue

        if event.eventType == _TRANSCRIPTION_COMPLETED_TYPE:
            transcript = _first_str(_payload(event).get("transcript"))
            items.append(_user_text_item(event, transcript, input_type="transcription", item_id=event.itemId))
            continue

        items.append(_system_item(event, describe_event(event.eventType)))

    items.sort(key=lambda item: timestamp_sort_key(item.timestamp))
    logger.debug(
        "Built %s timeline items from %s events (%s server echoes merged)",
        len(items),
        len(events),
        merged_echoes,
    )
    return items
