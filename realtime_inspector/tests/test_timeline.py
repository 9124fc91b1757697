import json
import unittest
from collections import Counter

from realtime_inspector.parsers.events import to_parsed_event
from realtime_inspector.parsers.log_lines import parse_log_file
from realtime_inspector.parsers.timeline import build_timeline


def _line(second: int, payload: dict, source: str = "OPENAI", session: str = "sess_1") -> str:
    return f"2026-01-01T10:00:{second:02d}.000Z [{session}] [{source}] {json.dumps(payload)}"


def _events(lines: list[str]):
    return [to_parsed_event(record) for record in parse_log_file("\n".join(lines))]


def _user_text(second: int, text: str, session: str = "sess_1") -> str:
    return _line(second, {"type": "conversation_input_text", "payload": {"text": text}}, source="USER", session=session)


def _server_echo(second: int, text: str, item_id: str = "item_1", session: str = "sess_1") -> str:
    return _line(
        second,
        {
            "type": "conversation.item.created",
            "item": {"id": item_id, "role": "user", "content": [{"type": "input_text", "text": text}]},
        },
        session=session,
    )


def _audio_append(second: int, audio: str) -> str:
    return _line(second, {"type": "audio_append", "payload": {"audio": audio}}, source="USER")


class UserTextDedupTests(unittest.TestCase):
    def test_server_echo_merges_into_client_text_item(self) -> None:
        events = _events([_user_text(1, "ping"), _server_echo(2, "ping")])

        items = build_timeline(events)

        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.type, "user_input")
        self.assertEqual(item.userInput.inputType, "text")
        self.assertEqual(item.userInput.text, "ping")
        self.assertEqual(item.userInput.itemId, "item_1")
        self.assertEqual(item.timestamp, "2026-01-01T10:00:01.000Z")
        self.assertEqual([event.id for event in item.sourceEvents], ["log_0", "log_1"])

    def test_unmatched_echo_becomes_its_own_item(self) -> None:
        events = _events([_user_text(1, "ping"), _server_echo(2, "pong")])

        items = build_timeline(events)

        self.assertEqual([item.userInput.text for item in items], ["ping", "pong"])
        self.assertEqual(items[1].id, "user_log_1")

    def test_echo_only_matches_earlier_client_input(self) -> None:
        events = _events([_server_echo(1, "ping"), _user_text(2, "ping")])
        self.assertEqual(len(build_timeline(events)), 2)

    def test_repeated_text_pairs_each_echo_once_newest_first(self) -> None:
        events = _events(
            [
                _user_text(1, "yes"),
                _user_text(2, "yes"),
                _server_echo(3, "yes", item_id="item_a"),
                _server_echo(4, "yes", item_id="item_b"),
            ]
        )

        items = build_timeline(events)

        self.assertEqual(len(items), 2)
        self.assertEqual([event.id for event in items[0].sourceEvents], ["log_0", "log_3"])
        self.assertEqual([event.id for event in items[1].sourceEvents], ["log_1", "log_2"])
        self.assertEqual(items[1].userInput.itemId, "item_a")

    def test_echo_from_another_session_is_not_merged(self) -> None:
        events = _events([_user_text(1, "ping", session="sess_1"), _server_echo(2, "ping", session="sess_2")])
        self.assertEqual(len(build_timeline(events)), 2)

    def test_assistant_item_created_is_a_system_event(self) -> None:
        events = _events(
            [
                _line(
                    1,
                    {
                        "type": "conversation.item.created",
                        "item": {"id": "item_9", "role": "assistant", "content": [{"type": "text", "text": "hi"}]},
                    },
                )
            ]
        )

        items = build_timeline(events)

        self.assertEqual(items[0].type, "system_event")
        self.assertEqual(items[0].systemDescription.description, "Conversation item added")


class AudioRunTests(unittest.TestCase):
    def test_consecutive_appends_merge_and_runs_split_on_other_events(self) -> None:
        events = _events(
            [
                _audio_append(1, "SGVsbG8="),
                _audio_append(2, "d29ybGQ="),
                _audio_append(3, ""),
                _line(4, {"type": "input_audio_buffer.speech_started"}),
                _audio_append(5, "QUJD"),
                _audio_append(6, "REVG"),
            ]
        )

        items = build_timeline(events)

        self.assertEqual([item.type for item in items], ["user_input", "system_event", "user_input"])
        first, _, second = items
        self.assertEqual(first.id, "user_audio_log_0")
        self.assertEqual(first.userInput.inputType, "audio")
        self.assertTrue(first.userInput.hasAudio)
        self.assertEqual(first.userInput.audioChunkCount, 3)
        self.assertEqual(first.userInput.audioData, "SGVsbG8d29ybGQ==")
        self.assertEqual(first.timestamp, "2026-01-01T10:00:01.000Z")
        self.assertEqual(second.userInput.audioChunkCount, 2)
        self.assertEqual(second.userInput.audioData, "QUJDREVG")

    def test_run_without_audio_payload(self) -> None:
        items = build_timeline(_events([_line(1, {"type": "audio_append"}, source="USER")]))
        self.assertEqual(items[0].userInput.audioChunkCount, 1)
        self.assertIsNone(items[0].userInput.audioData)


class EventClassificationTests(unittest.TestCase):
    def test_session_error_system_and_client_actions(self) -> None:
        events = _events(
            [
                _line(1, {"type": "session.created", "session": {"model": "gpt-4o-realtime-preview", "voice": "alloy"}}),
                _line(2, {"type": "response_create"}, source="USER"),
                _line(
                    3,
                    {
                        "type": "error",
                        "error": {
                            "type": "invalid_request_error",
                            "code": "invalid_value",
                            "message": "Bad value",
                            "param": "session.voice",
                            "event_id": "evt_client_1",
                        },
                    },
                ),
                _line(4, {"type": "permission.denied", "message": "Not allowed"}),
                _line(5, {"type": "rate_limits.updated"}),
                _line(6, {"type": "vendor.custom"}),
                _line(7, {"type": "error"}),
            ]
        )

        items = build_timeline(events)

        self.assertEqual(
            [item.type for item in items],
            ["session_event", "system_event", "error", "error", "system_event", "system_event", "error"],
        )
        self.assertEqual(items[0].sessionSnapshot.eventType, "created")
        self.assertEqual(items[0].sessionSnapshot.model, "gpt-4o-realtime-preview")
        self.assertEqual(items[1].systemDescription.description, "User action: response_create")
        self.assertEqual(items[2].errorDetail.message, "Bad value")
        self.assertEqual(items[2].errorDetail.code, "invalid_value")
        self.assertEqual(items[2].errorDetail.param, "session.voice")
        self.assertEqual(items[2].errorDetail.eventId, "evt_client_1")
        self.assertEqual(items[3].errorDetail.message, "Not allowed")
        self.assertEqual(items[4].systemDescription.description, "Rate limits updated")
        self.assertEqual(items[5].systemDescription.description, "vendor.custom")
        self.assertEqual(items[6].errorDetail.message, "Unknown error")

    def test_input_transcription_becomes_user_input(self) -> None:
        events = _events(
            [
                _line(1, {"type": "conversation.item.input_audio_transcription.delta", "item_id": "item_7", "delta": "Hel"}),
                _line(
                    2,
                    {
                        "type": "conversation.item.input_audio_transcription.completed",
                        "item_id": "item_7",
                        "transcript": "Hello there",
                    },
                ),
            ]
        )

        items = build_timeline(events)

        self.assertEqual(items[0].type, "system_event")
        self.assertEqual(items[1].type, "user_input")
        self.assertEqual(items[1].userInput.inputType, "transcription")
        self.assertEqual(items[1].userInput.text, "Hello there")
        self.assertEqual(items[1].userInput.itemId, "item_7")


class TimelinePropertyTests(unittest.TestCase):
    def _conversation(self) -> list[str]:
        return [
            _line(0, {"type": "session.created", "session": {"model": "m1"}}),
            _user_text(1, "What's the weather?"),
            _server_echo(2, "What's the weather?"),
            _line(3, {"type": "response.created", "response": {"id": "resp_1"}}),
            _line(4, {"type": "response.function_call_arguments.delta", "response_id": "resp_1", "delta": '{"city":'}),
            _audio_append(5, "QUJD"),
            _line(6, {"type": "response.function_call_arguments.delta", "response_id": "resp_1", "delta": '"Oslo"}'}),
            _line(7, {"type": "response.function_call_arguments.done", "response_id": "resp_1", "name": "weather"}),
            _line(8, {"type": "response.done", "response": {"id": "resp_1", "status": "completed"}}),
            _audio_append(9, "REVG"),
            _line(10, {"type": "input_audio_buffer.committed"}),
            _line(11, {"type": "response.audio.delta", "response_id": "resp_2", "delta": "SGVsbG8="}),
            _line(12, {"type": "response.audio_transcript.done", "response_id": "resp_2", "transcript": "Sunny"}),
            _line(13, {"type": "session.updated", "session": {"model": "m2"}}),
        ]

    def test_every_event_is_referenced_exactly_once(self) -> None:
        events = _events(self._conversation())

        items = build_timeline(events)

        referenced = Counter(event.id for item in items for event in item.sourceEvents)
        self.assertEqual(set(referenced), {event.id for event in events})
        self.assertTrue(all(count == 1 for count in referenced.values()))
        self.assertTrue(all(item.sourceEvents for item in items))

    def test_items_are_sorted_and_response_groups_summarized(self) -> None:
        items = build_timeline(_events(self._conversation()))

        timestamps = [item.timestamp for item in items]
        self.assertEqual(timestamps, sorted(timestamps))

        groups = {item.responseGroup.responseId: item.responseGroup for item in items if item.responseGroup}
        self.assertEqual(groups["resp_1"].type, "function_call")
        self.assertEqual(groups["resp_1"].status, "completed")
        self.assertEqual(groups["resp_1"].functionArguments, {"city": "Oslo"})
        self.assertEqual(groups["resp_2"].type, "audio_response")
        self.assertEqual(groups["resp_2"].status, "in_progress")
        self.assertEqual(groups["resp_2"].transcript, "Sunny")

        audio_items = [item for item in items if item.userInput and item.userInput.inputType == "audio"]
        self.assertEqual(len(audio_items), 1)
        self.assertEqual(audio_items[0].userInput.audioData, "QUJDREVG")

    def test_building_twice_is_identical(self) -> None:
        lines = self._conversation()
        first = [item.model_dump() for item in build_timeline(_events(lines))]
        second = [item.model_dump() for item in build_timeline(_events(lines))]
        self.assertEqual(first, second)

    def test_empty_input(self) -> None:
        self.assertEqual(build_timeline([]), [])


if __name__ == "__main__":
    unittest.main()
