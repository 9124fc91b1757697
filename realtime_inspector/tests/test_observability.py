import unittest
from unittest.mock import MagicMock, patch

from realtime_inspector.observability import otel


class ObservabilityDisabledTests(unittest.TestCase):
    def setUp(self) -> None:
        patchers = [
            patch.object(otel, "_initialized", False),
            patch.object(otel, "_enabled", False),
            patch.object(otel, "_prom_enabled", False),
            patch.object(otel.config, "OTEL_ENABLED", False),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_disabled_initialize_leaves_helpers_inert(self) -> None:
        otel.initialize(None)

        with otel.start_span("realtime_inspector.process_log", {"origin": "file"}) as span:
            self.assertIsNone(span)
        otel.record_log_processed("file", 10, 3.5)
        otel.record_parser_failure("json", 2)
        otel.shutdown(None)
        self.assertFalse(otel._enabled)

    def test_parser_failure_counter_uses_reason_label(self) -> None:
        counter = MagicMock()
        with patch.object(otel, "_enabled", True), patch.object(otel, "_parser_failure_counter", counter):
            otel.record_parser_failure("grammar", 3)
            otel.record_parser_failure("json", 0)
        counter.add.assert_called_once_with(3, {"reason": "grammar"})


class OtlpEndpointTests(unittest.TestCase):
    def test_signal_path_is_appended_once(self) -> None:
        self.assertEqual(
            otel._normalize_otlp_endpoint("http://collector:4318", "/v1/traces"),
            "http://collector:4318/v1/traces",
        )
        self.assertEqual(
            otel._normalize_otlp_endpoint("http://collector:4318/v1/", "/v1/metrics"),
            "http://collector:4318/v1/metrics",
        )
        self.assertEqual(
            otel._normalize_otlp_endpoint("http://collector:4318/v1/traces", "/v1/traces"),
            "http://collector:4318/v1/traces",
        )
        self.assertEqual(otel._normalize_otlp_endpoint("  ", "/v1/traces"), "")


if __name__ == "__main__":
    unittest.main()
