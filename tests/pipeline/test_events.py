"""Tests for pipeline events and sinks."""

from unittest.mock import Mock, patch

from tvbridge_app.pipeline.events import (
    EventType,
    PipelineEvent,
    RecordingEventSink,
    StructlogEventSink,
)


class TestPipelineEvent:
    """Test PipelineEvent."""

    def test_event_names(self):
        assert PipelineEvent(EventType.DUPLICATE).name == "duplicate_signal"
        assert PipelineEvent(EventType.RATE_LIMITED).name == "rate_limited"
        assert PipelineEvent(EventType.NO_ACTION).name == "no_action"
        assert PipelineEvent(EventType.STORED).name == "pending_signal_stored"
        assert PipelineEvent(EventType.FAILED).name == "queue_processing_failed"


class TestRecordingEventSink:
    """Test RecordingEventSink."""

    def test_records_in_order(self):
        sink = RecordingEventSink()
        sink.emit(PipelineEvent(EventType.STORED, "k1"))
        sink.emit(PipelineEvent(EventType.DUPLICATE, "k1"))

        assert sink.names() == ["pending_signal_stored", "duplicate_signal"]
        assert [event.idempotency_key for event in sink.of_type(EventType.DUPLICATE)] == ["k1"]

        sink.clear()
        assert sink.events == []


class TestStructlogEventSink:
    """Test rendering events through structlog."""

    def setup_method(self):
        self.logger = Mock()
        with patch("tvbridge_app.pipeline.events.get_pipeline_logger", return_value=self.logger):
            self.sink = StructlogEventSink()

    def test_gate_event_logged_as_gate_decision(self):
        with patch("tvbridge_app.pipeline.events.log_gate_decision") as mock_log:
            self.sink.emit(PipelineEvent(EventType.RATE_LIMITED, "k1", {"symbol": "EURUSD"}))

        mock_log.assert_called_once_with(
            self.logger,
            gate_name="rate_limit",
            passed=False,
            idempotency_key="k1",
            reason="rate_limited",
            context={"symbol": "EURUSD"},
        )

    def test_failure_logged_as_error(self):
        self.sink.emit(PipelineEvent(EventType.FAILED, "k1", {"error": "boom"}))
        self.logger.error.assert_called_once_with(
            "queue_processing_failed", idempotency_key="k1", error="boom"
        )

    def test_stored_logged_as_info(self):
        self.sink.emit(PipelineEvent(EventType.STORED, "k1", {"key": "pending:X:1:k1"}))
        self.logger.info.assert_called_once_with(
            "pending_signal_stored", idempotency_key="k1", key="pending:X:1:k1"
        )
