"""
Structured pipeline events and the sinks that receive them.

The batch processor reports every outcome as a PipelineEvent instead of
logging inline, so decision logic can be tested by inspecting events.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..logging.config import get_pipeline_logger, log_gate_decision


class EventType(str, Enum):
    """Outcomes reported for a queued signal."""
    DUPLICATE = "duplicate_signal"
    RATE_LIMITED = "rate_limited"
    NO_ACTION = "no_action"
    STORED = "pending_signal_stored"
    FAILED = "queue_processing_failed"


# Events that terminate a message at one of the gates
GATE_EVENTS = {
    EventType.DUPLICATE: "dedup",
    EventType.RATE_LIMITED: "rate_limit",
    EventType.NO_ACTION: "decider",
}


@dataclass(frozen=True)
class PipelineEvent:
    """One structured outcome for one message."""
    type: EventType
    idempotency_key: Optional[str] = None
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.type.value


class EventSink(ABC):
    """Receiver for pipeline events."""

    @abstractmethod
    def emit(self, event: PipelineEvent) -> None:
        pass


class StructlogEventSink(EventSink):
    """Renders pipeline events through the pipeline structlog logger."""

    def __init__(self, name: str = "tvbridge_app.pipeline"):
        self.logger = get_pipeline_logger(name)

    def emit(self, event: PipelineEvent) -> None:
        if event.type in GATE_EVENTS:
            log_gate_decision(
                self.logger,
                gate_name=GATE_EVENTS[event.type],
                passed=False,
                idempotency_key=event.idempotency_key or "",
                reason=event.name,
                context=event.fields,
            )
        elif event.type is EventType.FAILED:
            self.logger.error(
                event.name,
                idempotency_key=event.idempotency_key,
                **event.fields
            )
        else:
            self.logger.info(
                event.name,
                idempotency_key=event.idempotency_key,
                **event.fields
            )


class RecordingEventSink(EventSink):
    """Keeps emitted events in memory."""

    def __init__(self):
        self.events: list[PipelineEvent] = []

    def emit(self, event: PipelineEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: EventType) -> list[PipelineEvent]:
        return [event for event in self.events if event.type is event_type]

    def names(self) -> list[str]:
        return [event.name for event in self.events]

    def clear(self) -> None:
        self.events.clear()
