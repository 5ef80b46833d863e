"""In-process queue with at-least-once delivery and dead-lettering."""

import threading
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any

import structlog

from .base import MessageBatch, QueueMessage

logger = structlog.get_logger(__name__)


@dataclass
class _Envelope:
    message_id: str
    body: Any
    attempts: int = 0


class InMemoryQueue:
    """
    FIFO queue handing out batches of QueueMessage objects.

    Retried messages go back to the tail of the queue until max_attempts
    deliveries have failed, after which they are parked in dead_letters.
    """

    def __init__(self, name: str = "tv_signals", max_attempts: int = 3):
        self.name = name
        self.max_attempts = max_attempts
        self.acked: list[Any] = []
        self.dead_letters: list[Any] = []
        self._ready: deque[_Envelope] = deque()
        self._in_flight: dict[str, _Envelope] = {}
        self._lock = threading.Lock()

    def send(self, body: Any) -> str:
        """Enqueue a message body, returning its message id."""
        envelope = _Envelope(message_id=uuid.uuid4().hex, body=body)
        with self._lock:
            self._ready.append(envelope)
        return envelope.message_id

    def receive_batch(self, max_batch_size: int = 10) -> MessageBatch:
        """Deliver up to max_batch_size ready messages."""
        messages = []
        with self._lock:
            while self._ready and len(messages) < max_batch_size:
                envelope = self._ready.popleft()
                envelope.attempts += 1
                self._in_flight[envelope.message_id] = envelope
                messages.append(QueueMessage(
                    body=envelope.body,
                    message_id=envelope.message_id,
                    attempts=envelope.attempts,
                    on_ack=self._handle_ack,
                    on_retry=self._handle_retry,
                ))
        return MessageBatch(queue=self.name, messages=messages)

    def _handle_ack(self, message: QueueMessage) -> None:
        with self._lock:
            envelope = self._in_flight.pop(message.id, None)
            if envelope is not None:
                self.acked.append(envelope.body)

    def _handle_retry(self, message: QueueMessage) -> None:
        with self._lock:
            envelope = self._in_flight.pop(message.id, None)
            if envelope is None:
                return
            if envelope.attempts >= self.max_attempts:
                self.dead_letters.append(envelope.body)
                logger.warning(
                    "Message moved to dead letters",
                    queue=self.name,
                    message_id=envelope.message_id,
                    attempts=envelope.attempts
                )
            else:
                self._ready.append(envelope)

    @property
    def ready_count(self) -> int:
        with self._lock:
            return len(self._ready)

    @property
    def in_flight_count(self) -> int:
        with self._lock:
            return len(self._in_flight)
