"""Base classes for queue delivery."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

Callback = Callable[["QueueMessage"], None]


class MessageStatus(Enum):
    """Settlement state of a delivered message."""
    IN_FLIGHT = "in_flight"
    ACKED = "acked"
    RETRY = "retry"


class QueueMessage:
    """
    One delivered message with its settlement callbacks.

    A message is settled once: the first ack() or retry() wins and later
    calls are ignored.
    """

    def __init__(
        self,
        body: Any,
        message_id: str = "",
        attempts: int = 1,
        on_ack: Optional[Callback] = None,
        on_retry: Optional[Callback] = None
    ):
        self.body = body
        self.id = message_id
        self.attempts = attempts
        self.status = MessageStatus.IN_FLIGHT
        self._on_ack = on_ack
        self._on_retry = on_retry

    def ack(self) -> None:
        """Acknowledge so the transport will not redeliver."""
        if self.status is not MessageStatus.IN_FLIGHT:
            return
        self.status = MessageStatus.ACKED
        if self._on_ack:
            self._on_ack(self)

    def retry(self) -> None:
        """Signal failure so the transport redelivers later."""
        if self.status is not MessageStatus.IN_FLIGHT:
            return
        self.status = MessageStatus.RETRY
        if self._on_retry:
            self._on_retry(self)

    def __repr__(self) -> str:
        return f"QueueMessage(id={self.id!r}, attempts={self.attempts}, status={self.status.value})"


@dataclass
class MessageBatch:
    """Batch of messages delivered from one queue."""
    queue: str
    messages: list[QueueMessage] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.messages)
