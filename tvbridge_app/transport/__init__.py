"""
Queue transport types.

The batch processor consumes MessageBatch objects; InMemoryQueue provides an
at-least-once transport with redelivery for tests and local runs.
"""
from .base import MessageBatch, MessageStatus, QueueMessage
from .memory import InMemoryQueue

__all__ = ["MessageBatch", "MessageStatus", "QueueMessage", "InMemoryQueue"]
