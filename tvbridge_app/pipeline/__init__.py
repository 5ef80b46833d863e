"""
Signal pipeline stages.

Deduplication gate, symbol resolver, rate limiter and directive decider,
composed per message by the batch processor in tvbridge_app.engine.
"""
from .decider import decide
from .dedup import DeduplicationGate
from .events import EventSink, EventType, PipelineEvent, RecordingEventSink, StructlogEventSink
from .rate_limit import RateLimiter
from .symbols import SymbolResolver

__all__ = [
    "decide",
    "DeduplicationGate",
    "EventSink",
    "EventType",
    "PipelineEvent",
    "RecordingEventSink",
    "StructlogEventSink",
    "RateLimiter",
    "SymbolResolver",
]
