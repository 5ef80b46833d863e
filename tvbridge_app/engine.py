"""
Main batch processing coordinator.

Orchestrates the signal staging pipeline for each queued message:
Dedup → Symbol Mapping → Rate Limit → Directive Decision → Pending Store → Ack.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import structlog

from .config.loader import ConfigLoader
from .config.resolver import PipelineConfig
from .data.models import PendingSignalRecord, RawSignal
from .persistence.pending_store import PendingDirectiveStore
from .pipeline.decider import decide
from .pipeline.dedup import DeduplicationGate
from .pipeline.events import EventSink, EventType, PipelineEvent, StructlogEventSink
from .pipeline.rate_limit import RateLimiter
from .pipeline.symbols import SymbolResolver
from .storage.base import KeyValueStore
from .storage.memory import InMemoryKeyValueStore
from .transport.base import MessageBatch, QueueMessage
from .utils.time import Clock, format_ms, now_ms

logger = structlog.get_logger(__name__)


class MessageOutcome(str, Enum):
    """Terminal outcome of one message."""
    STORED = "stored"
    DUPLICATE = "duplicate"
    RATE_LIMITED = "rate_limited"
    NO_ACTION = "no_action"
    RETRIED = "retried"


@dataclass
class BatchResult:
    """Outcome counts for one processed batch."""
    stored: int = 0
    duplicate: int = 0
    rate_limited: int = 0
    no_action: int = 0
    retried: int = 0

    def record(self, outcome: MessageOutcome) -> None:
        setattr(self, outcome.value, getattr(self, outcome.value) + 1)

    @property
    def acknowledged(self) -> int:
        return self.stored + self.duplicate + self.rate_limited + self.no_action

    @property
    def total(self) -> int:
        return self.acknowledged + self.retried


class BatchProcessor:
    """
    Queue consumer turning raw signals into staged trade directives.

    Each message is settled independently: duplicates, rate-limited and
    no-action signals are acknowledged; any exception leads to retry() for
    that message only.
    """

    def __init__(
        self,
        dedup_store: KeyValueStore,
        rate_limit_store: KeyValueStore,
        mapping_store: KeyValueStore,
        pending_store: KeyValueStore,
        config_loader: Optional[ConfigLoader] = None,
        event_sink: Optional[EventSink] = None,
        clock: Optional[Clock] = None,
        max_workers: int = 1
    ) -> None:
        """Initialize the batch processor."""
        self.logger = logger

        self.dedup_gate = DeduplicationGate(dedup_store)
        self.symbol_resolver = SymbolResolver(mapping_store)
        self.rate_limiter = RateLimiter(rate_limit_store)
        self.pending_kv = pending_store

        self.config_loader = config_loader or ConfigLoader.create()
        self.events = event_sink or StructlogEventSink()
        self.clock = clock or now_ms
        self.max_workers = max(1, max_workers)

        self.logger.info("Batch processor initialized", max_workers=self.max_workers)

    @classmethod
    def in_memory(
        cls,
        config_loader: Optional[ConfigLoader] = None,
        event_sink: Optional[EventSink] = None,
        clock: Optional[Clock] = None,
        max_workers: int = 1
    ) -> "BatchProcessor":
        """Create a processor backed by four in-memory namespaces."""
        return cls(
            dedup_store=InMemoryKeyValueStore("idempotency"),
            rate_limit_store=InMemoryKeyValueStore("ratelimit"),
            mapping_store=InMemoryKeyValueStore("mapping"),
            pending_store=InMemoryKeyValueStore("pending_signals"),
            config_loader=config_loader,
            event_sink=event_sink,
            clock=clock,
            max_workers=max_workers,
        )

    def bootstrap_symbol_mappings(self) -> int:
        """Seed the mapping store from the loader's symbols.yaml."""
        return self.symbol_resolver.load_mappings(self.config_loader.load_symbol_mappings())

    def pending_directives(self, config: Optional[PipelineConfig] = None) -> PendingDirectiveStore:
        """Pending directive store bound to the processor's pending namespace."""
        return PendingDirectiveStore.from_config(self.pending_kv, config or self.config_loader.resolve())

    def process_batch(self, batch: MessageBatch) -> BatchResult:
        """
        Process every message of a delivered batch.

        Configuration is resolved once for the whole batch.

        Args:
            batch: Delivered batch of queue messages

        Returns:
            BatchResult with per-outcome counts
        """
        config = self.config_loader.resolve()
        pending = self.pending_directives(config)
        result = BatchResult()

        if self.max_workers > 1 and len(batch.messages) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(
                    lambda message: self.process_message(message, config, pending),
                    batch.messages
                ))
        else:
            outcomes = [self.process_message(message, config, pending) for message in batch.messages]

        for outcome in outcomes:
            result.record(outcome)

        self.logger.info(
            "Processed batch",
            queue=batch.queue,
            messages=len(batch.messages),
            stored=result.stored,
            duplicate=result.duplicate,
            rate_limited=result.rate_limited,
            no_action=result.no_action,
            retried=result.retried
        )

        return result

    def process_message(
        self,
        message: QueueMessage,
        config: PipelineConfig,
        pending: PendingDirectiveStore
    ) -> MessageOutcome:
        """Run the pipeline for one message and settle it."""
        try:
            outcome = self._run_pipeline(message.body, config, pending)
            message.ack()
            return outcome

        except Exception as e:
            self.events.emit(PipelineEvent(
                type=EventType.FAILED,
                idempotency_key=self._body_key(message.body),
                fields={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "body": self._body_for_log(message.body),
                    "attempts": getattr(message, "attempts", None),
                }
            ))
            self._retry(message)
            return MessageOutcome.RETRIED

    def _run_pipeline(
        self,
        body: Any,
        config: PipelineConfig,
        pending: PendingDirectiveStore
    ) -> MessageOutcome:
        raw = body if isinstance(body, RawSignal) else RawSignal.from_dict(body)

        if self.dedup_gate.is_duplicate(raw.idempotency_key, config.dedup_ttl_seconds):
            self.events.emit(PipelineEvent(
                type=EventType.DUPLICATE,
                idempotency_key=raw.idempotency_key,
                fields={"symbol": raw.symbol_norm, "signal": raw.signal, "bar_time": raw.bar_time}
            ))
            return MessageOutcome.DUPLICATE

        symbol = self.symbol_resolver.resolve(raw.symbol_norm)
        now = self.clock()

        # Runs before the decider: an unrecognized signal still takes the slot
        if self.rate_limiter.is_rate_limited(
            symbol, now, config.min_interval_ms, config.rate_limit_ttl_seconds
        ):
            self.events.emit(PipelineEvent(
                type=EventType.RATE_LIMITED,
                idempotency_key=raw.idempotency_key,
                fields={"symbol": symbol, "signal": raw.signal, "bar_time": raw.bar_time}
            ))
            return MessageOutcome.RATE_LIMITED

        directive = decide(raw, config)
        if directive is None:
            self.events.emit(PipelineEvent(
                type=EventType.NO_ACTION,
                idempotency_key=raw.idempotency_key,
                fields={"symbol": symbol, "signal": raw.signal, "body": raw.to_dict()}
            ))
            return MessageOutcome.NO_ACTION

        record = PendingSignalRecord.build(raw, directive, symbol, now)
        pending.stage(record, config.pending_ttl_seconds)

        self.events.emit(PipelineEvent(
            type=EventType.STORED,
            idempotency_key=raw.idempotency_key,
            fields={
                "key": record.key,
                "signal": raw.signal,
                "symbol": symbol,
                "action": record.action,
                "staged_at": format_ms(record.timestamp),
            }
        ))
        return MessageOutcome.STORED

    def _retry(self, message: QueueMessage) -> None:
        try:
            message.retry()
        except Exception as e:
            # Settlement failure must not abort sibling messages
            self.logger.error(
                "Failed to request message retry",
                message_id=getattr(message, "id", None),
                error=str(e),
                error_type=type(e).__name__
            )

    @staticmethod
    def _body_key(body: Any) -> Optional[str]:
        if isinstance(body, RawSignal):
            return body.idempotency_key
        if isinstance(body, Mapping):
            return body.get("idempotency_key", body.get("idem"))
        return None

    @staticmethod
    def _body_for_log(body: Any) -> Any:
        if isinstance(body, RawSignal):
            return body.to_dict()
        if isinstance(body, Mapping):
            return dict(body)
        return repr(body)
