"""
Canonical data models for queued signals, trade directives and staged records.

RawSignal is what the ingress enqueues, TradeDirective lives only for one
pipeline pass, and PendingSignalRecord is what the pending store persists for
the downstream executor.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from ..errors import MalformedDataError, MissingDataError

PriceValue = Union[str, int, float]

PENDING_KEY_PREFIX = "pending:"
TIMESTAMP_KEY_WIDTH = 13


class DirectiveKind(str, Enum):
    """Kinds of trade directive handed to the executor."""
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    CLOSE_PARTIAL = "CLOSE_PARTIAL"


class Side(str, Enum):
    """Order side for OPEN directives."""
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class RawSignal:
    """Signal as enqueued by the webhook ingress."""
    signal: str
    symbol_raw: str
    symbol_norm: str
    timeframe: str
    bar_time: str
    idempotency_key: str
    received_at: int               # epoch ms at ingress
    source_ip: str = ""
    user_agent: str = ""
    price: Optional[PriceValue] = None
    chart: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the metadata bag along with the rest of the message
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata or {})))

    @classmethod
    def from_dict(cls, body: Mapping[str, Any]) -> "RawSignal":
        """Decode a queue message body (accepts `idem` or `idempotency_key`)."""
        if not isinstance(body, Mapping):
            raise MalformedDataError(
                f"Queue message body must be a mapping, got {type(body).__name__}",
                raw_data=str(body)[:100]
            )

        idempotency_key = body.get("idempotency_key", body.get("idem"))
        required = {
            "signal": body.get("signal"),
            "symbol_norm": body.get("symbol_norm"),
            "timeframe": body.get("timeframe"),
            "bar_time": body.get("bar_time"),
            "idempotency_key": idempotency_key,
        }
        missing = [name for name, value in required.items() if value in (None, "")]
        if missing:
            raise MissingDataError(
                f"Queue message missing required fields: {', '.join(missing)}",
                missing_fields=missing,
                context={"body": dict(body)}
            )

        metadata = body.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise MalformedDataError(
                "Queue message metadata must be a mapping",
                raw_data=str(metadata)[:100],
                expected_format="object"
            )

        try:
            received_at = int(body.get("received_at") or 0)
        except (TypeError, ValueError) as e:
            raise MalformedDataError(
                f"received_at must be epoch milliseconds: {e}",
                raw_data=str(body.get("received_at"))[:100]
            ) from e

        return cls(
            signal=str(body["signal"]),
            symbol_raw=str(body.get("symbol_raw") or ""),
            symbol_norm=str(body["symbol_norm"]),
            timeframe=str(body["timeframe"]),
            bar_time=str(body["bar_time"]),
            idempotency_key=str(idempotency_key),
            received_at=received_at,
            source_ip=str(body.get("source_ip") or ""),
            user_agent=str(body.get("user_agent") or ""),
            price=body.get("price"),
            chart=body.get("chart"),
            metadata=metadata,
        )

    def to_dict(self) -> dict[str, Any]:
        """Encode as a queue message body (wire field `idem`)."""
        body = {
            "signal": self.signal,
            "symbol_raw": self.symbol_raw,
            "symbol_norm": self.symbol_norm,
            "timeframe": self.timeframe,
            "bar_time": self.bar_time,
            "idem": self.idempotency_key,
            "received_at": self.received_at,
            "source_ip": self.source_ip,
            "user_agent": self.user_agent,
            "metadata": dict(self.metadata),
        }
        if self.price is not None:
            body["price"] = self.price
        if self.chart is not None:
            body["chart"] = self.chart
        return body


@dataclass(frozen=True)
class TradeDirective:
    """Decided trade action for one signal."""
    kind: DirectiveKind
    comment: str
    side: Optional[Side] = None
    volume: Optional[float] = None
    volume_ratio: Optional[float] = None

    def __post_init__(self):
        if self.kind is DirectiveKind.OPEN:
            if self.side is None or self.volume is None or self.volume <= 0:
                raise ValueError("OPEN directive requires a side and a positive volume")
        elif self.kind is DirectiveKind.CLOSE_PARTIAL:
            if self.volume_ratio is None or not 0 < self.volume_ratio <= 1:
                raise ValueError("CLOSE_PARTIAL directive requires volume_ratio in (0, 1]")

    @property
    def action(self) -> str:
        """Action label stored on the pending record."""
        if self.kind is DirectiveKind.OPEN:
            return self.side.value
        return self.kind.value


@dataclass(frozen=True)
class PendingSignalRecord:
    """Directive staged for pickup by the downstream executor."""
    id: str
    key: str
    timestamp: int
    symbol: str
    signal: str
    action: str
    timeframe: str
    bar_time: str
    received_at: int
    enqueued_at: int
    source: Mapping[str, str]
    metadata: Mapping[str, Any]
    volume: Optional[float] = None
    volume_ratio: Optional[float] = None
    price: Optional[PriceValue] = None
    chart: Optional[str] = None

    @classmethod
    def build(
        cls,
        raw: RawSignal,
        directive: TradeDirective,
        symbol: str,
        now_ms: int
    ) -> "PendingSignalRecord":
        """Assemble the record for a decided directive."""
        return cls(
            id=raw.idempotency_key,
            key=build_storage_key(symbol, now_ms, raw.idempotency_key),
            timestamp=now_ms,
            symbol=symbol,
            signal=raw.signal,
            action=directive.action,
            volume=directive.volume,
            volume_ratio=directive.volume_ratio,
            timeframe=raw.timeframe,
            bar_time=raw.bar_time,
            price=raw.price,
            chart=raw.chart,
            received_at=raw.received_at,
            enqueued_at=now_ms,
            source={"ip": raw.source_ip, "user_agent": raw.user_agent},
            # Decider's comment wins over an incoming metadata comment
            metadata={**raw.metadata, "comment": directive.comment},
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; absent optional fields are omitted."""
        data = {
            "id": self.id,
            "key": self.key,
            "timestamp": self.timestamp,
            "symbol": self.symbol,
            "signal": self.signal,
            "action": self.action,
            "volume": self.volume,
            "volume_ratio": self.volume_ratio,
            "timeframe": self.timeframe,
            "bar_time": self.bar_time,
            "price": self.price,
            "chart": self.chart,
            "received_at": self.received_at,
            "enqueued_at": self.enqueued_at,
            "source": dict(self.source),
            "metadata": dict(self.metadata),
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PendingSignalRecord":
        source = data.get("source") or {}
        return cls(
            id=data["id"],
            key=data["key"],
            timestamp=int(data["timestamp"]),
            symbol=data["symbol"],
            signal=data["signal"],
            action=data["action"],
            volume=data.get("volume"),
            volume_ratio=data.get("volume_ratio"),
            timeframe=data["timeframe"],
            bar_time=data["bar_time"],
            price=data.get("price"),
            chart=data.get("chart"),
            received_at=int(data.get("received_at") or 0),
            enqueued_at=int(data.get("enqueued_at") or 0),
            source={"ip": source.get("ip", ""), "user_agent": source.get("user_agent", "")},
            metadata=dict(data.get("metadata") or {}),
        )


def build_storage_key(symbol: str, timestamp_ms: int, idempotency_key: str) -> str:
    """
    Build the composite pending-record key.

    `pending:<symbol>:<13-digit zero-padded ms>:<idempotency key>` so that
    lexicographic order within a symbol equals chronological order.
    """
    return (
        f"{PENDING_KEY_PREFIX}{symbol}:"
        f"{str(int(timestamp_ms)).zfill(TIMESTAMP_KEY_WIDTH)}:{idempotency_key}"
    )
