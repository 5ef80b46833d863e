"""
Ingress normalization of webhook payloads into queue messages.

The HTTP surface and its authentication live outside this package; this
module covers what the ingress does with an already-authenticated payload:
field normalization, validation and the deterministic idempotency key.
"""

import hashlib
import uuid
from typing import Any, Mapping, Optional

import structlog

from ..errors import MalformedDataError, MissingDataError
from ..utils.time import Clock, now_ms
from .models import RawSignal

logger = structlog.get_logger(__name__)


def raw_symbol(payload: Mapping[str, Any]) -> str:
    """`symbol` as sent, `symbol_tv` only when `symbol` is absent."""
    raw = payload.get("symbol")
    if raw is None:
        raw = payload.get("symbol_tv")
    return "" if raw is None else str(raw)


def normalize_symbol(payload: Mapping[str, Any]) -> str:
    """Upper-cased, trimmed raw symbol."""
    raw = raw_symbol(payload)
    return str(raw).strip().upper()


def normalize_timeframe(payload: Mapping[str, Any]) -> str:
    """Lower-cased, trimmed timeframe."""
    return str(payload.get("timeframe") or "").strip().lower()


def compute_idempotency_key(symbol_norm: str, timeframe: str, signal: str, bar_time: str) -> str:
    """
    Deterministic idempotency key for one logical signal.

    Hex SHA-1 of `symbol|timeframe|signal|bar_time`; resubmitting the same
    bar event always yields the same key.
    """
    source = f"{symbol_norm}|{timeframe}|{signal}|{bar_time}"
    return hashlib.sha1(source.encode("utf-8")).hexdigest()


class SignalNormalizer:
    """Builds RawSignal queue messages from webhook payloads."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or now_ms
        self.logger = logger

    def normalize(
        self,
        payload: Mapping[str, Any],
        source_ip: str = "",
        user_agent: str = "",
        request_id: Optional[str] = None
    ) -> RawSignal:
        """
        Normalize a webhook payload.

        Args:
            payload: Decoded webhook JSON body
            source_ip: Client address reported by the ingress
            user_agent: Client user agent reported by the ingress
            request_id: Request identifier, generated when omitted

        Returns:
            RawSignal ready to enqueue

        Raises:
            MalformedDataError: payload is not a JSON object
            MissingDataError: signal, bar_time, symbol or timeframe is blank
        """
        if not isinstance(payload, Mapping):
            raise MalformedDataError(
                f"Webhook payload must be an object, got {type(payload).__name__}",
                raw_data=str(payload)[:100],
                expected_format="object"
            )

        signal = str(payload.get("signal") or "").strip()
        bar_time = str(payload.get("bar_time") or "").strip()
        symbol_norm = normalize_symbol(payload)
        timeframe = normalize_timeframe(payload)

        fields = {
            "signal": signal,
            "bar_time": bar_time,
            "symbol": symbol_norm,
            "timeframe": timeframe,
        }
        missing = [name for name, value in fields.items() if not value]
        if missing:
            self.logger.warning(
                "Webhook payload missing fields",
                missing_fields=missing,
                source_ip=source_ip
            )
            raise MissingDataError(
                f"Webhook payload missing fields: {', '.join(missing)}",
                missing_fields=missing
            )

        idempotency_key = compute_idempotency_key(symbol_norm, timeframe, signal, bar_time)

        raw_signal = RawSignal(
            signal=signal,
            symbol_raw=raw_symbol(payload),
            symbol_norm=symbol_norm,
            timeframe=timeframe,
            bar_time=bar_time,
            idempotency_key=idempotency_key,
            received_at=self.clock(),
            source_ip=source_ip,
            user_agent=user_agent,
            price=payload.get("price"),
            chart=payload.get("chart"),
            metadata={"request_id": request_id or str(uuid.uuid4())},
        )

        self.logger.debug(
            "Normalized webhook payload",
            symbol=symbol_norm,
            timeframe=timeframe,
            signal=signal,
            idempotency_key=idempotency_key
        )

        return raw_signal
