"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest
import yaml

from tvbridge_app.config.loader import ConfigLoader
from tvbridge_app.data.normalizer import SignalNormalizer
from tvbridge_app.engine import BatchProcessor
from tvbridge_app.pipeline.events import RecordingEventSink

# 2025-10-27T10:00:00Z
BASE_TIME_MS = 1761559200000


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start_ms: int = BASE_TIME_MS):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class FakeSecondsClock:
    """Manually advanced epoch-seconds clock for store TTL tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def seconds_clock() -> FakeSecondsClock:
    return FakeSecondsClock()


@pytest.fixture
def webhook_payload() -> Dict[str, Any]:
    """Webhook payload as posted by a TradingView alert."""
    return {
        "signal": "LONG",
        "symbol": "eurusd",
        "timeframe": "15",
        "price": "1.2345",
        "bar_time": "2025-10-27T10:00:00Z",
    }


@pytest.fixture
def make_body(clock: FakeClock) -> Callable[..., Dict[str, Any]]:
    """Build a queue message body through the ingress normalizer."""
    normalizer = SignalNormalizer(clock=clock)

    def _make(**overrides: Any) -> Dict[str, Any]:
        payload = {
            "signal": "LONG",
            "symbol": "EURUSD",
            "timeframe": "15",
            "bar_time": "2025-10-27T10:00:00Z",
        }
        payload.update(overrides)
        return normalizer.normalize(
            payload, source_ip="203.0.113.7", user_agent="pytest", request_id="req-1"
        ).to_dict()

    return _make


@pytest.fixture
def make_loader(tmp_path: Path) -> Callable[..., ConfigLoader]:
    """Create a ConfigLoader over a temporary config directory."""

    def _make(
        pipeline: Optional[Dict[str, Any]] = None,
        symbols: Optional[Dict[str, str]] = None,
        environ: Optional[Dict[str, str]] = None
    ) -> ConfigLoader:
        if pipeline is not None:
            (tmp_path / "pipeline.yaml").write_text(yaml.safe_dump(pipeline))
        if symbols is not None:
            (tmp_path / "symbols.yaml").write_text(yaml.safe_dump({"symbols": symbols}))
        return ConfigLoader.create(tmp_path, environ=environ or {})

    return _make


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def make_processor(
    make_loader: Callable[..., ConfigLoader],
    events: RecordingEventSink,
    clock: FakeClock
) -> Callable[..., BatchProcessor]:
    """Create an in-memory BatchProcessor recording its events."""

    def _make(
        environ: Optional[Dict[str, str]] = None,
        symbols: Optional[Dict[str, str]] = None,
        max_workers: int = 1
    ) -> BatchProcessor:
        processor = BatchProcessor.in_memory(
            config_loader=make_loader(symbols=symbols, environ=environ),
            event_sink=events,
            clock=clock,
            max_workers=max_workers,
        )
        if symbols:
            processor.bootstrap_symbol_mappings()
        return processor

    return _make
