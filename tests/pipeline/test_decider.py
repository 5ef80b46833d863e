"""Tests for directive decision rules."""

import pytest

from tvbridge_app.config.resolver import PipelineConfig
from tvbridge_app.data.models import DirectiveKind, RawSignal, Side
from tvbridge_app.pipeline.decider import decide


def make_signal(signal: str, timeframe: str = "15") -> RawSignal:
    return RawSignal(
        signal=signal,
        symbol_raw="EURUSD",
        symbol_norm="EURUSD",
        timeframe=timeframe,
        bar_time="2025-10-27T10:00:00Z",
        idempotency_key="k1",
        received_at=0,
    )


class TestDecide:
    """Test the decide() mapping."""

    def setup_method(self):
        self.config = PipelineConfig(default_lot=0.2, tp_close_ratio=0.4)

    def test_long_opens_buy(self):
        directive = decide(make_signal("LONG"), self.config)
        assert directive.kind is DirectiveKind.OPEN
        assert directive.side is Side.BUY
        assert directive.volume == 0.2
        assert directive.volume_ratio is None
        assert directive.comment == "LONG_15"
        assert directive.action == "BUY"

    def test_short_opens_sell(self):
        directive = decide(make_signal("SHORT", "1h"), self.config)
        assert directive.kind is DirectiveKind.OPEN
        assert directive.side is Side.SELL
        assert directive.volume == 0.2
        assert directive.comment == "SHORT_1h"

    @pytest.mark.parametrize("signal", ["TP", "TP_LONG", "TP_SHORT"])
    def test_take_profit_closes_partially(self, signal):
        directive = decide(make_signal(signal), self.config)
        assert directive.kind is DirectiveKind.CLOSE_PARTIAL
        assert directive.volume_ratio == 0.4
        assert directive.side is None
        assert directive.volume is None
        assert directive.action == "CLOSE_PARTIAL"
        assert directive.comment == f"{signal}_15"

    def test_signal_matching_is_case_insensitive(self):
        directive = decide(make_signal("long"), self.config)
        assert directive.side is Side.BUY
        assert directive.comment == "LONG_15"

    @pytest.mark.parametrize("signal", ["FLAT", "EXIT", "", "LONGER", "TP2"])
    def test_unknown_signal_yields_none(self, signal):
        assert decide(make_signal(signal), self.config) is None

    def test_deterministic(self):
        signal = make_signal("TP_LONG")
        assert decide(signal, self.config) == decide(signal, self.config)
