"""Directive decision rules mapping signal names to trade directives."""

from typing import Optional

from ..config.resolver import PipelineConfig
from ..data.models import DirectiveKind, RawSignal, Side, TradeDirective

OPEN_SIDES = {
    "LONG": Side.BUY,
    "SHORT": Side.SELL,
}

TAKE_PROFIT_SIGNALS = frozenset({"TP", "TP_LONG", "TP_SHORT"})


def decide(signal: RawSignal, config: PipelineConfig) -> Optional[TradeDirective]:
    """
    Decide the trade directive for a signal.

    Pure and total: unknown signal names yield None, which the caller treats
    as a terminal "no action" outcome rather than an error.
    """
    signal_upper = signal.signal.upper()
    comment = f"{signal_upper}_{signal.timeframe}"

    if signal_upper in OPEN_SIDES:
        return TradeDirective(
            kind=DirectiveKind.OPEN,
            side=OPEN_SIDES[signal_upper],
            volume=config.default_lot,
            comment=comment,
        )

    if signal_upper in TAKE_PROFIT_SIGNALS:
        return TradeDirective(
            kind=DirectiveKind.CLOSE_PARTIAL,
            volume_ratio=config.tp_close_ratio,
            comment=comment,
        )

    return None
