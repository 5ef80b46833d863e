"""Tests for webhook payload normalization."""

import hashlib

import pytest

from tvbridge_app.data.normalizer import (
    SignalNormalizer,
    compute_idempotency_key,
    normalize_symbol,
    normalize_timeframe,
    raw_symbol,
)
from tvbridge_app.errors import MalformedDataError, MissingDataError


class TestNormalizationHelpers:
    """Test field normalization helpers."""

    def test_symbol_upper_cased_and_trimmed(self):
        assert normalize_symbol({"symbol": " eurusd "}) == "EURUSD"

    def test_symbol_falls_back_to_symbol_tv(self):
        assert normalize_symbol({"symbol_tv": "oanda:xauusd"}) == "OANDA:XAUUSD"

    def test_empty_symbol_does_not_fall_back(self):
        payload = {"symbol": "", "symbol_tv": "XAUUSD"}
        assert raw_symbol(payload) == ""
        assert normalize_symbol(payload) == ""

    def test_null_symbol_falls_back(self):
        assert raw_symbol({"symbol": None, "symbol_tv": "xauusd"}) == "xauusd"

    def test_timeframe_lower_cased(self):
        assert normalize_timeframe({"timeframe": " 1H "}) == "1h"

    def test_idempotency_key_is_sha1_of_fields(self):
        expected = hashlib.sha1(b"EURUSD|15|LONG|2025-10-27T10:00:00Z").hexdigest()
        assert compute_idempotency_key("EURUSD", "15", "LONG", "2025-10-27T10:00:00Z") == expected

    def test_idempotency_key_distinguishes_fields(self):
        a = compute_idempotency_key("EURUSD", "15", "LONG", "t1")
        b = compute_idempotency_key("EURUSD", "15", "LONG", "t2")
        assert a != b


class TestSignalNormalizer:
    """Test SignalNormalizer."""

    def setup_method(self):
        self.normalizer = SignalNormalizer(clock=lambda: 1761559200000)

    def test_normalize_payload(self, webhook_payload):
        raw = self.normalizer.normalize(
            webhook_payload, source_ip="203.0.113.7", user_agent="TradingView", request_id="r-1"
        )
        assert raw.symbol_norm == "EURUSD"
        assert raw.symbol_raw == "eurusd"
        assert raw.timeframe == "15"
        assert raw.signal == "LONG"
        assert raw.price == "1.2345"
        assert raw.received_at == 1761559200000
        assert raw.source_ip == "203.0.113.7"
        assert raw.user_agent == "TradingView"
        assert raw.metadata["request_id"] == "r-1"
        assert raw.idempotency_key == compute_idempotency_key(
            "EURUSD", "15", "LONG", "2025-10-27T10:00:00Z"
        )

    def test_same_bar_event_same_key(self, webhook_payload):
        first = self.normalizer.normalize(webhook_payload)
        second = self.normalizer.normalize(dict(webhook_payload, symbol="EURUSD", price="9"))
        assert first.idempotency_key == second.idempotency_key
        assert first.metadata["request_id"] != second.metadata["request_id"]

    @pytest.mark.parametrize("field", ["signal", "bar_time", "symbol", "timeframe"])
    def test_missing_field_rejected(self, webhook_payload, field):
        del webhook_payload[field]
        with pytest.raises(MissingDataError) as exc_info:
            self.normalizer.normalize(webhook_payload)
        assert exc_info.value.missing_fields == [field]

    def test_blank_fields_rejected(self):
        with pytest.raises(MissingDataError) as exc_info:
            self.normalizer.normalize({"signal": "  ", "symbol": "EURUSD"})
        assert exc_info.value.missing_fields == ["signal", "bar_time", "timeframe"]

    def test_empty_symbol_rejected_despite_symbol_tv(self, webhook_payload):
        webhook_payload.update(symbol="", symbol_tv="XAUUSD")
        with pytest.raises(MissingDataError) as exc_info:
            self.normalizer.normalize(webhook_payload)
        assert exc_info.value.missing_fields == ["symbol"]

    def test_symbol_tv_used_when_symbol_absent(self, webhook_payload):
        del webhook_payload["symbol"]
        webhook_payload["symbol_tv"] = "xauusd"
        raw = self.normalizer.normalize(webhook_payload)
        assert raw.symbol_raw == "xauusd"
        assert raw.symbol_norm == "XAUUSD"

    def test_non_mapping_rejected(self):
        with pytest.raises(MalformedDataError):
            self.normalizer.normalize(["LONG", "EURUSD"])

    def test_queue_body_round_trips(self, webhook_payload):
        raw = self.normalizer.normalize(webhook_payload, request_id="r-1")
        body = raw.to_dict()
        assert body["idem"] == raw.idempotency_key
        assert "idempotency_key" not in body
