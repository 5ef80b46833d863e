"""Tests for epoch-millisecond time helpers."""

from datetime import datetime, timezone
from unittest.mock import patch

from tvbridge_app.utils.time import format_ms, ms_to_datetime, now_ms


class TestNowMs:
    """Test now_ms."""

    def test_reads_wall_clock(self):
        with patch("tvbridge_app.utils.time.time.time_ns", return_value=1761559200123456789):
            assert now_ms() == 1761559200123

    def test_is_integer(self):
        assert isinstance(now_ms(), int)


class TestConversions:
    """Test conversions for logging."""

    def test_ms_to_datetime(self):
        assert ms_to_datetime(1761559200000) == datetime(2025, 10, 27, 10, 0, tzinfo=timezone.utc)

    def test_format_ms(self):
        assert format_ms(1761559200500) == "2025-10-27T10:00:00.500000+00:00"
