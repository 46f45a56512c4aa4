"""
tests/test_serializers.py — Client Formatting
==============================================
"""

from __future__ import annotations

from datetime import UTC, datetime

from safespace.services.serializers import (
    format_local_date,
    format_local_datetime,
    iso,
)

SUMMER = datetime(2026, 7, 1, 3, 5, 9, tzinfo=UTC)


class TestTimeFormatting:
    def test_iso_is_utc_with_millis(self):
        assert iso(SUMMER) == "2026-07-01T03:05:09.000Z"
        assert iso(None) is None

    def test_naive_values_are_utc(self):
        assert iso(SUMMER.replace(tzinfo=None)) == "2026-07-01T03:05:09.000Z"

    def test_local_12_hour_crosses_midnight(self):
        # 03:05 UTC is 21:05 the previous evening in Edmonton (MDT, UTC-6)
        assert format_local_datetime(SUMMER) == "06/30/2026, 09:05:09 PM"

    def test_local_24_hour(self):
        assert format_local_datetime(SUMMER, hour12=False) == "06/30/2026, 21:05:09"

    def test_other_zone(self):
        assert format_local_date(SUMMER, "Europe/Berlin") == "07/01/2026"
