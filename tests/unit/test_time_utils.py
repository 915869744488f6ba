"""Tests for pickem_core.time utilities."""

from datetime import UTC, datetime, timedelta, timezone

from pickem_core.time import ensure_utc, epoch_to_utc, utc_isoformat


class TestTimeUtils:
    """Validate timezone utility helpers."""

    def test_epoch_to_utc_returns_aware(self):
        """Tank01 epoch strings become UTC-aware datetimes."""
        parsed = epoch_to_utc(float("1725820800.0"))
        assert parsed.tzinfo == UTC
        assert parsed == datetime(2024, 9, 8, 18, 40, tzinfo=UTC)

    def test_ensure_utc_converts_naive(self):
        """Naive datetimes should be promoted to UTC-aware values."""
        naive = datetime(2024, 1, 15, 19, 0, 0)
        ensured = ensure_utc(naive)
        assert ensured.tzinfo == UTC
        assert ensured.hour == 19

    def test_ensure_utc_converts_offsets(self):
        eastern = datetime(2024, 9, 8, 13, 0, tzinfo=timezone(timedelta(hours=-4)))
        assert ensure_utc(eastern) == datetime(2024, 9, 8, 17, 0, tzinfo=UTC)

    def test_utc_isoformat_uses_z_suffix(self):
        """ISO formatter should emit trailing Z for UTC datetimes."""
        dt = datetime(2024, 1, 15, 19, 0, 0, tzinfo=UTC)
        assert utc_isoformat(dt) == "2024-01-15T19:00:00Z"
