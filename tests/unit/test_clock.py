"""Unit tests for the injectable clocks."""

from datetime import date, datetime, timedelta, timezone

from fleetops_kernel.domain.clock import FixedClock, SystemClock, to_naive_utc


class TestFixedClock:
    def test_returns_same_time_until_changed(self):
        clock = FixedClock(datetime(2024, 3, 1, 9, 30))
        assert clock.now() == clock.now() == datetime(2024, 3, 1, 9, 30)

    def test_today(self):
        assert FixedClock(datetime(2024, 3, 1, 23, 59)).today() == date(2024, 3, 1)

    def test_advance(self):
        clock = FixedClock(datetime(2024, 3, 31, 12, 0))
        clock.advance(days=1)
        assert clock.today() == date(2024, 4, 1)

    def test_aware_input_becomes_naive_utc(self):
        eat = timezone(timedelta(hours=3))
        clock = FixedClock(datetime(2024, 1, 1, 2, 0, tzinfo=eat))
        assert clock.now() == datetime(2023, 12, 31, 23, 0)
        assert clock.now().tzinfo is None

    def test_set_time(self):
        clock = FixedClock()
        clock.set_time(datetime(2025, 1, 1))
        assert clock.now() == datetime(2025, 1, 1)


class TestSystemClock:
    def test_is_naive(self):
        assert SystemClock().now().tzinfo is None


class TestToNaiveUtc:
    def test_naive_passes_through(self):
        value = datetime(2024, 6, 15, 12, 0)
        assert to_naive_utc(value) is value

    def test_aware_is_converted(self):
        aware = datetime(2024, 6, 15, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert to_naive_utc(aware) == datetime(2024, 6, 14, 22, 0)
