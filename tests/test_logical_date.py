"""Unit tests for the LogicalDate value type."""

import datetime

import pytest

from balance_projections.errors import InvalidCalendarDate, InvalidDateFormat, ProjectionError
from balance_projections.utils.logical_date import LogicalDate


class TestParsing:
    """Test strict and lenient parsing."""

    @pytest.mark.parametrize("value", ["2025-01-01", "2024-02-29", "1999-12-31", "0001-01-01", "9999-12-31"])
    def test_round_trip(self, value: str) -> None:
        """Test that formatting a parsed date gives back the same string."""
        assert LogicalDate.from_string(value).to_string() == value
        assert str(LogicalDate.from_string(value)) == value

    def test_from_string_components(self) -> None:
        date = LogicalDate.from_string("2025-03-07")
        assert (date.year, date.month, date.day) == (2025, 3, 7)

    @pytest.mark.parametrize(
        "value", ["2025-1-01", "2025/01/01", "20250101", "2025-01-01T00:00:00Z", " 2025-01-01", "", "Wed Jan 01 2025"]
    )
    def test_from_string_rejects_other_shapes(self, value: str) -> None:
        with pytest.raises(InvalidDateFormat):
            LogicalDate.from_string(value)

    @pytest.mark.parametrize("value", ["2025-04-31", "2025-02-29", "2025-13-01", "2025-00-10", "2025-01-00"])
    def test_from_string_rejects_impossible_dates(self, value: str) -> None:
        with pytest.raises(InvalidCalendarDate):
            LogicalDate.from_string(value)

    def test_errors_are_value_errors(self) -> None:
        with pytest.raises(ValueError):
            LogicalDate.from_string("not a date")
        assert issubclass(InvalidCalendarDate, ProjectionError)

    def test_constructor_validates(self) -> None:
        with pytest.raises(InvalidCalendarDate):
            LogicalDate(2023, 2, 29)

    def test_constructor_requires_integers(self) -> None:
        with pytest.raises(InvalidCalendarDate):
            LogicalDate(2023, "2", 1)  # type: ignore[arg-type]

    def test_parse_accepts_timestamps(self) -> None:
        """Test that the lenient parser keeps only the calendar part."""
        assert LogicalDate.parse("2025-01-15T23:59:59Z") == LogicalDate(2025, 1, 15)
        assert LogicalDate.parse("2025-01-15 08:30") == LogicalDate(2025, 1, 15)
        assert LogicalDate.parse(datetime.datetime(2025, 1, 15, 23, 0)) == LogicalDate(2025, 1, 15)
        assert LogicalDate.parse(datetime.date(2025, 1, 15)) == LogicalDate(2025, 1, 15)

    def test_parse_returns_same_instance(self) -> None:
        date = LogicalDate(2025, 1, 15)
        assert LogicalDate.parse(date) is date

    def test_parse_rejects_other_types(self) -> None:
        with pytest.raises(InvalidDateFormat):
            LogicalDate.parse(20250115)  # type: ignore[arg-type]


class TestArithmetic:
    """Test day, month and year arithmetic."""

    def test_add_days_across_year_end(self) -> None:
        assert LogicalDate(2024, 12, 30).add_days(3) == LogicalDate(2025, 1, 2)

    def test_add_negative_days(self) -> None:
        assert LogicalDate(2024, 3, 1).add_days(-1) == LogicalDate(2024, 2, 29)

    def test_add_months_clamps_to_month_end(self) -> None:
        assert LogicalDate(2025, 1, 31).add_months(1) == LogicalDate(2025, 2, 28)
        assert LogicalDate(2024, 1, 31).add_months(1) == LogicalDate(2024, 2, 29)
        assert LogicalDate(2025, 3, 31).add_months(1) == LogicalDate(2025, 4, 30)

    def test_add_months_across_years(self) -> None:
        assert LogicalDate(2025, 11, 15).add_months(3) == LogicalDate(2026, 2, 15)
        assert LogicalDate(2025, 1, 15).add_months(-2) == LogicalDate(2024, 11, 15)

    def test_add_months_does_not_mutate(self) -> None:
        date = LogicalDate(2025, 1, 31)
        date.add_months(1)
        assert date == LogicalDate(2025, 1, 31)

    def test_add_years_leap_day(self) -> None:
        assert LogicalDate(2024, 2, 29).add_years(1) == LogicalDate(2025, 2, 28)
        assert LogicalDate(2024, 2, 29).add_years(4) == LogicalDate(2028, 2, 29)

    def test_days_until(self) -> None:
        assert LogicalDate(2025, 1, 1).days_until(LogicalDate(2025, 3, 1)) == 59
        assert LogicalDate(2025, 3, 1).days_until(LogicalDate(2025, 1, 1)) == -59

    def test_overflow_is_calendar_error(self) -> None:
        with pytest.raises(InvalidCalendarDate):
            LogicalDate(9999, 12, 31).add_days(1)
        with pytest.raises(InvalidCalendarDate):
            LogicalDate(9999, 12, 31).add_months(1)


class TestCalendar:
    """Test weekday and month helpers."""

    @pytest.mark.parametrize(
        ("value", "weekday"),
        [("2025-01-06", 1), ("2025-01-01", 3), ("2025-01-04", 6), ("2025-01-05", 7)],
    )
    def test_day_of_week_is_iso(self, value: str, weekday: int) -> None:
        assert LogicalDate.from_string(value).day_of_week == weekday

    def test_days_in_month(self) -> None:
        assert LogicalDate(2024, 2, 1).days_in_month == 29
        assert LogicalDate(2025, 2, 1).days_in_month == 28
        assert LogicalDate(2025, 4, 1).days_in_month == 30

    def test_end_of_month(self) -> None:
        assert LogicalDate(2025, 2, 10).end_of_month() == LogicalDate(2025, 2, 28)
        assert LogicalDate(2025, 2, 28).is_end_of_month()
        assert not LogicalDate(2025, 2, 27).is_end_of_month()

    def test_with_day_clamps(self) -> None:
        assert LogicalDate(2025, 4, 1).with_day(31) == LogicalDate(2025, 4, 30)
        assert LogicalDate(2025, 4, 1).with_day(12) == LogicalDate(2025, 4, 12)


class TestComparison:
    """Test ordering and equality."""

    def test_structural_equality_and_hash(self) -> None:
        a = LogicalDate.from_string("2025-06-01")
        b = LogicalDate(2025, 6, 1)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_total_order(self) -> None:
        dates = [LogicalDate(2025, 2, 1), LogicalDate(2024, 12, 31), LogicalDate(2025, 1, 31)]
        assert sorted(dates) == [LogicalDate(2024, 12, 31), LogicalDate(2025, 1, 31), LogicalDate(2025, 2, 1)]

    def test_compare(self) -> None:
        early, late = LogicalDate(2025, 1, 1), LogicalDate(2025, 1, 2)
        assert early.compare(late) == -1
        assert late.compare(early) == 1
        assert early.compare(LogicalDate(2025, 1, 1)) == 0
        assert early.is_before(late) and late.is_after(early)
        assert early.is_on_or_before(early) and early.is_on_or_after(early)

    def test_immutable(self) -> None:
        date = LogicalDate(2025, 1, 1)
        with pytest.raises(AttributeError):
            date.day = 2  # type: ignore[misc]

    def test_to_date(self) -> None:
        assert LogicalDate(2025, 1, 2).to_date() == datetime.date(2025, 1, 2)
        assert LogicalDate.from_date(datetime.date(2025, 1, 2)) == LogicalDate(2025, 1, 2)
