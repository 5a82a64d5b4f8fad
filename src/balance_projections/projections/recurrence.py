"""Recurrence rules, one class per frequency.

Day selectors only exist on the frequency they apply to: ``WeeklyRule.days_of_week``,
``MonthlyRule.days_of_month`` and ``YearlyRule.months``. All rules share ``interval``,
``end_date`` and ``occurrences``.

A rule divides time after its anchor into numbered periods (days, weeks, months or
years, multiplied by the interval). Period 0 contains the anchor. Each rule knows the
first day of a period, the candidate dates inside it, and which period a date falls in;
``projections.occurrences`` turns that into a bounded occurrence sequence.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import ClassVar

from balance_projections.errors import InvalidCalendarDate, InvalidRecurrenceRule
from balance_projections.utils.logical_date import LogicalDate
from balance_projections.utils.parsing import read_int_set


@dataclass(frozen=True, kw_only=True)
class RecurrenceRule(ABC):
    interval: int = 1
    end_date: LogicalDate | None = None
    occurrences: int | None = None

    frequency: ClassVar[str]
    unit: ClassVar[str] = "periods"

    def __post_init__(self) -> None:
        if not isinstance(self.interval, int) or isinstance(self.interval, bool) or self.interval < 1:
            raise InvalidRecurrenceRule(f"interval must be an integer >= 1, got {self.interval!r}")
        if self.occurrences is not None and (
            not isinstance(self.occurrences, int) or isinstance(self.occurrences, bool) or self.occurrences < 1
        ):
            raise InvalidRecurrenceRule(f"occurrences must be an integer >= 1, got {self.occurrences!r}")
        if self.end_date is not None and not isinstance(self.end_date, LogicalDate):
            raise InvalidRecurrenceRule(f"end_date must be a LogicalDate, got {self.end_date!r}")

    @abstractmethod
    def period_start(self, anchor: LogicalDate, index: int) -> LogicalDate:
        """First calendar day that period ``index`` can contain."""

    @abstractmethod
    def period_dates(self, anchor: LogicalDate, index: int) -> list[LogicalDate]:
        """Candidate dates of period ``index``, ascending and without duplicates."""

    @abstractmethod
    def period_index(self, anchor: LogicalDate, date: LogicalDate) -> int:
        """Index of the period containing ``date``; negative before the anchor's period."""

    def __str__(self) -> str:
        every = self.frequency.lower() if self.interval == 1 else f"every {self.interval} {self.unit}"
        parts = [every]
        if self.end_date is not None:
            parts.append(f"until {self.end_date}")
        if self.occurrences is not None:
            parts.append(f"{self.occurrences} times")
        return ", ".join(parts)


def _selector_set(
    rule: RecurrenceRule, name: str, values: Iterable[int] | int | None, low: int, high: int
) -> frozenset[int] | None:
    try:
        selected = read_int_set(values)
    except ValueError as e:
        raise InvalidRecurrenceRule(f"{name} of {rule.frequency} rule: {e}") from e
    if selected is not None:
        invalid = sorted(value for value in selected if not low <= value <= high)
        if invalid:
            raise InvalidRecurrenceRule(f"{name} values must be in {low}..{high}, got {invalid}")
    return selected


@dataclass(frozen=True, kw_only=True)
class DailyRule(RecurrenceRule):
    frequency: ClassVar[str] = "Daily"
    unit: ClassVar[str] = "days"

    def period_start(self, anchor: LogicalDate, index: int) -> LogicalDate:
        return anchor.add_days(index * self.interval)

    def period_dates(self, anchor: LogicalDate, index: int) -> list[LogicalDate]:
        return [self.period_start(anchor, index)]

    def period_index(self, anchor: LogicalDate, date: LogicalDate) -> int:
        return anchor.days_until(date) // self.interval


@dataclass(frozen=True, kw_only=True)
class WeeklyRule(RecurrenceRule):
    """Every ``interval`` weeks.

    Without ``days_of_week`` the cadence is counted from the anchor itself, so
    ``interval=2`` is a plain bi-weekly schedule. With ``days_of_week`` every selected
    ISO weekday of each active Monday-to-Sunday week is an occurrence.
    """

    days_of_week: frozenset[int] | None = field(default=None)

    frequency: ClassVar[str] = "Weekly"
    unit: ClassVar[str] = "weeks"

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "days_of_week", _selector_set(self, "days_of_week", self.days_of_week, 1, 7))

    def _first_day(self, anchor: LogicalDate) -> LogicalDate:
        if self.days_of_week is None:
            return anchor
        return anchor.add_days(1 - anchor.day_of_week)

    def period_start(self, anchor: LogicalDate, index: int) -> LogicalDate:
        return self._first_day(anchor).add_days(7 * self.interval * index)

    def period_dates(self, anchor: LogicalDate, index: int) -> list[LogicalDate]:
        start = self.period_start(anchor, index)
        if self.days_of_week is None:
            return [start]
        dates = []
        for weekday in sorted(self.days_of_week):
            try:
                dates.append(start.add_days(weekday - 1))
            except InvalidCalendarDate:
                # The last supported week ends on a Friday
                break
        return dates

    def period_index(self, anchor: LogicalDate, date: LogicalDate) -> int:
        return self._first_day(anchor).days_until(date) // (7 * self.interval)


def _months_between(start: LogicalDate, end: LogicalDate) -> int:
    return (end.year - start.year) * 12 + end.month - start.month


@dataclass(frozen=True, kw_only=True)
class MonthlyRule(RecurrenceRule):
    """Every ``interval`` months.

    Without ``days_of_month`` the anchor's day is repeated, clamped to the month's
    last day. Selected days beyond the month's length are clamped as well, so
    ``{30, 31}`` yields a single occurrence at the end of February.
    """

    days_of_month: frozenset[int] | None = field(default=None)

    frequency: ClassVar[str] = "Monthly"
    unit: ClassVar[str] = "months"

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "days_of_month", _selector_set(self, "days_of_month", self.days_of_month, 1, 31))

    def period_start(self, anchor: LogicalDate, index: int) -> LogicalDate:
        return LogicalDate(anchor.year, anchor.month, 1).add_months(index * self.interval)

    def period_dates(self, anchor: LogicalDate, index: int) -> list[LogicalDate]:
        if self.days_of_month is None:
            return [anchor.add_months(index * self.interval)]
        start = self.period_start(anchor, index)
        return sorted({start.with_day(day) for day in self.days_of_month})

    def period_index(self, anchor: LogicalDate, date: LogicalDate) -> int:
        return _months_between(anchor, date) // self.interval


@dataclass(frozen=True, kw_only=True)
class YearlyRule(RecurrenceRule):
    """Every ``interval`` years, on the anchor's day in each selected month (anchor's month by default)."""

    months: frozenset[int] | None = field(default=None)

    frequency: ClassVar[str] = "Yearly"
    unit: ClassVar[str] = "years"

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "months", _selector_set(self, "months", self.months, 1, 12))

    def period_start(self, anchor: LogicalDate, index: int) -> LogicalDate:
        return LogicalDate(anchor.year, 1, 1).add_years(index * self.interval)

    def period_dates(self, anchor: LogicalDate, index: int) -> list[LogicalDate]:
        if self.months is None:
            return [anchor.add_years(index * self.interval)]
        year = anchor.year + index * self.interval
        return [LogicalDate(year, month, 1).with_day(anchor.day) for month in sorted(self.months)]

    def period_index(self, anchor: LogicalDate, date: LogicalDate) -> int:
        return (date.year - anchor.year) // self.interval
