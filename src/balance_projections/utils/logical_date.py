"""Calendar dates without time-of-day or timezone.

Every date the projection core touches is a ``LogicalDate``. Conversion from
strings and ``datetime`` values happens only at the boundary, through
``LogicalDate.from_string`` (strict) or ``LogicalDate.parse`` (lenient).
"""

import calendar
import datetime
import re
from dataclasses import dataclass

from dateutil.relativedelta import relativedelta

from balance_projections.errors import InvalidCalendarDate, InvalidDateFormat

_ISO_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


@dataclass(frozen=True, order=True)
class LogicalDate:
    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        for name in ("year", "month", "day"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidCalendarDate(f"{name} must be an integer, got {value!r}")
        try:
            datetime.date(self.year, self.month, self.day)
        except ValueError as e:
            raise InvalidCalendarDate(f"{self.year:04d}-{self.month:02d}-{self.day:02d} is not a calendar date") from e

    @classmethod
    def from_string(cls, value: str) -> "LogicalDate":
        """Parse exactly ``YYYY-MM-DD``."""
        match = _ISO_DATE.fullmatch(value) if isinstance(value, str) else None
        if match is None:
            raise InvalidDateFormat(f"Invalid date string format: {value!r}. Expected YYYY-MM-DD format.")
        year, month, day = (int(part) for part in match.groups())
        return cls(year, month, day)

    @classmethod
    def from_date(cls, value: datetime.date) -> "LogicalDate":
        return cls(value.year, value.month, value.day)

    @classmethod
    def parse(cls, value: "str | datetime.date | LogicalDate") -> "LogicalDate":
        """Convert a boundary value to a LogicalDate.

        Accepts a LogicalDate, a ``datetime.date`` or ``datetime.datetime`` (only the
        calendar part is kept) or a string. Strings carrying a time component, such as
        ``2025-01-15T00:00:00Z`` or ``2025-01-15 08:30``, are reduced to their date part.
        """
        if isinstance(value, LogicalDate):
            return value
        if isinstance(value, datetime.datetime):
            return cls.from_date(value.date())
        if isinstance(value, datetime.date):
            return cls.from_date(value)
        if isinstance(value, str):
            date_part = value.strip().split("T")[0].split(" ")[0]
            return cls.from_string(date_part)
        raise InvalidDateFormat(f"Cannot convert {value!r} to a logical date")

    def to_date(self) -> datetime.date:
        return datetime.date(self.year, self.month, self.day)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def to_string(self) -> str:
        return str(self)

    @property
    def day_of_week(self) -> int:
        """ISO weekday, 1 is Monday and 7 is Sunday."""
        return self.to_date().isoweekday()

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def is_end_of_month(self) -> bool:
        return self.day == self.days_in_month

    def end_of_month(self) -> "LogicalDate":
        return LogicalDate(self.year, self.month, self.days_in_month)

    def with_day(self, day: int) -> "LogicalDate":
        """Same month, given day clamped to the length of the month."""
        return LogicalDate(self.year, self.month, min(day, self.days_in_month))

    def add_days(self, days: int) -> "LogicalDate":
        try:
            return LogicalDate.from_date(self.to_date() + datetime.timedelta(days=days))
        except OverflowError as e:
            raise InvalidCalendarDate(f"{self} + {days} days is outside the supported calendar") from e

    def add_months(self, months: int) -> "LogicalDate":
        """Add calendar months, clamping to the last day of a shorter month."""
        try:
            return LogicalDate.from_date(self.to_date() + relativedelta(months=months))
        except ValueError as e:
            raise InvalidCalendarDate(f"{self} + {months} months is outside the supported calendar") from e

    def add_years(self, years: int) -> "LogicalDate":
        return self.add_months(12 * years)

    def days_until(self, other: "LogicalDate") -> int:
        return (other.to_date() - self.to_date()).days

    def compare(self, other: "LogicalDate") -> int:
        if self < other:
            return -1
        if self > other:
            return 1
        return 0

    def is_before(self, other: "LogicalDate") -> bool:
        return self < other

    def is_after(self, other: "LogicalDate") -> bool:
        return self > other

    def is_on_or_before(self, other: "LogicalDate") -> bool:
        return self <= other

    def is_on_or_after(self, other: "LogicalDate") -> bool:
        return self >= other
