import datetime
from collections.abc import Iterable
from dataclasses import dataclass

from balance_projections.errors import InvalidRecurrenceRule
from balance_projections.projections.recurrence import DailyRule, MonthlyRule, RecurrenceRule, WeeklyRule, YearlyRule
from balance_projections.utils.base_registry import BaseRegistry
from balance_projections.utils.logical_date import LogicalDate
from balance_projections.utils.parsing import read_optional_date


@dataclass(frozen=True)
class Frequency:
    rule_type: type[RecurrenceRule]
    interval_multiplier: int = 1
    selector: str | None = None


class FrequencyRegistry(BaseRegistry[Frequency]):
    pass


FrequencyRegistry.register("Daily", Frequency(DailyRule))
FrequencyRegistry.register("Weekly", Frequency(WeeklyRule, selector="days_of_week"))
FrequencyRegistry.register("Biweekly", Frequency(WeeklyRule, 2, selector="days_of_week"), aliases=["Fortnightly"])
FrequencyRegistry.register("Monthly", Frequency(MonthlyRule, selector="days_of_month"))
FrequencyRegistry.register("Yearly", Frequency(YearlyRule, selector="months"), aliases=["Annual", "Annually"])

_SELECTORS = ("days_of_week", "days_of_month", "months")


def build_rule(
    frequency: str,
    interval: int = 1,
    days_of_week: int | Iterable[int] | None = None,
    days_of_month: int | Iterable[int] | None = None,
    months: int | Iterable[int] | None = None,
    end_date: str | datetime.date | LogicalDate | None = None,
    occurrences: int | None = None,
) -> RecurrenceRule:
    """Build the rule for a frequency name such as ``"monthly"`` or ``"bi-weekly"``.

    Selectors that do not belong to the frequency are rejected rather than ignored.
    """
    try:
        freq = FrequencyRegistry.get(frequency)
    except ValueError as e:
        raise InvalidRecurrenceRule(str(e)) from e

    selectors = {"days_of_week": days_of_week, "days_of_month": days_of_month, "months": months}
    misplaced = [name for name in _SELECTORS if selectors[name] is not None and name != freq.selector]
    if misplaced:
        raise InvalidRecurrenceRule(
            f"{', '.join(misplaced)} cannot be used with frequency '{FrequencyRegistry.canonical_name(frequency)}'"
        )

    if not isinstance(interval, int) or isinstance(interval, bool):
        raise InvalidRecurrenceRule(f"interval must be an integer >= 1, got {interval!r}")

    kwargs = {}
    if freq.selector is not None and selectors[freq.selector] is not None:
        kwargs[freq.selector] = selectors[freq.selector]

    try:
        parsed_end_date = read_optional_date(end_date)
    except ValueError as e:
        raise InvalidRecurrenceRule(f"Invalid end_date: {e}") from e

    return freq.rule_type(
        interval=interval * freq.interval_multiplier,
        end_date=parsed_end_date,
        occurrences=occurrences,
        **kwargs,
    )
