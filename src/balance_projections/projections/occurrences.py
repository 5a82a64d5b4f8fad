from collections.abc import Iterator

from balance_projections.errors import InvalidCalendarDate, InvalidRange
from balance_projections.projections.recurrence import RecurrenceRule
from balance_projections.utils.logical_date import LogicalDate


def check_window(window_start: LogicalDate, window_end: LogicalDate) -> None:
    if window_end < window_start:
        raise InvalidRange(f"Window end {window_end} is before window start {window_start}")


def _period_start(rule: RecurrenceRule, anchor_date: LogicalDate, index: int) -> LogicalDate | None:
    try:
        return rule.period_start(anchor_date, index)
    except InvalidCalendarDate:
        # Starts after 9999-12-31, so after any window
        return None


def iter_occurrences(
    rule: RecurrenceRule,
    anchor_date: LogicalDate,
    window_start: LogicalDate,
    window_end: LogicalDate,
) -> Iterator[LogicalDate]:
    """Lazily yield the occurrences of ``rule`` inside ``[window_start, window_end]``.

    The anchor is always the first occurrence. Occurrences after ``rule.end_date`` are
    dropped, and ``rule.occurrences`` is counted from the anchor onwards, including
    occurrences before the window. Iteration stops at the first period starting after
    the window (or the end date), so the sequence is finite even for open-ended rules.
    """
    check_window(window_start, window_end)

    limit = window_end if rule.end_date is None else min(window_end, rule.end_date)
    if anchor_date > limit:
        return

    # Without a cap nothing before the window needs counting
    index = 0 if rule.occurrences is not None else max(0, rule.period_index(anchor_date, window_start))
    count = 0

    while True:
        period_start = _period_start(rule, anchor_date, index)
        if period_start is None or period_start > limit:
            return

        dates = rule.period_dates(anchor_date, index)
        if index == 0:
            dates = sorted({anchor_date, *(date for date in dates if date > anchor_date)})

        for date in dates:
            if date > limit:
                return
            count += 1
            if rule.occurrences is not None and count > rule.occurrences:
                return
            if date >= window_start:
                yield date

        index += 1


def generate_occurrences(
    rule: RecurrenceRule,
    anchor_date: LogicalDate,
    window_start: LogicalDate,
    window_end: LogicalDate,
) -> list[LogicalDate]:
    return list(iter_occurrences(rule, anchor_date, window_start, window_end))
