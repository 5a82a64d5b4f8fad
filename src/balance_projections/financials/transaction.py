from dataclasses import dataclass
from decimal import Decimal

from balance_projections.errors import InvalidTransaction
from balance_projections.projections.recurrence import RecurrenceRule
from balance_projections.utils.logical_date import LogicalDate
from balance_projections.utils.parsing import read_decimal


@dataclass(frozen=True)
class Transaction:
    """Moves ``amount`` from ``from_account_id`` to ``to_account_id``.

    ``date`` is the nominal date and, for recurring transactions, the anchor of the
    schedule. The balances change ``settlement_days`` later, on the effective date.
    """

    id: str
    from_account_id: str
    to_account_id: str
    amount: Decimal
    date: LogicalDate
    settlement_days: int = 0
    recurrence: RecurrenceRule | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidTransaction(f"Transaction id must be a non-empty string, got {self.id!r}")
        for side in ("from_account_id", "to_account_id"):
            if not isinstance(getattr(self, side), str) or not getattr(self, side):
                raise InvalidTransaction(f"Transaction '{self.id}': {side} must be a non-empty string")
        try:
            object.__setattr__(self, "amount", read_decimal(self.amount))
        except ValueError as e:
            raise InvalidTransaction(f"Transaction '{self.id}': {e}") from e
        if not isinstance(self.date, LogicalDate):
            raise InvalidTransaction(f"Transaction '{self.id}': date must be a LogicalDate")
        if (
            not isinstance(self.settlement_days, int)
            or isinstance(self.settlement_days, bool)
            or self.settlement_days < 0
        ):
            raise InvalidTransaction(
                f"Transaction '{self.id}': settlement_days must be an integer >= 0, got {self.settlement_days!r}"
            )
        if self.recurrence is not None and not isinstance(self.recurrence, RecurrenceRule):
            raise InvalidTransaction(f"Transaction '{self.id}': recurrence must be a RecurrenceRule")

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    def effective_date(self, nominal_date: LogicalDate | None = None) -> LogicalDate:
        """Date on which an occurrence (the template by default) hits the balances."""
        return (self.date if nominal_date is None else nominal_date).add_days(self.settlement_days)
