from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from balance_projections.errors import InvalidTransaction
from balance_projections.utils.logical_date import LogicalDate
from balance_projections.utils.parsing import read_decimal

AccountKind = Literal["tracked", "external"]


@dataclass(frozen=True)
class Account:
    """An account whose ``initial_balance`` is known at the start of ``balance_as_of``.

    External accounts stand for counterparties (employer, landlord, shop) whose balance
    nobody cares about; they are projected like any other account.
    """

    id: str
    initial_balance: Decimal
    balance_as_of: LogicalDate
    name: str = ""
    kind: AccountKind = "tracked"

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise InvalidTransaction(f"Account id must be a non-empty string, got {self.id!r}")
        try:
            object.__setattr__(self, "initial_balance", read_decimal(self.initial_balance))
        except ValueError as e:
            raise InvalidTransaction(f"Account '{self.id}': {e}") from e
        if not isinstance(self.balance_as_of, LogicalDate):
            raise InvalidTransaction(f"Account '{self.id}': balance_as_of must be a LogicalDate")
        if self.kind not in ("tracked", "external"):
            raise InvalidTransaction(f"Account '{self.id}': kind must be 'tracked' or 'external', got {self.kind!r}")

    @property
    def is_external(self) -> bool:
        return self.kind == "external"
