"""Scenario files: accounts and transactions described in YAML.

Example::

    accounts:
      - {id: checking, name: Checking, initial_balance: 5000, balance_as_of: 2025-01-01}
      - {id: landlord, kind: external, balance_as_of: 2025-01-01}
    transactions:
      - id: rent
        from_account: checking
        to_account: landlord
        amount: 100
        date: 2025-01-15
        recurrence: {frequency: monthly, day_of_month: 15}
"""

import datetime
from decimal import Decimal
from pathlib import Path

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict

from balance_projections.financials.account import Account, AccountKind
from balance_projections.financials.transaction import Transaction
from balance_projections.projections.frequency import build_rule
from balance_projections.projections.projection import Projection
from balance_projections.projections.recurrence import RecurrenceRule
from balance_projections.utils.logical_date import LogicalDate
from balance_projections.utils.parsing import read_date

DateInput = datetime.date | str


class RecurrenceInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    frequency: str
    interval: int = 1
    day_of_week: int | list[int] | None = None
    day_of_month: int | list[int] | None = None
    month: int | list[int] | None = None
    end_date: DateInput | None = None
    occurrences: int | None = None

    def to_rule(self) -> RecurrenceRule:
        return build_rule(
            self.frequency,
            interval=self.interval,
            days_of_week=self.day_of_week,
            days_of_month=self.day_of_month,
            months=self.month,
            end_date=self.end_date,
            occurrences=self.occurrences,
        )


class AccountInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str = ""
    kind: AccountKind = "tracked"
    initial_balance: Decimal = Decimal(0)
    balance_as_of: DateInput

    def to_account(self) -> Account:
        return Account(
            id=self.id,
            initial_balance=self.initial_balance,
            balance_as_of=read_date(self.balance_as_of),
            name=self.name or self.id,
            kind=self.kind,
        )


class TransactionInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    from_account: str
    to_account: str
    amount: Decimal
    date: DateInput
    settlement_days: int = 0
    description: str = ""
    recurrence: RecurrenceInput | None = None

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.id,
            from_account_id=self.from_account,
            to_account_id=self.to_account,
            amount=self.amount,
            date=read_date(self.date),
            settlement_days=self.settlement_days,
            recurrence=None if self.recurrence is None else self.recurrence.to_rule(),
            description=self.description,
        )


class ScenarioFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    accounts: list[AccountInput]
    transactions: list[TransactionInput] = []

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ScenarioFile":
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        scenario = cls.model_validate(data)
        logger.info(
            "Loaded {accounts} account(s) and {transactions} transaction(s) from {path}",
            accounts=len(scenario.accounts),
            transactions=len(scenario.transactions),
            path=path,
        )
        return scenario

    def earliest_balance_date(self) -> LogicalDate | None:
        dates = [read_date(account.balance_as_of) for account in self.accounts]
        return min(dates) if dates else None

    def to_projection(self) -> Projection:
        transactions = [item.to_transaction() for item in self.transactions]
        return Projection(
            [item.to_account() for item in self.accounts],
            [transaction for transaction in transactions if not transaction.is_recurring],
            [transaction for transaction in transactions if transaction.is_recurring],
        )
