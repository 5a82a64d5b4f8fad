import datetime
import time
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import polars as pl
from loguru import logger

from balance_projections.errors import AccountNotFound, InvalidTransaction
from balance_projections.financials.account import Account
from balance_projections.financials.transaction import Transaction
from balance_projections.projections.occurrences import check_window, iter_occurrences
from balance_projections.utils.logging import log_context
from balance_projections.utils.logical_date import LogicalDate

_FIRST_DAY = LogicalDate.from_date(datetime.date.min)


@dataclass(frozen=True)
class ProjectionPoint:
    account_id: str
    date: LogicalDate
    balance: Decimal
    previous_balance: Decimal
    transaction_ids: tuple[str, ...] = ()

    @property
    def change(self) -> Decimal:
        return self.balance - self.previous_balance


@dataclass
class _DayEvents:
    amount: Decimal = Decimal(0)
    transaction_ids: list[str] = field(default_factory=list)

    def add(self, amount: Decimal, transaction_id: str) -> None:
        self.amount += amount
        if transaction_id not in self.transaction_ids:
            self.transaction_ids.append(transaction_id)


@dataclass
class ProjectionResult:
    points: list[ProjectionPoint]
    window_start: LogicalDate
    window_end: LogicalDate
    run_info: dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.points)

    def for_account(self, account_id: str) -> list[ProjectionPoint]:
        return [point for point in self.points if point.account_id == account_id]

    def final_balances(self) -> dict[str, Decimal]:
        balances = {}
        for point in self.points:
            balances[point.account_id] = point.balance
        return balances

    def balance_on(self, account_id: str, date: LogicalDate) -> Decimal:
        """Balance at the end of ``date``, read from the last point on or before it."""
        if not self.window_start <= date <= self.window_end:
            raise ValueError(f"{date} is outside the projected window {self.window_start} - {self.window_end}")
        balance = None
        for point in self.for_account(account_id):
            if point.date > date:
                break
            balance = point.balance
        if balance is None:
            raise AccountNotFound(f"Account '{account_id}' is not part of this projection")
        return balance

    def to_daily(self) -> "ProjectionResult":
        """One point per account per calendar day of the window, carrying balances forward."""
        by_account: dict[str, dict[LogicalDate, ProjectionPoint]] = defaultdict(dict)
        for point in self.points:
            by_account[point.account_id][point.date] = point

        daily = []
        last_balance: dict[str, Decimal] = {}
        for offset in range(self.window_start.days_until(self.window_end) + 1):
            date = self.window_start.add_days(offset)
            for account_id, points in by_account.items():
                point = points.get(date)
                if point is None:
                    balance = last_balance[account_id]
                    point = ProjectionPoint(account_id, date, balance, balance)
                last_balance[account_id] = point.balance
                daily.append(point)

        return ProjectionResult(daily, self.window_start, self.window_end, dict(self.run_info, Daily=True))

    def to_frame(self) -> pl.DataFrame:
        amounts = [value for point in self.points for value in (point.balance, point.previous_balance)]
        scale = max([_scale(value) for value in amounts], default=2)
        quantum = Decimal(1).scaleb(-scale)
        decimal_type = pl.Decimal(precision=38, scale=scale)

        return pl.DataFrame(
            {
                "AccountId": [point.account_id for point in self.points],
                "Date": [point.date.to_date() for point in self.points],
                "Balance": [point.balance.quantize(quantum) for point in self.points],
                "PreviousBalance": [point.previous_balance.quantize(quantum) for point in self.points],
                "Change": [point.change.quantize(quantum) for point in self.points],
                "Transactions": [";".join(point.transaction_ids) for point in self.points],
            },
            schema={
                "AccountId": pl.Utf8,
                "Date": pl.Date,
                "Balance": decimal_type,
                "PreviousBalance": decimal_type,
                "Change": decimal_type,
                "Transactions": pl.Utf8,
            },
        )

    def to_csv(self, file_path: str | Path) -> Path:
        file_path = Path(datetime.datetime.now().strftime(str(file_path)))
        file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing {points} projection points to {file_path}", points=len(self.points), file_path=file_path)
        self.to_frame().write_csv(file_path)
        return file_path


def _scale(value: Decimal) -> int:
    exponent = value.as_tuple().exponent
    return max(-exponent, 0) if isinstance(exponent, int) else 0


class Projection:
    """Projects account balances from one-time and recurring transactions.

    The instance only holds the snapshot it was given; ``run`` has no side effects,
    so the same projection can be run for several windows or account filters.
    """

    def __init__(
        self,
        accounts: Iterable[Account],
        one_time_transactions: Iterable[Transaction] = (),
        recurring_transactions: Iterable[Transaction] = (),
    ):
        self.accounts = list(accounts)
        self.one_time_transactions = list(one_time_transactions)
        self.recurring_transactions = list(recurring_transactions)

    def run(
        self,
        window_start: LogicalDate,
        window_end: LogicalDate,
        account_id: str | None = None,
    ) -> ProjectionResult:
        """Run the projection for ``[window_start, window_end]``.

        Parameters
        ----------
        window_start, window_end : LogicalDate
            Inclusive window; the first point of every account is on ``window_start``.
        account_id : str | None
            Restrict the output to one account. ``None`` projects every account.

        Returns
        -------
        ProjectionResult
            Sparse series: the window-start point plus one point per date on which
            events land for the account. A date whose events net to zero, such as a
            self-transfer, still gets a point with ``change == 0`` and the ids of the
            transactions involved.
        """
        start_time = time.perf_counter()
        check_window(window_start, window_end)
        accounts = self._validate(account_id)
        scope = [accounts[account_id]] if account_id is not None else list(accounts.values())
        scope_ids = {account.id for account in scope}

        with log_context(f"Projection {window_start} - {window_end}"):
            events: dict[str, dict[LogicalDate, _DayEvents]] = {
                account.id: defaultdict(_DayEvents) for account in scope
            }
            occurrence_count = 0

            for transaction in self.one_time_transactions + self.recurring_transactions:
                sides = {transaction.from_account_id, transaction.to_account_id} & scope_ids
                if not sides:
                    continue
                fold_start = min([window_start, *(accounts[side].balance_as_of for side in sides)])
                nominal_dates = self._nominal_dates(transaction, fold_start, window_end)
                occurrence_count += len(nominal_dates)

                for nominal_date in nominal_dates:
                    effective_date = transaction.effective_date(nominal_date)
                    for side, amount in (
                        (transaction.from_account_id, -transaction.amount),
                        (transaction.to_account_id, transaction.amount),
                    ):
                        if side in scope_ids and effective_date >= accounts[side].balance_as_of:
                            events[side][effective_date].add(amount, transaction.id)

            points = []
            for order, account in enumerate(scope):
                for point in self._fold(account, events[account.id], window_start, window_end):
                    points.append((point.date, order, point))
            points.sort(key=lambda item: (item[0], item[1]))

            result = ProjectionResult(
                [point for _, _, point in points],
                window_start,
                window_end,
                run_info={
                    "WindowStart": str(window_start),
                    "WindowEnd": str(window_end),
                    "Accounts": len(scope),
                    "Transactions": len(self.one_time_transactions) + len(self.recurring_transactions),
                    "Occurrences": occurrence_count,
                    "Points": len(points),
                    "RunTimeSeconds": time.perf_counter() - start_time,
                },
            )
            logger.info(
                "Projected {accounts} account(s) with {occurrences} transaction occurrence(s) into {points} point(s)",
                accounts=len(scope),
                occurrences=occurrence_count,
                points=len(points),
            )
        return result

    def _validate(self, account_id: str | None) -> dict[str, Account]:
        accounts: dict[str, Account] = {}
        for account in self.accounts:
            if account.id in accounts:
                raise InvalidTransaction(f"Account '{account.id}' is defined more than once")
            accounts[account.id] = account

        if account_id is not None and account_id not in accounts:
            raise AccountNotFound(f"Account '{account_id}' does not exist")

        for transactions, recurring in ((self.one_time_transactions, False), (self.recurring_transactions, True)):
            for transaction in transactions:
                if transaction.is_recurring != recurring:
                    kind = "Recurring" if recurring else "One-time"
                    raise InvalidTransaction(
                        f"{kind} transaction '{transaction.id}' {'has no' if recurring else 'has a'} recurrence rule"
                    )
                for side in (transaction.from_account_id, transaction.to_account_id):
                    if side not in accounts:
                        raise InvalidTransaction(f"Transaction '{transaction.id}' references unknown account '{side}'")
        return accounts

    @staticmethod
    def _nominal_dates(
        transaction: Transaction, fold_start: LogicalDate, window_end: LogicalDate
    ) -> list[LogicalDate]:
        """Nominal dates whose effective date falls in ``[fold_start, window_end]``."""
        lag = transaction.settlement_days
        if lag > _FIRST_DAY.days_until(window_end):
            return []
        start = fold_start.add_days(-min(lag, _FIRST_DAY.days_until(fold_start)))
        end = window_end.add_days(-lag)
        if transaction.recurrence is None:
            return [transaction.date] if start <= transaction.date <= end else []

        dates = list(iter_occurrences(transaction.recurrence, transaction.date, start, end))
        logger.debug(
            "Expanded {transaction} ({rule}) into {count} occurrence(s)",
            transaction=transaction.id,
            rule=transaction.recurrence,
            count=len(dates),
        )
        return dates

    @staticmethod
    def _fold(
        account: Account,
        events: dict[LogicalDate, _DayEvents],
        window_start: LogicalDate,
        window_end: LogicalDate,
    ) -> list[ProjectionPoint]:
        balance = account.initial_balance
        for date in sorted(date for date in events if date < window_start):
            balance += events[date].amount

        opening = events.get(window_start, _DayEvents())
        points = [
            ProjectionPoint(
                account.id,
                window_start,
                balance + opening.amount,
                balance,
                tuple(opening.transaction_ids),
            )
        ]
        balance += opening.amount

        for date in sorted(date for date in events if window_start < date <= window_end):
            day = events[date]
            points.append(ProjectionPoint(account.id, date, balance + day.amount, balance, tuple(day.transaction_ids)))
            balance += day.amount
        return points


def project(
    accounts: Sequence[Account],
    one_time_transactions: Sequence[Transaction],
    recurring_transactions: Sequence[Transaction],
    account_id: str | None,
    window_start: LogicalDate,
    window_end: LogicalDate,
) -> list[ProjectionPoint]:
    return Projection(accounts, one_time_transactions, recurring_transactions).run(
        window_start, window_end, account_id
    ).points
