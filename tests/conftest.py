import sys
from decimal import Decimal

import pytest
from loguru import logger

from balance_projections.app_config import reset_config
from balance_projections.financials.account import Account
from balance_projections.financials.transaction import Transaction
from balance_projections.projections.recurrence import MonthlyRule
from balance_projections.utils.logical_date import LogicalDate


def d(value: str) -> LogicalDate:
    return LogicalDate.from_string(value)


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test starts from the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def _restore_logger():
    """Undo handler changes made by the command-line runner."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def accounts() -> list[Account]:
    return [
        Account("checking", Decimal("5000"), d("2025-01-01"), name="Checking"),
        Account("savings", Decimal("10000"), d("2025-01-01"), name="Savings"),
        Account("landlord", Decimal("0"), d("2025-01-01"), name="Landlord", kind="external"),
    ]


@pytest.fixture
def rent() -> Transaction:
    return Transaction(
        "rent",
        "checking",
        "landlord",
        Decimal("100"),
        d("2025-01-15"),
        recurrence=MonthlyRule(days_of_month=frozenset([15])),
    )


@pytest.fixture
def scenario_yaml(tmp_path):
    path = tmp_path / "scenario.yaml"
    path.write_text(
        """
accounts:
  - {id: checking, name: Checking, initial_balance: 5000, balance_as_of: 2025-01-01}
  - {id: landlord, kind: external, balance_as_of: 2025-01-01}
  - {id: employer, kind: external, balance_as_of: "2025-01-01"}
transactions:
  - id: rent
    from_account: checking
    to_account: landlord
    amount: 100
    date: 2025-01-15
    recurrence: {frequency: monthly, day_of_month: [15]}
  - id: salary
    from_account: employer
    to_account: checking
    amount: "2500.50"
    date: 2025-01-31
    settlement_days: 2
    description: Monthly salary
    recurrence: {frequency: Monthly}
  - id: bonus
    from_account: employer
    to_account: checking
    amount: 300
    date: 2025-03-10
""",
        encoding="utf-8",
    )
    return path
