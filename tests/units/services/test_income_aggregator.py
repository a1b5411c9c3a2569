"""Unit tests for the IncomeAggregator."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

from budget_tracker.models.transactions import TransactionType
from budget_tracker.services.income import IncomeAggregator
from tests.units.conftest import InMemoryTransactionsRepository


def test_total_income_delegates_to_the_ledger() -> None:
    """Tests that the window is passed through unchanged."""
    transactions_repo = MagicMock()
    transactions_repo.get_total_income.return_value = Decimal("10000.00")
    aggregator = IncomeAggregator(transactions_repo)

    total = aggregator.total_income("user-1", date(2024, 1, 1), date(2024, 1, 31))

    assert total == Decimal("10000.00")
    transactions_repo.get_total_income.assert_called_once_with("user-1", date(2024, 1, 1), date(2024, 1, 31))


def test_income_is_recognized_strictly_inside_the_window(
    transactions_repo: InMemoryTransactionsRepository, january_income: None
) -> None:
    """Tests that income outside the window never counts, including the day after it."""
    transactions_repo.add("user-1", "999", TransactionType.INCOME, "Salary", datetime(2023, 12, 31, 23, 59))
    transactions_repo.add("user-1", "888", TransactionType.INCOME, "Salary", datetime(2024, 2, 1, 0, 0))
    transactions_repo.add("user-1", "50", TransactionType.EXPENSE, "Food & Dining", datetime(2024, 1, 10))
    transactions_repo.add("user-2", "777", TransactionType.INCOME, "Salary", datetime(2024, 1, 10))
    aggregator = IncomeAggregator(transactions_repo)

    total = aggregator.total_income("user-1", date(2024, 1, 1), date(2024, 1, 31))

    assert total == Decimal("10000.00")


def test_income_on_the_last_evening_of_the_window_counts(transactions_repo: InMemoryTransactionsRepository) -> None:
    """Tests that the window end is inclusive for the whole day."""
    transactions_repo.add("user-1", "1200", TransactionType.INCOME, "Bonus", datetime(2024, 1, 31, 23, 30))
    aggregator = IncomeAggregator(transactions_repo)

    assert aggregator.total_income("user-1", date(2024, 1, 1), date(2024, 1, 31)) == Decimal("1200.00")


def test_no_income_is_zero(transactions_repo: InMemoryTransactionsRepository) -> None:
    """Tests that a user without income has a zero total."""
    aggregator = IncomeAggregator(transactions_repo)

    assert aggregator.total_income("user-1", date(2024, 1, 1), date(2024, 1, 31)) == Decimal("0.00")
