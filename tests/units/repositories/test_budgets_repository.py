"""Unit tests for BudgetsRepository."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from budget_tracker.models.budgets import (
    Budget,
    BudgetCategory,
    BudgetPeriod,
    NewBudget,
    NotificationSettings,
)
from budget_tracker.repositories.budgets import BudgetsRepository
from sqlalchemy import Engine


@pytest.fixture
def mock_engine() -> MagicMock:
    """Mock the SQLAlchemy engine."""
    return MagicMock(spec=Engine)


@pytest.fixture
def mock_connection(mock_engine: MagicMock) -> MagicMock:
    """Mock the database connection."""
    connection = MagicMock()
    mock_engine.connect.return_value.__enter__.return_value = connection
    return connection


@pytest.fixture
def repository(mock_engine: MagicMock) -> BudgetsRepository:
    """Create a BudgetsRepository instance."""
    return BudgetsRepository(mock_engine)


def _row(**overrides: Any) -> dict[str, Any]:
    now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    row = {
        "id": uuid4(),
        "user_id": "user-1",
        "category": "Food & Dining",
        "amount": Decimal("3000.00"),
        "period": "monthly",
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 1, 31),
        "notifications_enabled": True,
        "notifications_threshold": 80,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def _budget(row: dict[str, Any]) -> Budget:
    return Budget.model_validate({key: value for key, value in row.items() if not key.startswith("notifications_")})


def _executed(mock_connection: MagicMock) -> tuple[str, dict[str, Any]]:
    sql, params = mock_connection.execute.call_args.args
    return str(sql), params


def test_get_budgets_maps_rows_to_models(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test that rows are converted into budgets with nested notifications."""
    mock_connection.execute.return_value.mappings.return_value.all.return_value = [
        _row(notifications_enabled=False, notifications_threshold=90)
    ]

    budgets = repository.get_budgets("user-1")

    assert len(budgets) == 1
    assert budgets[0].category is BudgetCategory.FOOD_AND_DINING
    assert budgets[0].notifications == NotificationSettings(enabled=False, threshold=90)
    sql, params = _executed(mock_connection)
    assert "WHERE user_id = :user_id" in sql
    assert "period = :period" not in sql
    assert sql.rstrip().endswith("ORDER BY start_date, created_at;")
    assert params == {"user_id": "user-1"}


def test_get_budgets_filters_by_period(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test that the period filter is added to the query."""
    mock_connection.execute.return_value.mappings.return_value.all.return_value = []

    assert repository.get_budgets("user-1", BudgetPeriod.WEEKLY) == []

    sql, params = _executed(mock_connection)
    assert "AND period = :period" in sql
    assert params == {"user_id": "user-1", "period": "weekly"}


def test_get_budget_is_scoped_to_the_owner(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test that fetching one budget filters by id and owner."""
    budget_id = uuid4()
    mock_connection.execute.return_value.mappings.return_value.one_or_none.return_value = _row(id=budget_id)

    budget = repository.get_budget("user-1", budget_id)

    assert budget is not None and budget.id == budget_id
    sql, params = _executed(mock_connection)
    assert "WHERE id = :budget_id AND user_id = :user_id" in sql
    assert params == {"budget_id": budget_id, "user_id": "user-1"}


def test_get_budget_returns_none_when_missing(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test that a missing row yields None."""
    mock_connection.execute.return_value.mappings.return_value.one_or_none.return_value = None

    assert repository.get_budget("user-1", uuid4()) is None


def test_get_total_allocated_for_all_budgets(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test the unwindowed allocation sum."""
    mock_connection.execute.return_value.scalar_one_or_none.return_value = Decimal("4500")

    total = repository.get_total_allocated("user-1")

    assert total == Decimal("4500.00")
    sql, params = _executed(mock_connection)
    assert "COALESCE(SUM(amount), 0)" in sql
    assert "start_date <=" not in sql
    assert params == {"user_id": "user-1"}


def test_get_total_allocated_for_overlapping_window(
    repository: BudgetsRepository, mock_connection: MagicMock
) -> None:
    """Test that a window restricts the sum to overlapping budgets and excludes the updated one."""
    excluded = uuid4()
    mock_connection.execute.return_value.scalar_one_or_none.return_value = None

    total = repository.get_total_allocated(
        "user-1", date(2024, 1, 1), date(2024, 1, 31), excluding_budget_id=excluded
    )

    assert total == Decimal("0.00")
    sql, params = _executed(mock_connection)
    assert "AND start_date <= :end_date AND end_date >= :start_date" in sql
    assert "AND id <> :excluding_budget_id" in sql
    assert params == {
        "user_id": "user-1",
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 1, 31),
        "excluding_budget_id": excluded,
    }


def test_find_overlapping_returns_first_conflict(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test the same-category overlap lookup."""
    conflicting_id = uuid4()
    mock_connection.execute.return_value.mappings.return_value.first.return_value = _row(id=conflicting_id)

    budget = repository.find_overlapping(
        "user-1", BudgetCategory.FOOD_AND_DINING, date(2024, 1, 15), date(2024, 2, 15)
    )

    assert budget is not None and budget.id == conflicting_id
    sql, params = _executed(mock_connection)
    assert "category = :category" in sql
    assert "id <> :excluding_budget_id" not in sql
    assert sql.endswith("LIMIT 1;")
    assert params["category"] == "Food & Dining"


def test_find_overlapping_returns_none_without_conflict(
    repository: BudgetsRepository, mock_connection: MagicMock
) -> None:
    """Test that no overlapping row yields None."""
    mock_connection.execute.return_value.mappings.return_value.first.return_value = None

    result = repository.find_overlapping(
        "user-1", BudgetCategory.TRANSPORT, date(2024, 1, 1), date(2024, 1, 31), excluding_budget_id=uuid4()
    )

    assert result is None
    sql, _ = _executed(mock_connection)
    assert "AND id <> :excluding_budget_id" in sql


def test_save_budget_inserts_and_commits(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test that a new budget is inserted with its notification settings."""
    mock_connection.execute.return_value.mappings.return_value.one.return_value = _row(amount=Decimal("1500.00"))
    new_budget = NewBudget(
        category=BudgetCategory.FOOD_AND_DINING,
        amount=Decimal("1500"),
        period=BudgetPeriod.MONTHLY,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )

    budget = repository.save_budget("user-1", new_budget, NotificationSettings(threshold=75))

    assert budget.amount == Decimal("1500.00")
    sql, params = _executed(mock_connection)
    assert "INSERT INTO budgets" in sql
    assert "RETURNING" in sql
    assert params["category"] == "Food & Dining"
    assert params["period"] == "monthly"
    assert params["notifications_enabled"] is True
    assert params["notifications_threshold"] == 75
    mock_connection.commit.assert_called_once()


def test_save_budget_writes_the_amount_in_cents(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test that the inserted amount is the half-up cents value the validator checked."""
    mock_connection.execute.return_value.mappings.return_value.one.return_value = _row(amount=Decimal("10.01"))
    new_budget = NewBudget(
        category=BudgetCategory.FOOD_AND_DINING,
        amount=Decimal("10.005"),
        period=BudgetPeriod.MONTHLY,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )

    repository.save_budget("user-1", new_budget, NotificationSettings())

    _, params = _executed(mock_connection)
    assert params["amount"] == Decimal("10.01")


def test_update_budget_targets_owner_row(repository: BudgetsRepository, mock_connection: MagicMock) -> None:
    """Test that an update writes every mutable column and refreshes updated_at."""
    row = _row(amount=Decimal("2000.00"))
    mock_connection.execute.return_value.mappings.return_value.one_or_none.return_value = row
    budget = _budget(row)

    updated = repository.update_budget(budget)

    assert updated is not None and updated.amount == Decimal("2000.00")
    sql, params = _executed(mock_connection)
    assert "updated_at = NOW()" in sql
    assert "WHERE id = :budget_id AND user_id = :user_id" in sql
    assert params["budget_id"] == row["id"]
    assert params["amount"] == Decimal("2000.00")
    mock_connection.commit.assert_called_once()


def test_update_budget_returns_none_when_row_vanished(
    repository: BudgetsRepository, mock_connection: MagicMock
) -> None:
    """Test that updating a deleted budget yields None."""
    mock_connection.execute.return_value.mappings.return_value.one_or_none.return_value = None
    assert repository.update_budget(_budget(_row())) is None


@pytest.mark.parametrize("rowcount, expected", [(1, True), (0, False)])
def test_delete_budget_reports_whether_a_row_matched(
    repository: BudgetsRepository, mock_connection: MagicMock, rowcount: int, expected: bool
) -> None:
    """Test the delete result based on the affected row count."""
    mock_connection.execute.return_value.rowcount = rowcount
    budget_id = uuid4()

    assert repository.delete_budget("user-1", budget_id) is expected

    sql, params = _executed(mock_connection)
    assert sql.startswith("DELETE FROM budgets")
    assert params == {"budget_id": budget_id, "user_id": "user-1"}
    mock_connection.commit.assert_called_once()
