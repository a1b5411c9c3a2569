"""This module defines the repository for persisting budgets."""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from budget_tracker.models.base import quantize
from budget_tracker.models.budgets import Budget, BudgetPeriod, NewBudget, NotificationSettings
from budget_tracker.providers.logging import Logger, LoggingProvider
from sqlalchemy import Engine, text

_BUDGET_COLUMNS = """
    id, user_id, category, amount, period, start_date, end_date,
    notifications_enabled, notifications_threshold, created_at, updated_at
"""


class BudgetsRepository:
    """Handles all database operations related to budgets.

    Every query is scoped by user id, so a budget owned by someone else is
    indistinguishable from a missing one.

    Args:
        engine: An SQLAlchemy Engine instance for database communication.
    """

    logger: Logger
    engine: Engine

    def __init__(self, engine: Engine) -> None:
        """Initializes the repository with a database engine.

        Args:
            engine: The SQLAlchemy Engine to be used for all database
                communications.
        """
        self.logger = LoggingProvider().get_logger()
        self.engine = engine

    @staticmethod
    def _to_budget(row: Mapping[str, Any]) -> Budget:
        """Converts a database row into a Budget model.

        Args:
            row: A mapping with the budget columns.

        Returns:
            The Budget model.
        """
        data = dict(row)
        data["notifications"] = NotificationSettings(
            enabled=data.pop("notifications_enabled"),
            threshold=data.pop("notifications_threshold"),
        )
        return Budget.model_validate(data)

    def get_budgets(self, user_id: str, period: BudgetPeriod | None = None) -> list[Budget]:
        """Retrieves all budgets of a user, optionally filtered by period.

        Args:
            user_id: The owner of the budgets.
            period: An optional period filter.

        Returns:
            The budgets ordered by start date.
        """
        query = f"SELECT {_BUDGET_COLUMNS} FROM budgets WHERE user_id = :user_id"
        params: dict[str, Any] = {"user_id": user_id}
        if period:
            query += " AND period = :period"
            params["period"] = period.value
        query += " ORDER BY start_date, created_at;"

        with self.engine.connect() as conn:
            rows = conn.execute(text(query), params).mappings().all()
        self.logger.debug(f"Found {len(rows)} budget(s) for user {user_id}.")
        return [self._to_budget(row) for row in rows]

    def get_budget(self, user_id: str, budget_id: UUID) -> Budget | None:
        """Retrieves a single budget of a user.

        Args:
            user_id: The owner of the budget.
            budget_id: The id of the budget.

        Returns:
            The budget, or None if it does not exist or is owned by someone else.
        """
        sql = text(f"SELECT {_BUDGET_COLUMNS} FROM budgets WHERE id = :budget_id AND user_id = :user_id;")
        with self.engine.connect() as conn:
            row = conn.execute(sql, {"budget_id": budget_id, "user_id": user_id}).mappings().one_or_none()
        return self._to_budget(row) if row else None

    def get_total_allocated(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
        excluding_budget_id: UUID | None = None,
    ) -> Decimal:
        """Calculates the sum of budget amounts of a user.

        Args:
            user_id: The owner of the budgets.
            start_date: When given with `end_date`, only budgets whose window
                overlaps [start_date, end_date] are summed.
            end_date: The last day of the window, inclusive.
            excluding_budget_id: A budget to leave out of the sum, typically
                the one being updated.

        Returns:
            The allocated total, or zero when there are no budgets.
        """
        query = "SELECT COALESCE(SUM(amount), 0) FROM budgets WHERE user_id = :user_id"
        params: dict[str, Any] = {"user_id": user_id}
        if start_date is not None and end_date is not None:
            query += " AND start_date <= :end_date AND end_date >= :start_date"
            params["start_date"] = start_date
            params["end_date"] = end_date
        if excluding_budget_id is not None:
            query += " AND id <> :excluding_budget_id"
            params["excluding_budget_id"] = excluding_budget_id

        with self.engine.connect() as conn:
            result = conn.execute(text(query), params).scalar_one_or_none()
        return quantize(result)

    def find_overlapping(
        self,
        user_id: str,
        category: str,
        start_date: date,
        end_date: date,
        excluding_budget_id: UUID | None = None,
    ) -> Budget | None:
        """Finds a budget of the same category whose window overlaps the given one.

        Args:
            user_id: The owner of the budgets.
            category: The category to look at.
            start_date: The first day of the window.
            end_date: The last day of the window, inclusive.
            excluding_budget_id: A budget to ignore, typically the one being updated.

        Returns:
            The first overlapping budget, or None.
        """
        query = (
            f"SELECT {_BUDGET_COLUMNS} FROM budgets "
            "WHERE user_id = :user_id AND category = :category "
            "AND start_date <= :end_date AND end_date >= :start_date"
        )
        params: dict[str, Any] = {
            "user_id": user_id,
            "category": str(category),
            "start_date": start_date,
            "end_date": end_date,
        }
        if excluding_budget_id is not None:
            query += " AND id <> :excluding_budget_id"
            params["excluding_budget_id"] = excluding_budget_id
        query += " ORDER BY start_date LIMIT 1;"

        with self.engine.connect() as conn:
            row = conn.execute(text(query), params).mappings().first()
        return self._to_budget(row) if row else None

    def save_budget(self, user_id: str, new_budget: NewBudget, notifications: NotificationSettings) -> Budget:
        """Saves a new budget to the database.

        Args:
            user_id: The owner of the budget.
            new_budget: The validated budget payload.
            notifications: The alert preferences, with defaults applied.

        Returns:
            The stored budget, including its generated id and timestamps.
        """
        self.logger.info(f"Saving '{new_budget.category}' budget for user {user_id}.")
        sql = text(
            f"""
            INSERT INTO budgets (
                user_id, category, amount, period, start_date, end_date,
                notifications_enabled, notifications_threshold
            ) VALUES (
                :user_id, :category, :amount, :period, :start_date, :end_date,
                :notifications_enabled, :notifications_threshold
            ) RETURNING {_BUDGET_COLUMNS};
            """
        )
        params = {
            "user_id": user_id,
            "category": new_budget.category.value,
            "amount": quantize(new_budget.amount),
            "period": new_budget.period.value,
            "start_date": new_budget.start_date,
            "end_date": new_budget.end_date,
            "notifications_enabled": notifications.enabled,
            "notifications_threshold": notifications.threshold,
        }
        with self.engine.connect() as conn:
            row = conn.execute(sql, params).mappings().one()
            conn.commit()
        return self._to_budget(row)

    def update_budget(self, budget: Budget) -> Budget | None:
        """Overwrites the mutable fields of a stored budget.

        Args:
            budget: The budget with its new values. Its id and owner select
                the row to update.

        Returns:
            The updated budget, or None if the row no longer exists.
        """
        self.logger.info(f"Updating budget {budget.id} of user {budget.user_id}.")
        sql = text(
            f"""
            UPDATE budgets
            SET category = :category,
                amount = :amount,
                period = :period,
                start_date = :start_date,
                end_date = :end_date,
                notifications_enabled = :notifications_enabled,
                notifications_threshold = :notifications_threshold,
                updated_at = NOW()
            WHERE id = :budget_id AND user_id = :user_id
            RETURNING {_BUDGET_COLUMNS};
            """
        )
        params = {
            "budget_id": budget.id,
            "user_id": budget.user_id,
            "category": budget.category.value,
            "amount": quantize(budget.amount),
            "period": budget.period.value,
            "start_date": budget.start_date,
            "end_date": budget.end_date,
            "notifications_enabled": budget.notifications.enabled,
            "notifications_threshold": budget.notifications.threshold,
        }
        with self.engine.connect() as conn:
            row = conn.execute(sql, params).mappings().one_or_none()
            conn.commit()
        return self._to_budget(row) if row else None

    def delete_budget(self, user_id: str, budget_id: UUID) -> bool:
        """Deletes a budget of a user.

        Args:
            user_id: The owner of the budget.
            budget_id: The id of the budget.

        Returns:
            True if a budget was deleted, False if none matched.
        """
        self.logger.info(f"Deleting budget {budget_id} of user {user_id}.")
        sql = text("DELETE FROM budgets WHERE id = :budget_id AND user_id = :user_id;")
        with self.engine.connect() as conn:
            result = conn.execute(sql, {"budget_id": budget_id, "user_id": user_id})
            conn.commit()
        return result.rowcount > 0
