"""This module defines the repository for reading the transaction ledger."""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from budget_tracker.models.base import quantize
from budget_tracker.models.transactions import Transaction, TransactionType
from budget_tracker.providers.date import DateProvider
from budget_tracker.providers.logging import Logger, LoggingProvider
from sqlalchemy import Engine, bindparam, text


class TransactionsRepository:
    """Provides read access to the users' income and expense transactions.

    The ledger itself is owned by the transaction-recording side of the
    application; this repository never writes to it. Records are returned
    fully decrypted.

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

    def get_total_income(self, user_id: str, start_date: date, end_date: date) -> Decimal:
        """Calculates the sum of a user's income transactions within a window.

        Args:
            user_id: The owner of the transactions.
            start_date: The first day of the window.
            end_date: The last day of the window, inclusive.

        Returns:
            The total income, or zero when there is none.
        """
        window_start, window_end = DateProvider.window_bounds(start_date, end_date)
        sql = text(
            """
            SELECT COALESCE(SUM(amount), 0)
            FROM transactions
            WHERE user_id = :user_id
              AND type = :type
              AND occurred_at >= :window_start
              AND occurred_at < :window_end;
            """
        )
        params = {
            "user_id": user_id,
            "type": TransactionType.INCOME.value,
            "window_start": window_start,
            "window_end": window_end,
        }
        with self.engine.connect() as conn:
            result = conn.execute(sql, params).scalar_one_or_none()
        return quantize(result)

    def get_expenses(
        self, user_id: str, categories: Iterable[str], start_date: date, end_date: date
    ) -> list[Transaction]:
        """Retrieves a user's expenses for a set of categories within a window.

        Args:
            user_id: The owner of the transactions.
            categories: The categories to include.
            start_date: The first day of the window.
            end_date: The last day of the window, inclusive.

        Returns:
            The matching transactions ordered by date.
        """
        category_list = sorted({str(category) for category in categories})
        if not category_list:
            return []

        window_start, window_end = DateProvider.window_bounds(start_date, end_date)
        self.logger.debug(
            f"Fetching expenses of user {user_id} for {len(category_list)} categories "
            f"between {start_date} and {end_date}."
        )
        sql = text(
            """
            SELECT id, user_id, amount, type, category, description, occurred_at
            FROM transactions
            WHERE user_id = :user_id
              AND type = :type
              AND category IN :categories
              AND occurred_at >= :window_start
              AND occurred_at < :window_end
            ORDER BY occurred_at;
            """
        ).bindparams(bindparam("categories", expanding=True))
        params = {
            "user_id": user_id,
            "type": TransactionType.EXPENSE.value,
            "categories": category_list,
            "window_start": window_start,
            "window_end": window_end,
        }
        with self.engine.connect() as conn:
            rows = conn.execute(sql, params).mappings().all()
        return [Transaction.model_validate(dict(row)) for row in rows]
