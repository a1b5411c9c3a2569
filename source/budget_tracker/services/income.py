"""This module defines the service that recognizes a user's income."""

from datetime import date
from decimal import Decimal

from budget_tracker.providers.logging import Logger, LoggingProvider
from budget_tracker.repositories.transactions import TransactionsRepository


class IncomeAggregator:
    """Sums a user's income transactions for a window.

    Income is recognized strictly inside the window: an income transaction
    counts when its date falls on a day in [window_start, window_end], both
    ends included. Income outside the window never funds the window's
    budgets.
    """

    transactions_repo: TransactionsRepository
    logger: Logger

    def __init__(self, transactions_repo: TransactionsRepository) -> None:
        """Initializes the aggregator.

        Args:
            transactions_repo: The repository giving access to the ledger.
        """
        self.transactions_repo = transactions_repo
        self.logger = LoggingProvider().get_logger()

    def total_income(self, user_id: str, window_start: date, window_end: date) -> Decimal:
        """Computes the recognized income of a user for a window.

        Args:
            user_id: The user whose income is computed.
            window_start: The first day of the window.
            window_end: The last day of the window, inclusive.

        Returns:
            The non-negative income total; zero when there is no income.
        """
        total = self.transactions_repo.get_total_income(user_id, window_start, window_end)
        self.logger.debug(f"Recognized income for user {user_id} between {window_start} and {window_end}: {total}")
        return total
