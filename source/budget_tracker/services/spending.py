"""This module defines the service that attributes expenses to budgets."""

from collections import defaultdict
from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from budget_tracker.models.budgets import Budget, BudgetView
from budget_tracker.providers.logging import Logger, LoggingProvider
from budget_tracker.repositories.transactions import TransactionsRepository


class SpendingAggregator:
    """Computes the current spending of a batch of budgets.

    The ledger is queried once for the whole batch, over the union of the
    budget windows, and each expense is then attributed to the budgets of its
    category whose own window contains the expense date. An expense inside
    the union window but outside a given budget's window is never counted
    toward that budget.
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

    @staticmethod
    def _group_by_category(budgets: Sequence[Budget]) -> dict[str, list[Budget]]:
        """Groups budgets by category, keeping every budget of a category.

        Args:
            budgets: The budgets to group.

        Returns:
            A mapping of category to the budgets of that category.
        """
        by_category: dict[str, list[Budget]] = defaultdict(list)
        for budget in budgets:
            by_category[budget.category.value].append(budget)
        return by_category

    def attribute_spending(self, user_id: str, budgets: Sequence[Budget]) -> list[BudgetView]:
        """Builds the spending view of each budget.

        Args:
            user_id: The owner of the budgets.
            budgets: The budgets to enrich.

        Returns:
            One BudgetView per input budget, in input order.
        """
        if not budgets:
            return []

        by_category = self._group_by_category(budgets)
        union_start = min(budget.start_date for budget in budgets)
        union_end = max(budget.end_date for budget in budgets)

        expenses = self.transactions_repo.get_expenses(user_id, by_category.keys(), union_start, union_end)

        spending: dict[UUID, Decimal] = defaultdict(Decimal)
        for expense in expenses:
            candidates = by_category.get(expense.category, [])
            matches = [budget for budget in candidates if budget.contains(expense.occurred_at)]
            if len(matches) > 1:
                self.logger.warning(
                    f"Expense {expense.id} falls inside {len(matches)} overlapping "
                    f"'{expense.category}' budgets of user {user_id}; counting it in each."
                )
            for budget in matches:
                spending[budget.id] += expense.amount

        self.logger.debug(
            f"Attributed {len(expenses)} expense(s) across {len(budgets)} budget(s) for user {user_id}."
        )
        return [BudgetView.from_budget(budget, spending.get(budget.id, Decimal("0"))) for budget in budgets]
