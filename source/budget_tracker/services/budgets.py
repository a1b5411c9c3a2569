"""This module defines the service that orchestrates budget reads and writes."""

from datetime import date
from uuid import UUID

from budget_tracker.exceptions.budgets import BudgetNotFoundError, BudgetValidationError
from budget_tracker.models.budgets import (
    AvailableIncome,
    Budget,
    BudgetPeriod,
    BudgetUpdate,
    BudgetView,
    NewBudget,
    NotificationSettings,
)
from budget_tracker.providers.config import Config, ConfigProvider
from budget_tracker.providers.locking import AllocationLockProvider
from budget_tracker.providers.logging import Logger, LoggingProvider
from budget_tracker.repositories.budgets import BudgetsRepository
from budget_tracker.repositories.transactions import TransactionsRepository
from budget_tracker.services.allocation import AllocationValidator
from budget_tracker.services.income import IncomeAggregator
from budget_tracker.services.spending import SpendingAggregator
from sqlalchemy import Engine


class BudgetService:
    """Composes budget views and runs budget mutations through the allocation checks.

    Reads go straight to the spending aggregator. Writes are validated
    structurally first and then, while the user's allocation lock is held,
    checked against the category windows and the recognized income before
    anything is persisted. A rejected write never stores anything.
    """

    budgets_repo: BudgetsRepository
    income_aggregator: IncomeAggregator
    spending_aggregator: SpendingAggregator
    allocation_validator: AllocationValidator
    lock_provider: AllocationLockProvider
    config: Config
    logger: Logger

    def __init__(
        self,
        budgets_repo: BudgetsRepository,
        income_aggregator: IncomeAggregator,
        spending_aggregator: SpendingAggregator,
        allocation_validator: AllocationValidator,
        lock_provider: AllocationLockProvider,
    ) -> None:
        """Initializes the service with its dependencies.

        Args:
            budgets_repo: The repository holding budgets.
            income_aggregator: The service computing recognized income.
            spending_aggregator: The service attributing expenses to budgets.
            allocation_validator: The validator guarding budget writes.
            lock_provider: The provider of the per-user allocation lock.
        """
        self.budgets_repo = budgets_repo
        self.income_aggregator = income_aggregator
        self.spending_aggregator = spending_aggregator
        self.allocation_validator = allocation_validator
        self.lock_provider = lock_provider
        self.config = ConfigProvider.get_config()
        self.logger = LoggingProvider().get_logger()

    @classmethod
    def create(
        cls,
        engine: Engine | None,
        lock_engine: Engine | None = None,
        budgets_repo: BudgetsRepository | None = None,
        transactions_repo: TransactionsRepository | None = None,
    ) -> "BudgetService":
        """Wires a service and its collaborators around a database engine.

        Args:
            engine: The SQLAlchemy Engine shared by the repositories.
            lock_engine: The engine holding allocation advisory locks, kept
                apart from `engine` so lock connections never starve the
                repositories. None limits the lock to this process.
            budgets_repo: Overrides the budget repository.
            transactions_repo: Overrides the transaction repository.

        Returns:
            A ready-to-use BudgetService.
        """
        budgets_repo = budgets_repo or BudgetsRepository(engine)
        transactions_repo = transactions_repo or TransactionsRepository(engine)
        income_aggregator = IncomeAggregator(transactions_repo)
        return cls(
            budgets_repo=budgets_repo,
            income_aggregator=income_aggregator,
            spending_aggregator=SpendingAggregator(transactions_repo),
            allocation_validator=AllocationValidator(income_aggregator, budgets_repo),
            lock_provider=AllocationLockProvider(lock_engine),
        )

    def _require_budget(self, user_id: str, budget_id: UUID) -> Budget:
        """Fetches a budget of the user or fails.

        Args:
            user_id: The owner of the budget.
            budget_id: The id of the budget.

        Returns:
            The stored budget.

        Raises:
            BudgetNotFoundError: If the budget is missing or owned by someone else.
        """
        budget = self.budgets_repo.get_budget(user_id, budget_id)
        if budget is None:
            raise BudgetNotFoundError(budget_id)
        return budget

    def list_budgets(
        self, user_id: str, period: BudgetPeriod | None = None, include_spending: bool = False
    ) -> list[Budget] | list[BudgetView]:
        """Lists the budgets of a user.

        Args:
            user_id: The owner of the budgets.
            period: An optional period filter.
            include_spending: Whether to compute the spending of each budget.

        Returns:
            The budgets, or their spending views when requested.
        """
        budgets = self.budgets_repo.get_budgets(user_id, period)
        if not include_spending:
            return budgets
        return self.spending_aggregator.attribute_spending(user_id, budgets)

    def get_budget(self, user_id: str, budget_id: UUID, include_spending: bool = False) -> Budget | BudgetView:
        """Fetches a single budget of a user.

        Args:
            user_id: The owner of the budget.
            budget_id: The id of the budget.
            include_spending: Whether to compute the budget's spending.

        Returns:
            The budget, or its spending view when requested.

        Raises:
            BudgetNotFoundError: If the budget is missing or owned by someone else.
        """
        budget = self._require_budget(user_id, budget_id)
        if not include_spending:
            return budget
        return self.spending_aggregator.attribute_spending(user_id, [budget])[0]

    def refresh_spending(self, user_id: str) -> list[BudgetView]:
        """Recomputes the spending of every budget of a user.

        Spending is never stored, so this is a plain recomputation offered to
        clients that just recorded a transaction.

        Args:
            user_id: The owner of the budgets.

        Returns:
            The freshly computed views.
        """
        views = self.spending_aggregator.attribute_spending(user_id, self.budgets_repo.get_budgets(user_id))
        self.logger.info(f"Recomputed spending for {len(views)} budget(s) of user {user_id}.")
        return views

    def available_income(self, user_id: str, start_date: date, end_date: date) -> AvailableIncome:
        """Reports income, allocations and headroom for a window.

        The allocated total follows the same scope as the allocation check.

        Args:
            user_id: The user to report on.
            start_date: The first day of the window.
            end_date: The last day of the window, inclusive.

        Returns:
            The income summary of the window.

        Raises:
            BudgetValidationError: If the window is reversed.
        """
        if start_date > end_date:
            raise BudgetValidationError("startDate", "Start date must not be after end date")

        total_income = self.income_aggregator.total_income(user_id, start_date, end_date)
        if self.config.ALLOCATION_SCOPE == "all":
            total_budgets = self.budgets_repo.get_total_allocated(user_id)
        else:
            total_budgets = self.budgets_repo.get_total_allocated(user_id, start_date, end_date)

        return AvailableIncome(
            start_date=start_date,
            end_date=end_date,
            total_income=total_income,
            total_budgets=total_budgets,
            available_income=total_income - total_budgets,
        )

    def create_budget(self, user_id: str, new_budget: NewBudget) -> Budget:
        """Validates and stores a new budget.

        Args:
            user_id: The owner of the new budget.
            new_budget: The budget payload.

        Returns:
            The stored budget.

        Raises:
            BudgetValidationError: If a structural rule is broken or the
                category already has a budget for part of the window.
            AllocationConflictError: If the budget does not fit in the income.
        """
        self.allocation_validator.validate_structure(new_budget)
        notifications = new_budget.notifications or NotificationSettings(
            threshold=self.config.DEFAULT_NOTIFICATION_THRESHOLD
        )

        with self.lock_provider.hold(user_id):
            self.allocation_validator.validate_category_window(user_id, new_budget)
            self.allocation_validator.validate_allocation(user_id, new_budget)
            budget = self.budgets_repo.save_budget(user_id, new_budget, notifications)

        self.logger.info(f"Created budget {budget.id} for user {user_id}.")
        return budget

    def update_budget(self, user_id: str, budget_id: UUID, update: BudgetUpdate) -> Budget:
        """Applies a partial update to a budget.

        Changing the amount, the window or the category re-runs the
        allocation checks, with the budget's previous amount left out of the
        existing total. The budget is read and written back while the
        user's allocation lock is held, so a concurrent update can never be
        overwritten with a stale copy of the row.

        Args:
            user_id: The owner of the budget.
            budget_id: The id of the budget.
            update: The fields to change.

        Returns:
            The updated budget.

        Raises:
            BudgetNotFoundError: If the budget is missing or owned by someone else.
            BudgetValidationError: If the updated budget breaks a structural rule.
            AllocationConflictError: If the updated budget does not fit in the income.
        """
        if not update.changes():
            return self._require_budget(user_id, budget_id)

        with self.lock_provider.hold(user_id):
            current = self._require_budget(user_id, budget_id)
            candidate = update.apply_to(current)
            if update.affects_allocation():
                self.allocation_validator.validate_structure(candidate)
                self.allocation_validator.validate_category_window(user_id, candidate, excluding_budget_id=budget_id)
                self.allocation_validator.validate_allocation(user_id, candidate, excluding_budget_id=budget_id)
            updated = self.budgets_repo.update_budget(candidate)

        if updated is None:
            raise BudgetNotFoundError(budget_id)
        self.logger.info(f"Updated budget {budget_id} for user {user_id}.")
        return updated

    def delete_budget(self, user_id: str, budget_id: UUID) -> None:
        """Deletes a budget.

        Args:
            user_id: The owner of the budget.
            budget_id: The id of the budget.

        Raises:
            BudgetNotFoundError: If the budget is missing or owned by someone else.
        """
        if not self.budgets_repo.delete_budget(user_id, budget_id):
            raise BudgetNotFoundError(budget_id)
        self.logger.info(f"Deleted budget {budget_id} for user {user_id}.")
