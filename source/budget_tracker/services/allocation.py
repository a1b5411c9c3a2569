"""This module defines the validator that guards budget allocations."""

from uuid import UUID

from budget_tracker.exceptions.budgets import AllocationConflictError, BudgetOverlapError, BudgetValidationError
from budget_tracker.models.base import MAX_AMOUNT, quantize
from budget_tracker.models.budgets import AllocationTotals, Budget, BudgetCategory, NewBudget
from budget_tracker.providers.config import Config, ConfigProvider
from budget_tracker.providers.logging import Logger, LoggingProvider
from budget_tracker.repositories.budgets import BudgetsRepository
from budget_tracker.services.income import IncomeAggregator


class AllocationValidator:
    """Rejects budget writes that break structural rules or the allocation invariant.

    The allocation invariant states that the amounts budgeted by a user must
    not exceed the income recognized for the budget window. Which existing
    budgets count against a window is controlled by `ALLOCATION_SCOPE`:
    `overlapping` (the default) only sums budgets whose window shares a day
    with the candidate window, `all` sums every budget of the user.

    The checks read current totals and do not lock anything themselves;
    callers run them under the allocation lock together with the write.
    """

    income_aggregator: IncomeAggregator
    budgets_repo: BudgetsRepository
    config: Config
    logger: Logger

    def __init__(self, income_aggregator: IncomeAggregator, budgets_repo: BudgetsRepository) -> None:
        """Initializes the validator.

        Args:
            income_aggregator: The service computing recognized income.
            budgets_repo: The repository holding the user's budgets.
        """
        self.income_aggregator = income_aggregator
        self.budgets_repo = budgets_repo
        self.config = ConfigProvider.get_config()
        self.logger = LoggingProvider().get_logger()

    def validate_structure(self, candidate: NewBudget | Budget) -> None:
        """Checks the rules that do not depend on stored data.

        Args:
            candidate: The budget being created, or an existing budget with
                its pending changes applied.

        Raises:
            BudgetValidationError: If the category is unknown, the amount is
                not positive once rounded to cents or does not fit the stored
                precision, the window is empty or reversed, or the
                notification threshold is out of range.
        """
        try:
            BudgetCategory(candidate.category)
        except ValueError:
            raise BudgetValidationError(
                "category", f"Category '{candidate.category}' is not a valid budget category"
            ) from None

        stored_amount = quantize(candidate.amount)
        if stored_amount <= 0:
            raise BudgetValidationError("amount", "Amount must be greater than 0")
        if stored_amount > MAX_AMOUNT:
            raise BudgetValidationError("amount", f"Amount must not exceed {MAX_AMOUNT}")

        if candidate.start_date >= candidate.end_date:
            raise BudgetValidationError("startDate", "Start date must be before end date")

        notifications = candidate.notifications
        if notifications is not None and not 1 <= notifications.threshold <= 100:
            raise BudgetValidationError("notifications.threshold", "Notification threshold must be between 1 and 100")

    def validate_category_window(
        self, user_id: str, candidate: NewBudget | Budget, excluding_budget_id: UUID | None = None
    ) -> None:
        """Checks that no other budget of the same category covers the candidate window.

        Args:
            user_id: The owner of the budgets.
            candidate: The budget being written.
            excluding_budget_id: The budget being updated, if any.

        Raises:
            BudgetOverlapError: If another budget of the category overlaps.
        """
        conflicting = self.budgets_repo.find_overlapping(
            user_id, candidate.category, candidate.start_date, candidate.end_date, excluding_budget_id
        )
        if conflicting is not None:
            raise BudgetOverlapError(candidate.category, conflicting.id)

    def validate_allocation(
        self, user_id: str, candidate: NewBudget | Budget, excluding_budget_id: UUID | None = None
    ) -> AllocationTotals:
        """Checks that the candidate amount fits in the income left for its window.

        Args:
            user_id: The owner of the budgets.
            candidate: The budget being created, or an existing budget with
                its pending changes applied.
            excluding_budget_id: On update, the id of the budget being
                replaced so that its previous amount is not counted twice.

        Returns:
            The compared totals when the allocation is accepted.

        Raises:
            AllocationConflictError: If the existing allocations plus the
                candidate amount exceed the recognized income.
        """
        total_income = self.income_aggregator.total_income(user_id, candidate.start_date, candidate.end_date)

        if self.config.ALLOCATION_SCOPE == "all":
            total_existing = self.budgets_repo.get_total_allocated(user_id, excluding_budget_id=excluding_budget_id)
        else:
            total_existing = self.budgets_repo.get_total_allocated(
                user_id,
                candidate.start_date,
                candidate.end_date,
                excluding_budget_id=excluding_budget_id,
            )

        totals = AllocationTotals(
            total_income=total_income,
            total_existing_budgets=total_existing,
            new_amount=quantize(candidate.amount),
        )
        if totals.exceeds_income:
            self.logger.warning(
                f"Rejected allocation of {totals.new_amount} for user {user_id}: "
                f"income {totals.total_income}, already allocated {totals.total_existing_budgets}."
            )
            raise AllocationConflictError(totals)

        self.logger.debug(f"Accepted allocation of {totals.new_amount} for user {user_id}.")
        return totals
