"""This module defines custom exceptions raised by the budget engine."""

from uuid import UUID

from budget_tracker.models.budgets import AllocationTotals


class BudgetError(Exception):
    """Base exception for errors that occur while handling budgets."""

    pass


class BudgetValidationError(BudgetError):
    """Raised when a budget breaks a structural rule.

    Attributes:
        field: The name of the offending field, as exposed in JSON.
        message: A human-readable description naming the field.
    """

    def __init__(self, field: str, message: str) -> None:
        """Initializes the error.

        Args:
            field: The name of the offending field.
            message: A human-readable description of the problem.
        """
        super().__init__(message)
        self.field = field
        self.message = message


class BudgetOverlapError(BudgetValidationError):
    """Raised when a budget window overlaps another budget of the same category."""

    def __init__(self, category: str, conflicting_budget_id: UUID) -> None:
        """Initializes the error.

        Args:
            category: The category shared by both budgets.
            conflicting_budget_id: The id of the budget already covering the window.
        """
        super().__init__(
            "startDate",
            f"A '{category}' budget already covers part of this period (budget {conflicting_budget_id}).",
        )
        self.category = category
        self.conflicting_budget_id = conflicting_budget_id


class AllocationConflictError(BudgetError):
    """Raised when a budget would push the allocated total above the recognized income.

    Attributes:
        totals: The figures that were compared, returned to the caller so
            it can explain the rejection.
    """

    def __init__(self, totals: AllocationTotals) -> None:
        """Initializes the error.

        Args:
            totals: The income, existing allocation and attempted amount.
        """
        self.totals = totals
        self.message = (
            f"Total budget amount cannot exceed total income. "
            f"Total income: {totals.total_income}, "
            f"existing budgets: {totals.total_existing_budgets}, "
            f"attempted amount: {totals.new_amount}."
        )
        super().__init__(self.message)


class BudgetNotFoundError(BudgetError):
    """Raised when a budget does not exist or belongs to another user."""

    def __init__(self, budget_id: UUID | str) -> None:
        """Initializes the error.

        Args:
            budget_id: The id that was requested.
        """
        self.budget_id = budget_id
        self.message = "Budget not found"
        super().__init__(f"{self.message}: {budget_id}")
