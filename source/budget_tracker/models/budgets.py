"""This module defines the Pydantic models for budgets and their derived views."""

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any
from uuid import UUID

from budget_tracker.models.base import Amount, CamelModel, quantize
from budget_tracker.providers.date import DateProvider
from pydantic import Field


class BudgetCategory(StrEnum):
    """Enumeration for the fixed set of categories a budget can target."""

    FOOD_AND_DINING = "Food & Dining"
    TRANSPORT = "Transport"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    OTHER = "Other"


class BudgetPeriod(StrEnum):
    """Enumeration for the informational period of a budget.

    The period never drives the budget window, which is always explicit.
    """

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def _missing_(cls, value: object) -> "BudgetPeriod | None":
        """Accepts period names regardless of their case.

        Args:
            value: The raw value that did not match any member.

        Returns:
            The matching member, or None to let the lookup fail.
        """
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class NotificationSettings(CamelModel):
    """Alert preferences of a budget, consumed by notification delivery.

    Attributes:
        enabled: Whether alerts are sent for this budget.
        threshold: The utilization percentage that triggers an alert.
    """

    enabled: bool = True
    threshold: int = Field(80, ge=1, le=100)


class Budget(CamelModel):
    """Represents a user's spending plan for one category over one window.

    Attributes:
        id: The unique identifier of the budget.
        user_id: The owner of the budget.
        category: The category the budget applies to.
        amount: The allocation ceiling.
        period: The informational period (weekly, monthly or yearly).
        start_date: The first day of the budget window.
        end_date: The last day of the budget window, inclusive.
        notifications: The alert preferences.
        created_at: When the budget was created.
        updated_at: When the budget was last modified.
    """

    id: UUID
    user_id: str
    category: BudgetCategory
    amount: Amount
    period: BudgetPeriod
    start_date: date
    end_date: date
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def window(self) -> tuple[date, date]:
        """The inclusive (start_date, end_date) window of the budget."""
        return self.start_date, self.end_date

    def contains(self, moment: datetime | date) -> bool:
        """Checks whether a moment falls on a day inside the budget window.

        Args:
            moment: The transaction date or timestamp.

        Returns:
            True if the day is within [start_date, end_date].
        """
        return self.start_date <= DateProvider.day_of(moment) <= self.end_date

    def overlaps(self, start_date: date, end_date: date) -> bool:
        """Checks whether the budget window shares a day with another window.

        Args:
            start_date: The first day of the other window.
            end_date: The last day of the other window.

        Returns:
            True if the windows overlap.
        """
        return DateProvider.windows_overlap(self.window, (start_date, end_date))

    def is_exceeded_by(self, current_spending: Decimal) -> bool:
        """Checks whether the spending went past the allocation."""
        return current_spending > self.amount

    def remaining(self, current_spending: Decimal) -> Decimal:
        """Returns what is left of the allocation; negative when over budget."""
        return quantize(self.amount - current_spending)

    def utilization(self, current_spending: Decimal) -> Decimal | None:
        """Returns the spent share of the allocation as a percentage.

        The percentage is unbounded above 100. A zero allocation has no
        meaningful ratio: it reports 0 while nothing was spent and None once
        any spending exists, in which case the budget is exceeded.

        Args:
            current_spending: The amount attributed to the budget.

        Returns:
            The percentage rounded to two decimals, or None.
        """
        if self.amount == 0:
            return Decimal("0.00") if current_spending == 0 else None
        return quantize(current_spending / self.amount * 100)


class BudgetView(Budget):
    """A budget enriched with spending computed at read time. Never persisted."""

    current_spending: Amount
    remaining_amount: Amount
    utilization_percentage: Amount | None
    is_exceeded: bool

    @classmethod
    def from_budget(cls, budget: Budget, current_spending: Decimal) -> "BudgetView":
        """Derives the view of a budget for a given spending total.

        Args:
            budget: The stored budget.
            current_spending: The amount attributed to the budget.

        Returns:
            The enriched view.
        """
        spending = quantize(current_spending)
        return cls(
            **budget.model_dump(),
            current_spending=spending,
            remaining_amount=budget.remaining(spending),
            utilization_percentage=budget.utilization(spending),
            is_exceeded=budget.is_exceeded_by(spending),
        )


class NewBudget(CamelModel):
    """The payload used to create a budget.

    The amount and the window are validated by the allocation validator so
    that every rejection names its field the same way for HTTP and CLI
    callers. The owner is never part of the payload.
    """

    category: BudgetCategory
    amount: Amount
    period: BudgetPeriod
    start_date: date
    end_date: date
    notifications: NotificationSettings | None = None


class BudgetUpdate(CamelModel):
    """A partial update of a budget. Unset or null fields are left untouched."""

    category: BudgetCategory | None = None
    amount: Amount | None = None
    period: BudgetPeriod | None = None
    start_date: date | None = None
    end_date: date | None = None
    notifications: NotificationSettings | None = None

    def changes(self) -> dict[str, Any]:
        """Returns the fields the caller actually provided.

        Returns:
            A mapping of attribute name to new value.
        """
        return {name: getattr(self, name) for name in self.model_fields_set if getattr(self, name) is not None}

    def affects_allocation(self) -> bool:
        """Checks whether the update can change the outcome of the allocation check.

        Returns:
            True when the amount, the window or the category changes.
        """
        return bool(self.changes().keys() & {"amount", "start_date", "end_date", "category"})

    def apply_to(self, budget: Budget) -> Budget:
        """Builds the budget as it would look after this update.

        Args:
            budget: The stored budget.

        Returns:
            A new Budget instance with the changes applied.
        """
        return budget.model_copy(update=self.changes())


class AllocationTotals(CamelModel):
    """The figures compared by the allocation check.

    Attributes:
        total_income: The recognized income for the candidate window.
        total_existing_budgets: The allocated amount of the other budgets.
        new_amount: The amount the caller tried to allocate.
    """

    total_income: Amount
    total_existing_budgets: Amount
    new_amount: Amount

    @property
    def exceeds_income(self) -> bool:
        """Whether allocating the new amount would go past the income."""
        return self.total_existing_budgets + self.new_amount > self.total_income


class AvailableIncome(CamelModel):
    """Income, allocations and headroom for a window.

    Attributes:
        start_date: The first day of the window.
        end_date: The last day of the window.
        total_income: The recognized income for the window.
        total_budgets: The amount allocated to budgets for the window.
        available_income: The income not yet allocated; negative when
            allocations already exceed the income.
    """

    start_date: date
    end_date: date
    total_income: Amount
    total_budgets: Amount
    available_income: Amount
