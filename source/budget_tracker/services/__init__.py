"""This module initializes the services package.

It also re-exports the services to provide a simpler, flatter import
structure for other parts of the application.
"""

from budget_tracker.services.allocation import AllocationValidator
from budget_tracker.services.budgets import BudgetService
from budget_tracker.services.income import IncomeAggregator
from budget_tracker.services.spending import SpendingAggregator

__all__ = [
    "AllocationValidator",
    "BudgetService",
    "IncomeAggregator",
    "SpendingAggregator",
]
