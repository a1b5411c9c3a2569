"""REST endpoints for budgets."""

from datetime import date
from typing import Any
from uuid import UUID

from budget_tracker.exceptions.budgets import BudgetNotFoundError, BudgetValidationError
from budget_tracker.models.budgets import BudgetPeriod, BudgetUpdate, NewBudget
from budget_tracker.web.dependencies import CurrentUser, Service
from budget_tracker.web.responses import dump, success
from fastapi import APIRouter, Query, Response, status

router = APIRouter(prefix="/budgets", tags=["budgets"])


def _parse_period(period: str | None) -> BudgetPeriod | None:
    """Parses the optional period filter, ignoring its case."""
    if not period:
        return None
    try:
        return BudgetPeriod(period)
    except ValueError:
        raise BudgetValidationError("period", f"Period '{period}' must be one of weekly, monthly or yearly") from None


def _parse_budget_id(budget_id: str) -> UUID:
    """Parses a budget id; malformed ids can never match a budget."""
    try:
        return UUID(budget_id)
    except ValueError:
        raise BudgetNotFoundError(budget_id) from None


@router.get("")
def list_budgets(
    user_id: CurrentUser,
    service: Service,
    period: str | None = None,
    include_spending: bool = Query(False, alias="includeSpending"),
) -> dict[str, Any]:
    """Lists the caller's budgets, optionally with their current spending."""
    budgets = service.list_budgets(user_id, _parse_period(period), include_spending=include_spending)
    return success(dump(budgets))


@router.get("/available-income")
def available_income(
    user_id: CurrentUser,
    service: Service,
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
) -> dict[str, Any]:
    """Reports income, allocations and headroom for a window."""
    return success(dump(service.available_income(user_id, start_date, end_date)))


@router.post("/refresh-spending")
def refresh_spending(user_id: CurrentUser, service: Service) -> dict[str, Any]:
    """Recomputes the spending of all the caller's budgets."""
    views = service.refresh_spending(user_id)
    return success({"refreshed": len(views), "budgets": dump(views)})


@router.get("/{budget_id}")
def get_budget(
    budget_id: str,
    user_id: CurrentUser,
    service: Service,
    include_spending: bool = Query(False, alias="includeSpending"),
) -> dict[str, Any]:
    """Fetches one of the caller's budgets."""
    budget = service.get_budget(user_id, _parse_budget_id(budget_id), include_spending=include_spending)
    return success(dump(budget))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_budget(payload: NewBudget, user_id: CurrentUser, service: Service) -> dict[str, Any]:
    """Creates a budget after checking it against the caller's income."""
    return success(dump(service.create_budget(user_id, payload)))


@router.patch("/{budget_id}")
def update_budget(budget_id: str, payload: BudgetUpdate, user_id: CurrentUser, service: Service) -> dict[str, Any]:
    """Updates a budget; amount, window and category changes are re-validated."""
    return success(dump(service.update_budget(user_id, _parse_budget_id(budget_id), payload)))


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(budget_id: str, user_id: CurrentUser, service: Service) -> Response:
    """Deletes a budget."""
    service.delete_budget(user_id, _parse_budget_id(budget_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
