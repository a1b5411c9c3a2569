"""Request-scoped dependencies of the web application."""

from typing import Annotated

from budget_tracker.providers.config import ConfigProvider
from budget_tracker.providers.database import DatabaseManager
from budget_tracker.services.budgets import BudgetService
from fastapi import Depends, HTTPException, Request, status


def get_budget_service() -> BudgetService:
    """Builds the budget service on top of the shared database engine.

    Returns:
        A BudgetService instance.
    """
    return BudgetService.create(DatabaseManager.get_engine(), DatabaseManager.get_lock_engine())


def get_current_user_id(request: Request) -> str:
    """Resolves the caller from the header set by the authentication layer.

    Args:
        request: The incoming request.

    Returns:
        The id of the authenticated user.

    Raises:
        HTTPException: 401 when the header is missing or blank.
    """
    header_name = ConfigProvider.get_config().AUTH_USER_HEADER
    user_id = request.headers.get(header_name, "").strip()
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user_id


CurrentUser = Annotated[str, Depends(get_current_user_id)]
Service = Annotated[BudgetService, Depends(get_budget_service)]
