"""Fixtures for the web application tests."""

from collections.abc import Iterator

import pytest
from budget_tracker.services.budgets import BudgetService
from budget_tracker.web.dependencies import get_budget_service
from budget_tracker.web.main import app
from fastapi.testclient import TestClient


@pytest.fixture
def client(budget_service: BudgetService) -> Iterator[TestClient]:
    """Provides a test client whose routes use the in-memory budget service."""
    app.dependency_overrides[get_budget_service] = lambda: budget_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Provides the authentication header of user-1."""
    return {"X-User-Id": "user-1"}
