"""This module contains shared fixtures for all unit tests."""

import threading
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from budget_tracker.models.base import quantize
from budget_tracker.models.budgets import Budget, BudgetCategory, BudgetPeriod, NewBudget, NotificationSettings
from budget_tracker.models.transactions import Transaction, TransactionType
from budget_tracker.providers.date import DateProvider
from budget_tracker.services.budgets import BudgetService


class InMemoryTransactionsRepository:
    """A ledger kept in a list, filtering exactly like the SQL repository."""

    def __init__(self) -> None:
        self.transactions: list[Transaction] = []

    def add(
        self,
        user_id: str,
        amount: str,
        type: TransactionType,
        category: str,
        occurred_at: datetime,
    ) -> Transaction:
        transaction = Transaction(
            id=uuid4(),
            user_id=user_id,
            amount=Decimal(amount),
            type=type,
            category=category,
            occurred_at=occurred_at,
        )
        self.transactions.append(transaction)
        return transaction

    def _in_window(self, transaction: Transaction, start_date: date, end_date: date) -> bool:
        window_start, window_end = DateProvider.window_bounds(start_date, end_date)
        moment = transaction.occurred_at.replace(tzinfo=None)
        return window_start <= moment < window_end

    def get_total_income(self, user_id: str, start_date: date, end_date: date) -> Decimal:
        return quantize(
            sum(
                (
                    t.amount
                    for t in self.transactions
                    if t.user_id == user_id
                    and t.type == TransactionType.INCOME
                    and self._in_window(t, start_date, end_date)
                ),
                Decimal("0"),
            )
        )

    def get_expenses(
        self, user_id: str, categories: Iterable[str], start_date: date, end_date: date
    ) -> list[Transaction]:
        wanted = {str(category) for category in categories}
        return sorted(
            (
                t
                for t in self.transactions
                if t.user_id == user_id
                and t.type == TransactionType.EXPENSE
                and t.category in wanted
                and self._in_window(t, start_date, end_date)
            ),
            key=lambda t: t.occurred_at,
        )


class InMemoryBudgetsRepository:
    """A budget store kept in a dict, scoped by user like the SQL repository."""

    def __init__(self) -> None:
        self.budgets: dict[UUID, Budget] = {}
        self._lock = threading.Lock()

    def get_budgets(self, user_id: str, period: BudgetPeriod | None = None) -> list[Budget]:
        budgets = [b for b in self.budgets.values() if b.user_id == user_id and (period is None or b.period == period)]
        return sorted(budgets, key=lambda b: (b.start_date, b.created_at))

    def get_budget(self, user_id: str, budget_id: UUID) -> Budget | None:
        budget = self.budgets.get(budget_id)
        return budget if budget is not None and budget.user_id == user_id else None

    def get_total_allocated(
        self,
        user_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
        excluding_budget_id: UUID | None = None,
    ) -> Decimal:
        total = Decimal("0")
        for budget in list(self.budgets.values()):
            if budget.user_id != user_id or budget.id == excluding_budget_id:
                continue
            if start_date is not None and end_date is not None and not budget.overlaps(start_date, end_date):
                continue
            total += budget.amount
        return quantize(total)

    def find_overlapping(
        self,
        user_id: str,
        category: str,
        start_date: date,
        end_date: date,
        excluding_budget_id: UUID | None = None,
    ) -> Budget | None:
        for budget in self.get_budgets(user_id):
            if budget.id == excluding_budget_id or budget.category != category:
                continue
            if budget.overlaps(start_date, end_date):
                return budget
        return None

    def save_budget(self, user_id: str, new_budget: NewBudget, notifications: NotificationSettings) -> Budget:
        now = datetime.now(timezone.utc)
        budget = Budget(
            id=uuid4(),
            user_id=user_id,
            category=new_budget.category,
            amount=quantize(new_budget.amount),
            period=new_budget.period,
            start_date=new_budget.start_date,
            end_date=new_budget.end_date,
            notifications=notifications,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self.budgets[budget.id] = budget
        return budget

    def update_budget(self, budget: Budget) -> Budget | None:
        if self.get_budget(budget.user_id, budget.id) is None:
            return None
        updated = budget.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        with self._lock:
            self.budgets[budget.id] = updated
        return updated

    def delete_budget(self, user_id: str, budget_id: UUID) -> bool:
        if self.get_budget(user_id, budget_id) is None:
            return False
        with self._lock:
            del self.budgets[budget_id]
        return True


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Removes engine settings from the environment so each test starts from the defaults."""
    for name in (
        "ALLOCATION_LOCK_ENABLED",
        "ALLOCATION_SCOPE",
        "AUTH_USER_HEADER",
        "DEFAULT_NOTIFICATION_THRESHOLD",
        "POSTGRES_DB_SCHEMA",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")


@pytest.fixture
def transactions_repo() -> InMemoryTransactionsRepository:
    """Provides an empty in-memory ledger."""
    return InMemoryTransactionsRepository()


@pytest.fixture
def budgets_repo() -> InMemoryBudgetsRepository:
    """Provides an empty in-memory budget store."""
    return InMemoryBudgetsRepository()


@pytest.fixture
def service_factory(
    budgets_repo: InMemoryBudgetsRepository, transactions_repo: InMemoryTransactionsRepository
) -> Callable[[], BudgetService]:
    """Builds services on top of the in-memory repositories.

    Settings are read when the service is built, so tests can change the
    environment before calling the factory.
    """

    def factory() -> BudgetService:
        return BudgetService.create(None, budgets_repo=budgets_repo, transactions_repo=transactions_repo)

    return factory


@pytest.fixture
def budget_service(service_factory: Callable[[], BudgetService]) -> BudgetService:
    """Provides a BudgetService wired to the in-memory repositories."""
    return service_factory()


@pytest.fixture
def january_income(transactions_repo: InMemoryTransactionsRepository) -> None:
    """Records 10,000 of income for user-1 in January 2024."""
    transactions_repo.add("user-1", "6000", TransactionType.INCOME, "Salary", datetime(2024, 1, 5, 9, 0))
    transactions_repo.add("user-1", "4000", TransactionType.INCOME, "Freelance", datetime(2024, 1, 20, 18, 30))


def make_new_budget(
    category: BudgetCategory = BudgetCategory.FOOD_AND_DINING,
    amount: str = "3000",
    start_date: date = date(2024, 1, 1),
    end_date: date = date(2024, 1, 31),
    period: BudgetPeriod = BudgetPeriod.MONTHLY,
) -> NewBudget:
    """Builds a budget payload with January defaults."""
    return NewBudget(
        category=category,
        amount=Decimal(amount),
        period=period,
        start_date=start_date,
        end_date=end_date,
    )


@pytest.fixture
def new_budget() -> Callable[..., NewBudget]:
    """Exposes the budget payload builder to tests."""
    return make_new_budget
