"""This module defines the Pydantic models for ledger transactions."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from budget_tracker.models.base import Amount, CamelModel
from pydantic import Field


class TransactionType(StrEnum):
    """Enumeration for the kinds of ledger transactions."""

    INCOME = "income"
    EXPENSE = "expense"


class Transaction(CamelModel):
    """Represents a single, immutable financial event of the ledger.

    The engine only ever reads transactions. Fields arrive already decrypted
    from the ledger store.

    Attributes:
        id: The unique identifier of the transaction.
        user_id: The owner of the transaction.
        amount: The non-negative value of the transaction.
        type: Whether the transaction is an income or an expense.
        category: A free-form category; expenses use the budget categories.
        description: An optional note.
        occurred_at: The moment the transaction is attributed to, exposed as
            `date` in JSON.
    """

    id: UUID
    user_id: str
    amount: Amount = Field(..., ge=0)
    type: TransactionType
    category: str
    description: str | None = None
    occurred_at: datetime = Field(..., alias="date")
