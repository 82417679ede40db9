"""Expense repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, runtime_checkable

from ...models.expense import Expense


@runtime_checkable
class ExpenseRepository(Protocol):
    """Repository for managing expense entities."""

    def get_by_id(self, expense_id: int, *, user_id: int) -> Optional[Expense]:
        """Retrieve an expense by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Expense]:
        """List expenses ordered by due date."""
        ...

    def list_unpaid(self, *, user_id: int) -> list[Expense]:
        """List unpaid expenses."""
        ...

    def total_unpaid(self, *, user_id: int) -> Decimal:
        """Sum of unpaid expense amounts."""
        ...

    def create(self, expense: Expense, *, user_id: int) -> Expense:
        """Create a new expense."""
        ...
