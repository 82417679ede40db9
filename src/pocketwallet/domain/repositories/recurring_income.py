"""Recurring income repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, runtime_checkable

from ...models.recurring_income import RecurringIncome


@runtime_checkable
class RecurringIncomeRepository(Protocol):
    """Repository for managing recurring income entities."""

    def get_by_id(self, income_id: int, *, user_id: int) -> Optional[RecurringIncome]:
        """Retrieve a recurring income by ID."""
        ...

    def list_active(self, *, user_id: int) -> list[RecurringIncome]:
        """List active incomes."""
        ...

    def list_due(self, as_of: date, *, user_id: int) -> list[RecurringIncome]:
        """Active incomes due on or before *as_of*."""
        ...

    def create(self, income: RecurringIncome, *, user_id: int) -> RecurringIncome:
        """Create a new recurring income."""
        ...
