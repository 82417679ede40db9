"""SQLModel implementation of the Expense repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.expense import Expense


class SQLModelExpenseRepository:
    """SQLModel-based expense repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, expense_id: int, *, user_id: int) -> Optional[Expense]:
        """Retrieve an expense by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Expense]:
        """List expenses ordered by due date."""
        with self.session_factory() as session:
            statement = (
                select(Expense)
                .where(Expense.user_id == user_id)
                .order_by(Expense.due_date, Expense.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_unpaid(self, *, user_id: int) -> list[Expense]:
        """List expenses still waiting for payment."""
        return [e for e in self.list_all(user_id=user_id) if not e.is_paid]

    def total_unpaid(self, *, user_id: int) -> Decimal:
        return sum((e.amount for e in self.list_unpaid(user_id=user_id)), Decimal("0.00"))

    def create(self, expense: Expense, *, user_id: int) -> Expense:
        """Create a new expense."""
        with self.session_factory() as session:
            expense.user_id = user_id
            session.add(expense)
            session.commit()
            session.refresh(expense)
            session.expunge(expense)
            return expense
