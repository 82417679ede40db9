"""SQLModel implementation of the RecurringIncome repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.recurring_income import RecurringIncome


class SQLModelRecurringIncomeRepository:
    """SQLModel-based recurring income repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, income_id: int, *, user_id: int) -> Optional[RecurringIncome]:
        """Retrieve a recurring income by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(RecurringIncome).where(
                    RecurringIncome.id == income_id, RecurringIncome.user_id == user_id
                )
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_active(self, *, user_id: int) -> list[RecurringIncome]:
        """List active incomes by next scheduled date."""
        with self.session_factory() as session:
            statement = (
                select(RecurringIncome)
                .where(RecurringIncome.user_id == user_id)
                .where(RecurringIncome.is_active == True)  # noqa: E712
                .order_by(RecurringIncome.next_scheduled_date, RecurringIncome.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_due(self, as_of: date, *, user_id: int) -> list[RecurringIncome]:
        """Active incomes whose next scheduled date is on or before *as_of*."""
        return [
            income
            for income in self.list_active(user_id=user_id)
            if income.next_scheduled_date <= as_of
        ]

    def create(self, income: RecurringIncome, *, user_id: int) -> RecurringIncome:
        """Create a new recurring income."""
        with self.session_factory() as session:
            income.user_id = user_id
            session.add(income)
            session.commit()
            session.refresh(income)
            session.expunge(income)
            return income
