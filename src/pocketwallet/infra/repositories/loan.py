"""SQLModel implementation of the Loan repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.loan import Loan, LoanPayment


class SQLModelLoanRepository:
    """SQLModel-based loan repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, loan_id: int, *, user_id: int) -> Optional[Loan]:
        """Retrieve a loan by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Loan).where(Loan.id == loan_id, Loan.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Loan]:
        """List all loans."""
        with self.session_factory() as session:
            statement = (
                select(Loan).where(Loan.user_id == user_id).order_by(Loan.name)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self, *, user_id: int) -> list[Loan]:
        """List active loans ordered by the day of month they fall due."""
        with self.session_factory() as session:
            statement = (
                select(Loan)
                .where(Loan.user_id == user_id)
                .where(Loan.is_active == True)  # noqa: E712
                .order_by(Loan.due_day, Loan.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, loan: Loan, *, user_id: int) -> Loan:
        """Create a new loan."""
        with self.session_factory() as session:
            loan.user_id = user_id
            session.add(loan)
            session.commit()
            session.refresh(loan)
            session.expunge(loan)
            return loan

    def list_payments(self, loan_id: int, *, user_id: int) -> list[LoanPayment]:
        """Return the payment history, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(LoanPayment)
                .where(LoanPayment.user_id == user_id)
                .where(LoanPayment.loan_id == loan_id)
                .order_by(LoanPayment.date, LoanPayment.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_total_balance(self, *, user_id: int) -> Decimal:
        """Outstanding balance across active loans."""
        return sum(
            (loan.current_balance for loan in self.list_active(user_id=user_id)),
            Decimal("0.00"),
        )
