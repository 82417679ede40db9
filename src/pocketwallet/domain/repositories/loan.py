"""Loan repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, runtime_checkable

from ...models.loan import Loan, LoanPayment


@runtime_checkable
class LoanRepository(Protocol):
    """Repository for managing loan entities."""

    def get_by_id(self, loan_id: int, *, user_id: int) -> Optional[Loan]:
        """Retrieve a loan by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Loan]:
        """List all loans."""
        ...

    def list_active(self, *, user_id: int) -> list[Loan]:
        """List active loans."""
        ...

    def create(self, loan: Loan, *, user_id: int) -> Loan:
        """Create a new loan."""
        ...

    def list_payments(self, loan_id: int, *, user_id: int) -> list[LoanPayment]:
        """Payment history, oldest first."""
        ...

    def get_total_balance(self, *, user_id: int) -> Decimal:
        """Outstanding balance across active loans."""
        ...
