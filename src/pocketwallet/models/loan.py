"""Installment loans and their payment history."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..timeutils import utcnow


class Loan(SQLModel, table=True):
    """Amortizing debt paid down from the wallet."""

    __tablename__: ClassVar[str] = "loan"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    lender: str = Field(default="", max_length=80)
    initial_principal: Decimal = Field(max_digits=12, decimal_places=2)
    current_balance: Decimal = Field(max_digits=12, decimal_places=2)
    interest_rate: Optional[Decimal] = Field(
        default=None, max_digits=6, decimal_places=3, description="Annual percent"
    )
    monthly_payment: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    due_day: int = Field(default=1, ge=1, le=31)
    start_date: date = Field(default_factory=date.today)
    estimated_end_date: Optional[date] = Field(default=None)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class LoanPayment(SQLModel, table=True):
    """One entry of a loan's payment history."""

    __tablename__: ClassVar[str] = "loan_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    loan_id: int = Field(foreign_key="loan.id", nullable=False, index=True)
    transaction_id: Optional[int] = Field(default=None, foreign_key="transaction.id")
    date: datetime = Field(default_factory=utcnow, nullable=False)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    principal_paid: Decimal = Field(max_digits=12, decimal_places=2)
    interest_paid: Decimal = Field(max_digits=12, decimal_places=2)
