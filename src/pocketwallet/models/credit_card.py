"""Credit cards, statement cycles and payments."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..timeutils import utcnow


class CreditCard(SQLModel, table=True):
    """Revolving card whose statement balance is paid from the wallet."""

    __tablename__: ClassVar[str] = "credit_card"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80)
    statement_balance: Decimal = Field(max_digits=12, decimal_places=2)
    due_day: int = Field(default=1, ge=1, le=31)
    minimum_payment: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    allow_overpayment: bool = Field(default=False, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    last_statement_date: datetime = Field(default_factory=utcnow, nullable=False)
    next_statement_date: datetime = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class CreditCardPayment(SQLModel, table=True):
    """A payment applied to a card within a statement period."""

    __tablename__: ClassVar[str] = "credit_card_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    credit_card_id: int = Field(foreign_key="credit_card.id", nullable=False, index=True)
    transaction_id: Optional[int] = Field(default=None, foreign_key="transaction.id")
    date: datetime = Field(default_factory=utcnow, nullable=False)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    statement_period_start: datetime = Field(nullable=False)
    statement_period_end: datetime = Field(nullable=False)
