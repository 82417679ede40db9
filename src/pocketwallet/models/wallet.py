"""Wallet balance and ledger transaction tables."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..timeutils import utcnow


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    LOAN_PAYMENT = "loan_payment"
    CREDIT_CARD_PAYMENT = "credit_card_payment"
    ADJUSTMENT = "adjustment"


class Wallet(SQLModel, table=True):
    """The user's single running cash balance."""

    __tablename__: ClassVar[str] = "wallet"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, unique=True, index=True)
    current_balance: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    previous_balance: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    last_updated: datetime = Field(default_factory=utcnow, nullable=False)
    cycle_start_date: datetime = Field(default_factory=utcnow, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)


class Transaction(SQLModel, table=True):
    """Immutable ledger entry recording one balance change."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    date: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    amount: Decimal = Field(max_digits=12, decimal_places=2, description="Signed as posted")
    type: str = Field(nullable=False, max_length=32, index=True)
    category: str = Field(default="", max_length=64)
    description: str = Field(default="", max_length=255)
    related_entity_type: Optional[str] = Field(default=None, max_length=32)
    related_entity_id: Optional[int] = Field(default=None, index=True)
    balance_after: Decimal = Field(max_digits=12, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
