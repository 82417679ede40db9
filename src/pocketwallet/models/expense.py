"""One-off and recurring expense bills."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..timeutils import utcnow


class Expense(SQLModel, table=True):
    """A bill that is paid out of the wallet."""

    __tablename__: ClassVar[str] = "expense"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80)
    description: Optional[str] = Field(default=None, max_length=255)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    category: str = Field(default="other", max_length=64)
    due_date: date = Field(nullable=False, index=True)
    is_paid: bool = Field(default=False, nullable=False)
    paid_date: Optional[datetime] = Field(default=None)
    is_recurring: bool = Field(default=False, nullable=False)
    recurring_day: Optional[int] = Field(default=None, ge=1, le=31)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
