"""Recurring income sources."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..timeutils import utcnow


class RecurringIncome(SQLModel, table=True):
    """Income that recurs on a weekly, biweekly, monthly or custom schedule."""

    __tablename__: ClassVar[str] = "recurring_income"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    category: str = Field(default="Uncategorized", max_length=64)
    description: Optional[str] = Field(default=None, max_length=255)

    schedule_type: str = Field(nullable=False, max_length=16)  # weekly | biweekly | monthly | custom
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)  # 0=Sunday..6=Saturday
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    custom_pattern: Optional[str] = Field(default=None, max_length=64)

    start_date: date = Field(nullable=False)
    end_date: Optional[date] = Field(default=None)
    next_scheduled_date: date = Field(nullable=False, index=True)
    last_processed: Optional[datetime] = Field(default=None)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
