"""User model carrying identity and wallet preferences."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..timeutils import utcnow

PAYMENT_BEHAVIORS = ("warn", "disallow", "allow")
OVERPAYMENT_POLICIES = ("allow", "cap")


class User(SQLModel, table=True):
    """Application user; every other row is scoped by ``user_id``."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    # Preferences. The payment flows take an explicit override flag per call;
    # these only tell callers which default to offer.
    allow_negative_balance: bool = Field(default=False, nullable=False)
    start_of_week: int = Field(default=0, ge=0, le=6, description="0=Sunday..6=Saturday")
    payment_behavior: str = Field(default="warn", max_length=16)
    credit_card_overpayment: str = Field(default="cap", max_length=16)
