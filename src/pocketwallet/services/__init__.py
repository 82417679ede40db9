"""Service module exports."""

from . import (
    credit_cards,
    expenses,
    ledger,
    loans,
    overview,
    recurring_income,
    schedule,
    users,
)

__all__ = [
    "credit_cards",
    "expenses",
    "ledger",
    "loans",
    "overview",
    "recurring_income",
    "schedule",
    "users",
]
