"""Expense payment flow: paying a bill out of the wallet and reversing it."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Mapping, Optional

from sqlmodel import Session

from ..errors import AlreadyPaid, AlreadyUnpaid, CannotDeletePaid, CannotUpdatePaid
from ..infra.repositories.expense import SQLModelExpenseRepository
from ..logging_config import get_logger
from ..models.expense import Expense
from ..models.wallet import TransactionType
from ..money import MoneyLike, positive_money
from .common import detach, load_owned, require_user, validate_day_of_month
from .ledger import WalletLedger

logger = get_logger("expenses")

ENTITY = "expense"
EDITABLE_FIELDS = frozenset(
    {"name", "description", "amount", "category", "due_date", "is_recurring", "recurring_day"}
)


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Expense name is required")
    return cleaned


class ExpenseService:
    """Create bills and settle them against the wallet."""

    def __init__(self, session_factory: Callable[[], Session], ledger: WalletLedger):
        self.session_factory = session_factory
        self.ledger = ledger
        self.repo = SQLModelExpenseRepository(session_factory)

    def create(
        self,
        name: str,
        amount: MoneyLike,
        due_date: date,
        *,
        user_id: Optional[int],
        category: str = "other",
        description: Optional[str] = None,
        is_recurring: bool = False,
        recurring_day: Optional[int] = None,
    ) -> Expense:
        uid = require_user(user_id)
        now = self.ledger.now()
        expense = Expense(
            user_id=uid,
            name=_clean_name(name),
            description=description,
            amount=positive_money(amount),
            category=category,
            due_date=due_date,
            is_paid=False,
            is_recurring=is_recurring,
            recurring_day=validate_day_of_month(recurring_day, field="recurring_day"),
            created_at=now,
            updated_at=now,
        )
        return self.repo.create(expense, user_id=uid)

    def get(self, expense_id: int, *, user_id: Optional[int]) -> Expense:
        uid = require_user(user_id)
        with self.session_factory() as session:
            expense = load_owned(session, Expense, expense_id, user_id=uid, entity=ENTITY)
            session.expunge(expense)
            return expense

    def list(self, *, user_id: Optional[int]) -> list[Expense]:
        """All expenses, soonest due first."""

        return self.repo.list_all(user_id=require_user(user_id))

    def list_unpaid(self, *, user_id: Optional[int]) -> list[Expense]:
        return self.repo.list_unpaid(user_id=require_user(user_id))

    def mark_paid(
        self, expense_id: int, *, user_id: Optional[int], allow_negative_balance: bool = False
    ) -> Expense:
        """Debit the expense amount and flag the expense paid, in one commit."""

        uid = require_user(user_id)
        with self.session_factory() as session:
            expense = load_owned(session, Expense, expense_id, user_id=uid, entity=ENTITY)
            if expense.is_paid:
                raise AlreadyPaid(f"Expense {expense_id} is already paid")

            self.ledger.post(
                session,
                user_id=uid,
                amount=-expense.amount,
                type=TransactionType.EXPENSE,
                description=f"Expense Payment - {expense.name}",
                category=expense.category,
                related_entity_type=ENTITY,
                related_entity_id=expense.id,
                allow_negative=allow_negative_balance,
            )

            now = self.ledger.now()
            expense.is_paid = True
            expense.paid_date = now
            expense.updated_at = now
            session.add(expense)
            session.commit()
            detach(session, expense)

        logger.info("Expense paid", extra={"user_id": uid, "expense_id": expense_id})
        return expense

    def mark_unpaid(self, expense_id: int, *, user_id: Optional[int]) -> Expense:
        """Credit the amount back and clear the paid flag.

        The credit is recorded as an ``adjustment`` so reports can tell
        reversals apart from real income.
        """

        uid = require_user(user_id)
        with self.session_factory() as session:
            expense = load_owned(session, Expense, expense_id, user_id=uid, entity=ENTITY)
            if not expense.is_paid:
                raise AlreadyUnpaid(f"Expense {expense_id} is not paid")

            self.ledger.post(
                session,
                user_id=uid,
                amount=expense.amount,
                type=TransactionType.ADJUSTMENT,
                description=f"Reversed payment for: {expense.name}",
                category=expense.category,
                related_entity_type=ENTITY,
                related_entity_id=expense.id,
                allow_negative=True,
            )

            expense.is_paid = False
            expense.paid_date = None
            expense.updated_at = self.ledger.now()
            session.add(expense)
            session.commit()
            detach(session, expense)

        logger.info("Expense payment reversed", extra={"user_id": uid, "expense_id": expense_id})
        return expense

    def update(
        self, expense_id: int, patch: Mapping[str, Any], *, user_id: Optional[int]
    ) -> Expense:
        """Apply *patch* to an unpaid expense."""

        uid = require_user(user_id)
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        with self.session_factory() as session:
            expense = load_owned(session, Expense, expense_id, user_id=uid, entity=ENTITY)
            if expense.is_paid:
                raise CannotUpdatePaid(f"Expense {expense_id} is paid and cannot be edited")

            for field, value in patch.items():
                if field == "name":
                    value = _clean_name(value)
                elif field == "amount":
                    value = positive_money(value)
                elif field == "recurring_day":
                    value = validate_day_of_month(value, field="recurring_day")
                setattr(expense, field, value)

            expense.updated_at = self.ledger.now()
            session.add(expense)
            session.commit()
            detach(session, expense)
            return expense

    def delete(self, expense_id: int, *, user_id: Optional[int]) -> None:
        uid = require_user(user_id)
        with self.session_factory() as session:
            expense = load_owned(session, Expense, expense_id, user_id=uid, entity=ENTITY)
            if expense.is_paid:
                raise CannotDeletePaid(f"Expense {expense_id} is paid and cannot be deleted")
            session.delete(expense)
            session.commit()
        logger.info("Expense deleted", extra={"user_id": uid, "expense_id": expense_id})


__all__ = ["EDITABLE_FIELDS", "ExpenseService"]
