"""Dashboard totals across the wallet and everything that feeds it."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Optional

from sqlmodel import Session

from ..infra.repositories.credit_card import SQLModelCreditCardRepository
from ..infra.repositories.expense import SQLModelExpenseRepository
from ..infra.repositories.loan import SQLModelLoanRepository
from ..infra.repositories.recurring_income import SQLModelRecurringIncomeRepository
from ..models.credit_card import CreditCard
from ..models.recurring_income import RecurringIncome
from ..money import ZERO, to_money
from .common import require_user
from .ledger import WalletLedger
from .schedule import RecurringSchedule, monthly_factor


@dataclass(slots=True)
class OverviewSummary:
    wallet_balance: Decimal
    monthly_income: Decimal
    monthly_card_payments_due: Decimal
    total_loan_balance: Decimal
    total_unpaid_expenses: Decimal


def monthly_income(incomes: Iterable[RecurringIncome]) -> Decimal:
    """Average monthly income across *incomes*."""

    total = sum(
        (
            Decimal(income.amount) * monthly_factor(RecurringSchedule.from_income(income))
            for income in incomes
        ),
        ZERO,
    )
    return to_money(total)


def card_payment_due(card: CreditCard) -> Decimal:
    """Minimum payment, or the full statement when no minimum is set."""

    balance = to_money(card.statement_balance)
    if balance <= 0:
        return ZERO
    if card.minimum_payment is None:
        return balance
    return min(to_money(card.minimum_payment), balance)


class OverviewService:
    def __init__(self, session_factory: Callable[[], Session], ledger: WalletLedger):
        self.ledger = ledger
        self.incomes = SQLModelRecurringIncomeRepository(session_factory)
        self.cards = SQLModelCreditCardRepository(session_factory)
        self.loans = SQLModelLoanRepository(session_factory)
        self.expenses = SQLModelExpenseRepository(session_factory)

    def summary(self, *, user_id: Optional[int]) -> OverviewSummary:
        uid = require_user(user_id)
        return OverviewSummary(
            wallet_balance=self.ledger.balance(user_id=uid),
            monthly_income=monthly_income(self.incomes.list_active(user_id=uid)),
            monthly_card_payments_due=sum(
                (card_payment_due(card) for card in self.cards.list_active(user_id=uid)), ZERO
            ),
            total_loan_balance=self.loans.get_total_balance(user_id=uid),
            total_unpaid_expenses=self.expenses.total_unpaid(user_id=uid),
        )


__all__ = ["OverviewService", "OverviewSummary", "card_payment_due", "monthly_income"]
