"""Each payment flow commits its wallet, ledger and entity changes together."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from decimal import Decimal

import pytest
from sqlmodel import Session

from pocketwallet.services.credit_cards import CreditCardService
from pocketwallet.services.expenses import ExpenseService
from pocketwallet.services.ledger import WalletLedger
from pocketwallet.services.loans import LoanService


class CommitFailed(RuntimeError):
    pass


@pytest.fixture
def failing_factory(db_engine):
    """Session factory whose commit always fails, like a lost connection."""

    def _commit():
        raise CommitFailed("database went away")

    @contextmanager
    def factory():
        session = Session(db_engine, expire_on_commit=False)
        session.commit = _commit  # type: ignore[method-assign]
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@pytest.fixture
def failing_ledger(failing_factory, clock):
    return WalletLedger(failing_factory, clock=clock)


def test_failed_expense_payment_persists_nothing(
    failing_factory, failing_ledger, expense_factory, expenses, ledger, user, fund
):
    fund(200)
    expense = expense_factory(amount=75)
    broken = ExpenseService(failing_factory, failing_ledger)

    with pytest.raises(CommitFailed):
        broken.mark_paid(expense.id, user_id=user.id)

    assert expenses.get(expense.id, user_id=user.id).is_paid is False
    assert ledger.balance(user_id=user.id) == Decimal("200.00")
    assert ledger.transactions.count(user_id=user.id) == 1


def test_failed_loan_payment_persists_nothing(
    failing_factory, failing_ledger, loans, ledger, user, fund
):
    fund(200)
    loan = loans.create("Car", 1000, user_id=user.id, interest_rate=12)
    broken = LoanService(failing_factory, failing_ledger)

    with pytest.raises(CommitFailed):
        broken.make_payment(loan.id, 50, user_id=user.id)

    assert loans.get(loan.id, user_id=user.id).current_balance == Decimal("1000.00")
    assert loans.payment_history(loan.id, user_id=user.id) == []
    assert ledger.balance(user_id=user.id) == Decimal("200.00")


def test_failed_card_payment_persists_nothing(
    failing_factory, failing_ledger, credit_cards, ledger, user, fund
):
    fund(200)
    card = credit_cards.create("Visa", 500, date(2024, 1, 25), user_id=user.id)
    broken = CreditCardService(failing_factory, failing_ledger)

    with pytest.raises(CommitFailed):
        broken.make_payment(card.id, 100, user_id=user.id)

    assert credit_cards.get(card.id, user_id=user.id).statement_balance == Decimal("500.00")
    assert ledger.balance(user_id=user.id) == Decimal("200.00")


def test_failed_manual_adjustment_persists_nothing(failing_ledger, ledger, user, fund):
    fund(200)

    with pytest.raises(CommitFailed):
        failing_ledger.set_balance(0, "reset", user_id=user.id)

    assert ledger.balance(user_id=user.id) == Decimal("200.00")
    assert ledger.transactions.count(user_id=user.id) == 1
