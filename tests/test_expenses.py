"""Expense payment flow tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from pocketwallet.errors import (
    AlreadyPaid,
    AlreadyUnpaid,
    CannotDeletePaid,
    CannotUpdatePaid,
    InsufficientFunds,
    InvalidAmount,
    InvalidDueDate,
    NotFound,
    Unauthorized,
)


def test_create_validates_amount_and_recurring_day(expenses, user):
    with pytest.raises(InvalidAmount):
        expenses.create("Water", 0, date(2024, 1, 5), user_id=user.id)
    with pytest.raises(InvalidAmount):
        expenses.create("Water", "-3", date(2024, 1, 5), user_id=user.id)
    with pytest.raises(InvalidDueDate):
        expenses.create("Water", 30, date(2024, 1, 5), user_id=user.id, recurring_day=32)

    created = expenses.create(
        "Water", "30", date(2024, 1, 5), user_id=user.id, is_recurring=True, recurring_day=5
    )
    assert created.is_paid is False
    assert created.amount == Decimal("30.00")


def test_list_is_ordered_by_due_date(expense_factory, expenses, user):
    expense_factory(name="Later", due_date=date(2024, 2, 1))
    expense_factory(name="Sooner", due_date=date(2024, 1, 2))

    assert [e.name for e in expenses.list(user_id=user.id)] == ["Sooner", "Later"]


def test_pay_then_unpay_restores_balance(expense_factory, expenses, ledger, user, fund):
    fund(200)
    expense = expense_factory(amount=75, category="Utilities")

    paid = expenses.mark_paid(expense.id, user_id=user.id)
    assert paid.is_paid is True
    assert paid.paid_date is not None
    assert ledger.balance(user_id=user.id) == Decimal("125.00")

    unpaid = expenses.mark_unpaid(expense.id, user_id=user.id)
    assert unpaid.is_paid is False
    assert unpaid.paid_date is None
    assert ledger.balance(user_id=user.id) == Decimal("200.00")

    related = ledger.transactions.list_for_entity("expense", expense.id, user_id=user.id)
    assert len(related) == 2
    reversal, payment = related
    assert payment.type == "expense"
    assert payment.amount == Decimal("-75.00")
    assert payment.description == "Expense Payment - Electricity"
    assert payment.category == "Utilities"
    assert reversal.type == "adjustment"
    assert reversal.amount == Decimal("75.00")
    assert reversal.description == "Reversed payment for: Electricity"


def test_insufficient_funds_leaves_expense_unpaid(expense_factory, expenses, ledger, user, fund):
    fund(50)
    expense = expense_factory(amount=75)

    with pytest.raises(InsufficientFunds):
        expenses.mark_paid(expense.id, user_id=user.id)

    assert expenses.get(expense.id, user_id=user.id).is_paid is False
    assert ledger.balance(user_id=user.id) == Decimal("50.00")
    assert ledger.transactions.count(user_id=user.id) == 1


def test_override_allows_negative_balance(expense_factory, expenses, ledger, user, fund):
    fund(50)
    expense = expense_factory(amount=75)

    expenses.mark_paid(expense.id, user_id=user.id, allow_negative_balance=True)

    assert ledger.balance(user_id=user.id) == Decimal("-25.00")


def test_double_pay_and_double_unpay(expense_factory, expenses, user, fund):
    fund(500)
    expense = expense_factory()

    with pytest.raises(AlreadyUnpaid):
        expenses.mark_unpaid(expense.id, user_id=user.id)
    expenses.mark_paid(expense.id, user_id=user.id)
    with pytest.raises(AlreadyPaid):
        expenses.mark_paid(expense.id, user_id=user.id)


def test_ownership_and_missing_expense(expense_factory, expenses, ledger, user, other_user, fund):
    fund(500)
    fund(500, owner=other_user)
    expense = expense_factory()

    with pytest.raises(Unauthorized):
        expenses.mark_paid(expense.id, user_id=other_user.id)
    with pytest.raises(NotFound):
        expenses.mark_paid(9999, user_id=user.id)
    assert ledger.balance(user_id=other_user.id) == Decimal("500.00")


def test_paid_expense_cannot_be_edited_or_deleted(expense_factory, expenses, user, fund):
    fund(500)
    expense = expense_factory()
    expenses.mark_paid(expense.id, user_id=user.id)

    with pytest.raises(CannotUpdatePaid):
        expenses.update(expense.id, {"amount": 10}, user_id=user.id)
    with pytest.raises(CannotDeletePaid):
        expenses.delete(expense.id, user_id=user.id)


def test_update_and_delete_unpaid_expense(expense_factory, expenses, user):
    expense = expense_factory()

    updated = expenses.update(
        expense.id, {"amount": "80.5", "name": " Power ", "recurring_day": 3}, user_id=user.id
    )
    assert updated.amount == Decimal("80.50")
    assert updated.name == "Power"
    assert updated.recurring_day == 3

    with pytest.raises(ValueError):
        expenses.update(expense.id, {"is_paid": True}, user_id=user.id)
    with pytest.raises(InvalidAmount):
        expenses.update(expense.id, {"amount": 0}, user_id=user.id)

    expenses.delete(expense.id, user_id=user.id)
    with pytest.raises(NotFound):
        expenses.get(expense.id, user_id=user.id)
