"""Loan payment flow and payoff projection tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from pocketwallet.errors import (
    InsufficientFunds,
    InvalidAmount,
    InvalidDueDate,
    NotFound,
    Unauthorized,
)
from pocketwallet.models import Loan
from pocketwallet.services.loans import project_payoff, split_payment


def test_payment_splits_interest_and_principal(loans, ledger, user, fund):
    fund(500)
    loan = loans.create("Car", 1000, user_id=user.id, interest_rate=12, monthly_payment=50)

    payment = loans.make_payment(loan.id, 50, user_id=user.id)

    assert payment.interest_paid == Decimal("10.00")
    assert payment.principal_paid == Decimal("40.00")
    assert loans.get(loan.id, user_id=user.id).current_balance == Decimal("960.00")
    assert ledger.balance(user_id=user.id) == Decimal("450.00")

    txn = ledger.transactions.get_by_id(payment.transaction_id, user_id=user.id)
    assert txn.type == "loan_payment"
    assert txn.amount == Decimal("-50.00")
    assert txn.category == "Loan"
    assert txn.description == "Loan Payment - Car"
    assert (txn.related_entity_type, txn.related_entity_id) == ("loan", loan.id)


def test_payment_without_rate_is_all_principal(loans, user, fund):
    fund(500)
    loan = loans.create("Family", 1000, user_id=user.id)

    payment = loans.make_payment(loan.id, 50, user_id=user.id)

    assert payment.principal_paid == Decimal("50.00")
    assert payment.interest_paid == Decimal("0.00")
    assert loans.get(loan.id, user_id=user.id).current_balance == Decimal("950.00")


def test_payment_below_interest_is_all_interest():
    split = split_payment(Decimal("5.00"), Decimal("1000.00"), Decimal("12"))

    assert split.interest == Decimal("5.00")
    assert split.principal == Decimal("0.00")


def test_interest_rounds_half_up():
    # 100.50 at 15% a year accrues 1.25625 in one month.
    split = split_payment(Decimal("5.00"), Decimal("100.50"), Decimal("15"))
    assert split.interest == Decimal("1.26")
    assert split.principal == Decimal("3.74")

    # Exactly half a cent rounds up.
    assert split_payment(Decimal("1.00"), Decimal("1.00"), Decimal("6")).interest == Decimal("0.01")


def test_paid_off_loan_becomes_inactive(loans, user, fund):
    fund(500)
    loan = loans.create("Phone", 120, user_id=user.id)

    loans.make_payment(loan.id, 120, user_id=user.id)

    refreshed = loans.get(loan.id, user_id=user.id)
    assert refreshed.current_balance == Decimal("0.00")
    assert refreshed.is_active is False
    assert loans.list_active(user_id=user.id) == []


def test_rejected_payment_leaves_loan_untouched(loans, ledger, user, fund):
    fund(20)
    loan = loans.create("Car", 1000, user_id=user.id, interest_rate=12)

    with pytest.raises(InsufficientFunds):
        loans.make_payment(loan.id, 50, user_id=user.id)
    with pytest.raises(InvalidAmount):
        loans.make_payment(loan.id, 0, user_id=user.id)

    assert loans.get(loan.id, user_id=user.id).current_balance == Decimal("1000.00")
    assert loans.payment_history(loan.id, user_id=user.id) == []
    assert ledger.balance(user_id=user.id) == Decimal("20.00")


def test_ownership_checks(loans, user, other_user, fund):
    fund(500, owner=other_user)
    loan = loans.create("Car", 1000, user_id=user.id)

    with pytest.raises(Unauthorized):
        loans.make_payment(loan.id, 10, user_id=other_user.id)
    with pytest.raises(NotFound):
        loans.make_payment(404, 10, user_id=user.id)


def test_create_validation(loans, user):
    with pytest.raises(InvalidDueDate):
        loans.create("Car", 1000, user_id=user.id, due_day=0)
    with pytest.raises(InvalidAmount):
        loans.create("Car", 0, user_id=user.id)
    with pytest.raises(InvalidAmount):
        loans.create("Car", 1000, user_id=user.id, interest_rate=-1)


def test_list_active_orders_by_due_day(loans, user):
    loans.create("Late", 100, user_id=user.id, due_day=28)
    loans.create("Early", 100, user_id=user.id, due_day=3)

    assert [loan.name for loan in loans.list_active(user_id=user.id)] == ["Early", "Late"]
    assert loans.total_balance(user_id=user.id) == Decimal("200.00")


def test_payment_history_links_transactions(loans, user, fund):
    fund(500)
    loan = loans.create("Car", 1000, user_id=user.id)
    first = loans.make_payment(loan.id, 10, user_id=user.id)
    second = loans.make_payment(loan.id, 20, user_id=user.id)

    history = loans.payment_history(loan.id, user_id=user.id)

    assert [p.id for p in history] == [first.id, second.id]
    assert first.transaction_id != second.transaction_id


def test_projection_runs_until_paid_off():
    loan = Loan(
        user_id=1,
        name="Laptop",
        initial_principal=Decimal("1000.00"),
        current_balance=Decimal("1000.00"),
        monthly_payment=Decimal("250.00"),
        due_day=15,
    )

    schedule = project_payoff(loan, today=date(2024, 1, 10))

    assert [row.due_date for row in schedule] == [
        date(2024, 1, 15),
        date(2024, 2, 15),
        date(2024, 3, 15),
        date(2024, 4, 15),
    ]
    assert schedule[-1].remaining_balance == Decimal("0.00")
    assert project_payoff(loan, months=2, today=date(2024, 1, 10))[-1].remaining_balance == Decimal(
        "500.00"
    )


def test_projection_clamps_due_day_to_month_end():
    loan = Loan(
        user_id=1,
        name="Loan",
        initial_principal=Decimal("300.00"),
        current_balance=Decimal("300.00"),
        monthly_payment=Decimal("100.00"),
        due_day=31,
    )

    schedule = project_payoff(loan, today=date(2024, 1, 31))

    assert [row.due_date for row in schedule] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
    ]


def test_estimated_end_date(loans, user):
    loan = loans.create(
        "Laptop", 1000, user_id=user.id, monthly_payment=250, due_day=15, start_date=date(2024, 1, 10)
    )
    assert loan.estimated_end_date == date(2024, 4, 15)

    never = loans.create("Underwater", 1000, user_id=user.id, interest_rate=24, monthly_payment=5)
    assert never.estimated_end_date is None

    updated = loans.update(loan.id, {"monthly_payment": 500}, user_id=user.id)
    refreshed = loans.refresh_estimated_end_date(updated.id, user_id=user.id, today=date(2024, 1, 10))
    assert refreshed.estimated_end_date == date(2024, 2, 15)


def test_update_rejects_balance_fields(loans, user):
    loan = loans.create("Car", 1000, user_id=user.id)

    with pytest.raises(ValueError):
        loans.update(loan.id, {"current_balance": 0}, user_id=user.id)

    renamed = loans.update(loan.id, {"name": "Truck", "lender": "Credit Union"}, user_id=user.id)
    assert (renamed.name, renamed.lender) == ("Truck", "Credit Union")
