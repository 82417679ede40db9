"""Pytest configuration and shared fixtures for PocketWallet tests.

This module provides database fixtures, a controllable clock, service fixtures
and small data factories for testing the ledger and payment flows without
touching the real application database.
"""

from __future__ import annotations

import tempfile
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
from sqlmodel import Session, create_engine

from pocketwallet.infra.database import (
    create_session_factory,
    init_database,
    install_sqlite_immediate_transactions,
)
from pocketwallet.models import TransactionType, User
from pocketwallet.services import users
from pocketwallet.services.credit_cards import CreditCardService
from pocketwallet.services.expenses import ExpenseService
from pocketwallet.services.ledger import WalletLedger
from pocketwallet.services.loans import LoanService
from pocketwallet.services.overview import OverviewService
from pocketwallet.services.recurring_income import RecurringIncomeService

# =============================================================================
# Clock
# =============================================================================


class TickingClock:
    """Deterministic clock that moves forward a fixed step on every read."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(datetime(2024, 1, 10, 9, 0, 0))


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to the test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    install_sqlite_immediate_transactions(engine)
    init_database(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """A plain session for arranging and inspecting rows directly."""

    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Unit-of-work factory, the same one the application uses."""

    return create_session_factory(db_engine)


# =============================================================================
# Users
# =============================================================================


@pytest.fixture
def user(session_factory) -> User:
    return users.ensure_user("tester", session_factory)


@pytest.fixture
def other_user(session_factory) -> User:
    return users.ensure_user("intruder", session_factory)


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def ledger(session_factory, clock) -> WalletLedger:
    return WalletLedger(session_factory, clock=clock)


@pytest.fixture
def expenses(session_factory, ledger) -> ExpenseService:
    return ExpenseService(session_factory, ledger)


@pytest.fixture
def loans(session_factory, ledger) -> LoanService:
    return LoanService(session_factory, ledger)


@pytest.fixture
def credit_cards(session_factory, ledger) -> CreditCardService:
    return CreditCardService(session_factory, ledger)


@pytest.fixture
def recurring_income(session_factory, ledger) -> RecurringIncomeService:
    return RecurringIncomeService(session_factory, ledger)


@pytest.fixture
def overview(session_factory, ledger) -> OverviewService:
    return OverviewService(session_factory, ledger)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def fund(ledger, user):
    """Credit the test user's wallet.

    Returns:
        Callable: ``fund(amount, owner=None)`` posting an income transaction
    """

    def _fund(amount, owner: User | None = None):
        owner = owner or user
        return ledger.debit_or_credit(
            amount, TransactionType.INCOME, "Opening balance", "seed", user_id=owner.id
        )

    return _fund


@pytest.fixture
def expense_factory(expenses, user):
    """Factory for creating unpaid expenses with sensible defaults."""

    def _create_expense(
        name: str = "Electricity",
        amount="75.00",
        due_date: date = date(2024, 1, 20),
        owner: User | None = None,
        **kwargs,
    ):
        owner = owner or user
        return expenses.create(name, amount, due_date, user_id=owner.id, **kwargs)

    return _create_expense
