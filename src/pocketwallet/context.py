"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .config import BaseConfig
from .errors import Unauthenticated
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import (
    SQLModelCreditCardRepository,
    SQLModelExpenseRepository,
    SQLModelLoanRepository,
    SQLModelRecurringIncomeRepository,
    SQLModelTransactionRepository,
    SQLModelUserRepository,
    SQLModelWalletRepository,
)
from .logging_config import get_logger, setup_logging
from .models.user import User
from .services import users
from .services.credit_cards import CreditCardService
from .services.expenses import ExpenseService
from .services.ledger import WalletLedger
from .services.loans import LoanService
from .services.overview import OverviewService
from .services.recurring_income import RecurringIncomeService

logger = get_logger("context")


@dataclass
class AppContext:
    """Centralized application context with services and state."""

    # Configuration
    config: BaseConfig
    engine: Engine

    # Session factory
    session_factory: Callable[[], Session]

    # Repositories
    transaction_repo: SQLModelTransactionRepository
    wallet_repo: SQLModelWalletRepository
    expense_repo: SQLModelExpenseRepository
    loan_repo: SQLModelLoanRepository
    credit_card_repo: SQLModelCreditCardRepository
    recurring_income_repo: SQLModelRecurringIncomeRepository
    user_repo: SQLModelUserRepository

    # Services
    ledger: WalletLedger
    expenses: ExpenseService
    loans: LoanService
    credit_cards: CreditCardService
    recurring_income: RecurringIncomeService
    overview: OverviewService

    current_user: Optional[User] = None
    dev_mode: bool = False

    def require_user_id(self) -> int:
        """Return the current user id or raise if not set."""

        if self.current_user is None or self.current_user.id is None:
            raise Unauthenticated()
        return self.current_user.id


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    username: Optional[str] = users.LOCAL_USERNAME,
    configure_logging: bool = True,
) -> AppContext:
    """Create and initialize the application context.

    With a ``username`` the matching user is created if needed and becomes the
    current user; pass ``None`` to start without one.
    """

    if config is None:
        config = BaseConfig()
    if configure_logging:
        setup_logging(config)

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    ledger = WalletLedger(session_factory, recent_limit=config.RECENT_TRANSACTIONS)
    current_user = users.ensure_user(username, session_factory) if username else None

    logger.info(
        "Application context ready",
        extra={
            "database": engine.url.render_as_string(hide_password=True),
            "user_id": current_user.id if current_user else None,
        },
    )

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        transaction_repo=ledger.transactions,
        wallet_repo=ledger.wallets,
        expense_repo=SQLModelExpenseRepository(session_factory),
        loan_repo=SQLModelLoanRepository(session_factory),
        credit_card_repo=SQLModelCreditCardRepository(session_factory),
        recurring_income_repo=SQLModelRecurringIncomeRepository(session_factory),
        user_repo=SQLModelUserRepository(session_factory),
        ledger=ledger,
        expenses=ExpenseService(session_factory, ledger),
        loans=LoanService(session_factory, ledger),
        credit_cards=CreditCardService(session_factory, ledger),
        recurring_income=RecurringIncomeService(session_factory, ledger),
        overview=OverviewService(session_factory, ledger),
        current_user=current_user,
        dev_mode=config.DEV_MODE,
    )
