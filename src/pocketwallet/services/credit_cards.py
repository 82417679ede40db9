"""Credit card payment flow and statement bookkeeping."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from sqlmodel import Session

from ..errors import InvalidDueDate, PaymentExceedsBalance
from ..infra.repositories.credit_card import SQLModelCreditCardRepository
from ..logging_config import get_logger
from ..models.credit_card import CreditCard, CreditCardPayment
from ..models.wallet import TransactionType
from ..money import MoneyLike, non_negative_money, positive_money, to_money
from ..timeutils import add_months, to_utc
from .common import detach, load_owned, require_user, validate_day_of_month
from .ledger import WalletLedger

logger = get_logger("credit_cards")

ENTITY = "credit_card"
CARD_CATEGORY = "Credit Card"


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return to_utc(value)
    return datetime(value.year, value.month, value.day)


def _next_statement(due_date: date) -> datetime:
    """Statement closing one month after *due_date*."""

    return add_months(_as_datetime(due_date), 1)


class CreditCardService:
    """Cards whose statement balance is paid from the wallet."""

    def __init__(self, session_factory: Callable[[], Session], ledger: WalletLedger):
        self.session_factory = session_factory
        self.ledger = ledger
        self.repo = SQLModelCreditCardRepository(session_factory)

    def create(
        self,
        name: str,
        statement_balance: MoneyLike,
        due_date: date,
        minimum_payment: Optional[MoneyLike] = None,
        allow_overpayment: bool = False,
        *,
        user_id: Optional[int],
    ) -> CreditCard:
        """Open a card; ``due_day`` is taken from *due_date*."""

        uid = require_user(user_id)
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Card name is required")

        now = self.ledger.now()
        card = CreditCard(
            user_id=uid,
            name=cleaned,
            statement_balance=non_negative_money(statement_balance, field="statement_balance"),
            due_day=due_date.day,
            minimum_payment=(
                None
                if minimum_payment is None
                else non_negative_money(minimum_payment, field="minimum_payment")
            ),
            allow_overpayment=allow_overpayment,
            is_active=True,
            last_statement_date=now,
            next_statement_date=_next_statement(due_date),
            created_at=now,
            updated_at=now,
        )
        return self.repo.create(card, user_id=uid)

    def get(self, card_id: int, *, user_id: Optional[int]) -> CreditCard:
        uid = require_user(user_id)
        with self.session_factory() as session:
            card = load_owned(session, CreditCard, card_id, user_id=uid, entity=ENTITY)
            session.expunge(card)
            return card

    def list(self, *, user_id: Optional[int]) -> list[CreditCard]:
        return self.repo.list_all(user_id=require_user(user_id))

    def list_active(self, *, user_id: Optional[int]) -> list[CreditCard]:
        return self.repo.list_active(user_id=require_user(user_id))

    def payment_history(
        self, card_id: int, *, user_id: Optional[int]
    ) -> list[CreditCardPayment]:
        uid = require_user(user_id)
        with self.session_factory() as session:
            load_owned(session, CreditCard, card_id, user_id=uid, entity=ENTITY)
        return self.repo.list_payments(card_id, user_id=uid)

    def total_paid(self, card_id: int, *, user_id: Optional[int]) -> Decimal:
        uid = require_user(user_id)
        with self.session_factory() as session:
            load_owned(session, CreditCard, card_id, user_id=uid, entity=ENTITY)
        return self.repo.get_total_paid(card_id, user_id=uid)

    def make_payment(
        self,
        card_id: int,
        amount: MoneyLike,
        *,
        user_id: Optional[int],
        allow_negative_balance: bool = False,
    ) -> CreditCardPayment:
        """Pay *amount* toward the statement balance.

        The overpayment check runs before the wallet is touched, so a rejected
        payment leaves both the card and the wallet unchanged.
        """

        uid = require_user(user_id)
        with self.session_factory() as session:
            card = load_owned(session, CreditCard, card_id, user_id=uid, entity=ENTITY)
            value = positive_money(amount)
            statement_balance = to_money(card.statement_balance)

            if not card.allow_overpayment and value > statement_balance:
                logger.warning(
                    "Rejected card payment above statement balance",
                    extra={
                        "user_id": uid,
                        "credit_card_id": card_id,
                        "amount": str(value),
                        "statement_balance": str(statement_balance),
                    },
                )
                raise PaymentExceedsBalance(value, statement_balance)

            txn = self.ledger.post(
                session,
                user_id=uid,
                amount=-value,
                type=TransactionType.CREDIT_CARD_PAYMENT,
                description=f"Credit Card Payment - {card.name}",
                category=CARD_CATEGORY,
                related_entity_type=ENTITY,
                related_entity_id=card.id,
                allow_negative=allow_negative_balance,
            )

            now = self.ledger.now()
            card.statement_balance = statement_balance - value
            card.updated_at = now
            session.add(card)

            payment = CreditCardPayment(
                user_id=uid,
                credit_card_id=card.id,
                transaction_id=txn.id,
                date=now,
                amount=value,
                statement_period_start=card.last_statement_date,
                statement_period_end=card.next_statement_date,
            )
            session.add(payment)
            session.commit()
            detach(session, payment)

        logger.info(
            "Credit card payment applied",
            extra={"user_id": uid, "credit_card_id": card_id, "amount": str(value)},
        )
        return payment

    def update_statement_balance(
        self,
        card_id: int,
        new_balance: MoneyLike,
        new_due_date: date,
        *,
        user_id: Optional[int],
    ) -> CreditCard:
        """Start a new statement cycle. The wallet is not involved."""

        uid = require_user(user_id)
        with self.session_factory() as session:
            card = load_owned(session, CreditCard, card_id, user_id=uid, entity=ENTITY)
            now = self.ledger.now()
            card.statement_balance = non_negative_money(new_balance, field="statement_balance")
            card.due_day = new_due_date.day
            card.last_statement_date = now
            card.next_statement_date = _next_statement(new_due_date)
            card.updated_at = now
            session.add(card)
            session.commit()
            detach(session, card)

        logger.info(
            "Statement balance updated",
            extra={"user_id": uid, "credit_card_id": card_id, "balance": str(card.statement_balance)},
        )
        return card

    def update_due_date(self, card_id: int, day: int, *, user_id: Optional[int]) -> CreditCard:
        uid = require_user(user_id)
        if day is None:
            raise InvalidDueDate("due_day is required")
        due_day = validate_day_of_month(day)
        with self.session_factory() as session:
            card = load_owned(session, CreditCard, card_id, user_id=uid, entity=ENTITY)
            card.due_day = due_day
            card.updated_at = self.ledger.now()
            session.add(card)
            session.commit()
            detach(session, card)
            return card


__all__ = ["CARD_CATEGORY", "CreditCardService"]
