"""SQLModel implementation of the CreditCard repository."""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.credit_card import CreditCard, CreditCardPayment


class SQLModelCreditCardRepository:
    """SQLModel-based credit card repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, card_id: int, *, user_id: int) -> Optional[CreditCard]:
        """Retrieve a card by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(CreditCard).where(CreditCard.id == card_id, CreditCard.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[CreditCard]:
        """List all cards, active or not."""
        with self.session_factory() as session:
            statement = (
                select(CreditCard)
                .where(CreditCard.user_id == user_id)
                .order_by(CreditCard.due_day, CreditCard.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_active(self, *, user_id: int) -> list[CreditCard]:
        return [card for card in self.list_all(user_id=user_id) if card.is_active]

    def create(self, card: CreditCard, *, user_id: int) -> CreditCard:
        """Create a new card."""
        with self.session_factory() as session:
            card.user_id = user_id
            session.add(card)
            session.commit()
            session.refresh(card)
            session.expunge(card)
            return card

    def list_payments(self, card_id: int, *, user_id: int) -> list[CreditCardPayment]:
        """Return the card's payments, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(CreditCardPayment)
                .where(CreditCardPayment.user_id == user_id)
                .where(CreditCardPayment.credit_card_id == card_id)
                .order_by(CreditCardPayment.date, CreditCardPayment.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_total_paid(self, card_id: int, *, user_id: int) -> Decimal:
        return sum(
            (p.amount for p in self.list_payments(card_id, user_id=user_id)),
            Decimal("0.00"),
        )
