"""Credit card repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, runtime_checkable

from ...models.credit_card import CreditCard, CreditCardPayment


@runtime_checkable
class CreditCardRepository(Protocol):
    """Repository for managing credit card entities."""

    def get_by_id(self, card_id: int, *, user_id: int) -> Optional[CreditCard]:
        """Retrieve a card by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[CreditCard]:
        """List all cards."""
        ...

    def list_active(self, *, user_id: int) -> list[CreditCard]:
        """List active cards."""
        ...

    def create(self, card: CreditCard, *, user_id: int) -> CreditCard:
        """Create a new card."""
        ...

    def list_payments(self, card_id: int, *, user_id: int) -> list[CreditCardPayment]:
        """Payments, oldest first."""
        ...

    def get_total_paid(self, card_id: int, *, user_id: int) -> Decimal:
        """Sum of all payments made to the card."""
        ...
