"""Transaction repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from ...models.wallet import Transaction


@runtime_checkable
class TransactionRepository(Protocol):
    """Read access to the append-only ledger."""

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_recent(self, *, user_id: int, limit: int = 10, offset: int = 0) -> list[Transaction]:
        """List transactions newest first."""
        ...

    def latest(self, *, user_id: int) -> Optional[Transaction]:
        """Return the most recent transaction."""
        ...

    def list_for_entity(
        self, entity_type: str, entity_id: int, *, user_id: int
    ) -> list[Transaction]:
        """List transactions tied to one entity."""
        ...

    def search(
        self,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        txn_type: Optional[str] = None,
        category: Optional[str] = None,
        text: Optional[str] = None,
        user_id: int,
    ) -> list[Transaction]:
        """Filtered history, newest first."""
        ...
