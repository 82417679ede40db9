"""Wallet repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ...models.wallet import Wallet


@runtime_checkable
class WalletRepository(Protocol):
    def get_for_user(self, *, user_id: int) -> Optional[Wallet]:
        """Retrieve the user's wallet."""
        ...

    def list_for_user(self, *, user_id: int) -> list[Wallet]:
        """List all wallet rows for the user."""
        ...
