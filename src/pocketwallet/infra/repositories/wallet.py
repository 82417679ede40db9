"""SQLModel implementation of the Wallet repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.wallet import Wallet


class SQLModelWalletRepository:
    """SQLModel-based wallet repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_for_user(self, *, user_id: int) -> Optional[Wallet]:
        """Retrieve the user's wallet, if one was opened."""
        with self.session_factory() as session:
            wallet = session.exec(select(Wallet).where(Wallet.user_id == user_id)).first()
            if wallet:
                session.expunge(wallet)
            return wallet

    def list_for_user(self, *, user_id: int) -> list[Wallet]:
        """List every wallet row owned by the user (more than one means duplicates)."""
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(Wallet).where(Wallet.user_id == user_id).order_by(Wallet.id)  # type: ignore
                ).all()
            )
            session.expunge_all()
            return rows
