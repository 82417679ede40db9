"""SQLModel implementation of the Transaction repository."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.wallet import Transaction


def _newest_first(statement):
    return statement.order_by(Transaction.date.desc(), Transaction.id.desc())  # type: ignore


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation.

    Transactions are append-only, so there is no update or delete.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .where(Transaction.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_recent(self, *, user_id: int, limit: int = 10, offset: int = 0) -> list[Transaction]:
        """List the newest transactions; ties on ``date`` fall back to insertion order."""
        with self.session_factory() as session:
            statement = _newest_first(
                select(Transaction).where(Transaction.user_id == user_id)
            ).offset(offset).limit(limit)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def latest(self, *, user_id: int) -> Optional[Transaction]:
        """Return the most recent transaction."""
        rows = self.list_recent(user_id=user_id, limit=1)
        return rows[0] if rows else None

    def list_for_entity(
        self, entity_type: str, entity_id: int, *, user_id: int
    ) -> list[Transaction]:
        """List transactions tied to an expense, loan, card or income."""
        with self.session_factory() as session:
            statement = _newest_first(
                select(Transaction)
                .where(Transaction.user_id == user_id)
                .where(Transaction.related_entity_type == entity_type)
                .where(Transaction.related_entity_id == entity_id)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

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
        """Advanced search with multiple filters."""
        with self.session_factory() as session:
            statement = select(Transaction).where(Transaction.user_id == user_id)

            if start_date:
                statement = statement.where(Transaction.date >= start_date)
            if end_date:
                statement = statement.where(Transaction.date <= end_date)
            if txn_type:
                statement = statement.where(Transaction.type == txn_type)
            if category:
                statement = statement.where(Transaction.category == category)
            if text:
                statement = statement.where(Transaction.description.contains(text))  # type: ignore

            rows = list(session.exec(_newest_first(statement)).all())
            session.expunge_all()
            return rows

    def count(self, *, user_id: int) -> int:
        with self.session_factory() as session:
            statement = (
                select(func.count())
                .select_from(Transaction)
                .where(Transaction.user_id == user_id)
            )
            return int(session.exec(statement).one())
