"""Wallet ledger: the single running balance and its append-only history.

Every balance change goes through :meth:`WalletLedger.post`, which updates the
wallet row and appends the matching ``Transaction`` inside the caller's session.
Payment flows call ``post`` in the same unit of work as their own entity
update, so the wallet, the ledger and the entity commit together or not at all.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from sqlmodel import Session, select

from ..errors import InsufficientFunds, InvalidAmount
from ..infra.repositories.transaction import SQLModelTransactionRepository
from ..infra.repositories.wallet import SQLModelWalletRepository
from ..logging_config import get_logger
from ..models.wallet import Transaction, TransactionType, Wallet
from ..money import MoneyLike, to_money
from ..timeutils import Clock, to_utc, utcnow
from .common import detach, require_user

logger = get_logger("ledger")

ADJUSTMENT_CATEGORY = "adjustment"


def _coerce_type(value: TransactionType | str) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError as exc:
        raise InvalidAmount(f"Unknown transaction type: {value!r}") from exc


class WalletLedger:
    """Owns wallet balances and the transaction log."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        clock: Clock = utcnow,
        recent_limit: int = 10,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.recent_limit = recent_limit
        self.transactions = SQLModelTransactionRepository(session_factory)
        self.wallets = SQLModelWalletRepository(session_factory)

    def now(self) -> datetime:
        return to_utc(self.clock())

    # ------------------------------------------------------------------
    # Wallet access
    # ------------------------------------------------------------------

    def _locked_wallet(self, session: Session, user_id: int) -> Wallet:
        """Load the user's wallet for update, opening it at zero on first use."""

        statement = select(Wallet).where(Wallet.user_id == user_id).with_for_update()
        wallet = session.exec(statement).first()
        if wallet is None:
            now = self.now()
            wallet = Wallet(
                user_id=user_id,
                current_balance=Decimal("0.00"),
                previous_balance=Decimal("0.00"),
                last_updated=now,
                cycle_start_date=now,
                created_at=now,
                updated_at=now,
            )
            session.add(wallet)
            session.flush()
            logger.info("Opened wallet", extra={"user_id": user_id})
        return wallet

    def get_wallet(self, *, user_id: Optional[int]) -> Optional[Wallet]:
        """Return the wallet without creating it."""

        return self.wallets.get_for_user(user_id=require_user(user_id))

    def get_or_create_wallet(self, *, user_id: Optional[int]) -> Wallet:
        """Return the user's wallet, creating an empty one if absent."""

        uid = require_user(user_id)
        with self.session_factory() as session:
            wallet = self._locked_wallet(session, uid)
            session.commit()
            detach(session, wallet)
            return wallet

    def balance(self, *, user_id: Optional[int]) -> Decimal:
        wallet = self.get_wallet(user_id=user_id)
        return wallet.current_balance if wallet else Decimal("0.00")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def post(
        self,
        session: Session,
        *,
        user_id: int,
        amount: MoneyLike,
        type: TransactionType | str,
        description: str,
        category: str,
        related_entity_type: Optional[str] = None,
        related_entity_id: Optional[int] = None,
        allow_negative: bool = False,
    ) -> Transaction:
        """Apply one balance change inside *session* without committing.

        Income is always credited as ``+abs(amount)``; every other type applies
        the signed amount as given. Raises ``InsufficientFunds`` before writing
        anything when the result would be negative and ``allow_negative`` is off.
        """

        txn_type = _coerce_type(type)
        value = to_money(amount)
        delta = abs(value) if txn_type is TransactionType.INCOME else value

        wallet = self._locked_wallet(session, user_id)
        current = to_money(wallet.current_balance)
        new_balance = current + delta

        if new_balance < 0 and not allow_negative:
            logger.warning(
                "Rejected ledger posting: insufficient funds",
                extra={
                    "user_id": user_id,
                    "balance": str(current),
                    "delta": str(delta),
                    "type": txn_type.value,
                },
            )
            raise InsufficientFunds(current, delta)

        now = self.now()
        wallet.previous_balance = current
        wallet.current_balance = new_balance
        wallet.last_updated = now
        wallet.updated_at = now
        session.add(wallet)

        txn = Transaction(
            user_id=user_id,
            date=now,
            amount=delta,
            type=txn_type.value,
            category=category,
            description=description,
            related_entity_type=related_entity_type,
            related_entity_id=related_entity_id,
            balance_after=new_balance,
            created_at=now,
        )
        session.add(txn)
        session.flush()

        logger.info(
            "Posted ledger transaction",
            extra={
                "user_id": user_id,
                "type": txn_type.value,
                "amount": str(delta),
                "balance_after": str(new_balance),
                "related_entity_type": related_entity_type,
                "related_entity_id": related_entity_id,
            },
        )
        return txn

    def debit_or_credit(
        self,
        amount: MoneyLike,
        type: TransactionType | str,
        description: str,
        category: str,
        related_entity_id: Optional[int] = None,
        *,
        user_id: Optional[int],
        related_entity_type: Optional[str] = None,
        allow_negative: bool = False,
    ) -> Transaction:
        """Post a single balance change as its own unit of work."""

        uid = require_user(user_id)
        with self.session_factory() as session:
            txn = self.post(
                session,
                user_id=uid,
                amount=amount,
                type=type,
                description=description,
                category=category,
                related_entity_type=related_entity_type,
                related_entity_id=related_entity_id,
                allow_negative=allow_negative,
            )
            session.commit()
            detach(session, txn)
            return txn

    def set_balance(
        self, new_balance: MoneyLike, reason: str, *, user_id: Optional[int]
    ) -> Transaction:
        """Overwrite the balance manually and record the difference.

        The balance rule is not checked: a manual override may go negative.
        """

        uid = require_user(user_id)
        target = to_money(new_balance)
        with self.session_factory() as session:
            wallet = self._locked_wallet(session, uid)
            current = to_money(wallet.current_balance)
            difference = target - current
            now = self.now()

            wallet.previous_balance = current
            wallet.current_balance = target
            wallet.last_updated = now
            wallet.updated_at = now
            session.add(wallet)

            txn = Transaction(
                user_id=uid,
                date=now,
                amount=abs(difference),
                type=(
                    TransactionType.INCOME.value
                    if difference >= 0
                    else TransactionType.EXPENSE.value
                ),
                category=ADJUSTMENT_CATEGORY,
                description=f"Manual balance adjustment: {reason}",
                balance_after=target,
                created_at=now,
            )
            session.add(txn)
            session.commit()
            logger.info(
                "Balance set manually",
                extra={
                    "user_id": uid,
                    "previous_balance": str(current),
                    "balance": str(target),
                    "reason": reason,
                },
            )
            detach(session, txn)
            return txn

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def recent_transactions(
        self, n: Optional[int] = None, *, user_id: Optional[int]
    ) -> list[Transaction]:
        """Return the ``n`` newest transactions, ``date`` descending."""

        limit = self.recent_limit if n is None else n
        if limit <= 0:
            return []
        return self.transactions.list_recent(user_id=require_user(user_id), limit=limit)

    def list_transactions(
        self,
        *,
        user_id: Optional[int],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        txn_type: Optional[TransactionType | str] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """Filtered transaction history, newest first."""

        return self.transactions.search(
            start_date=to_utc(start) if start else None,
            end_date=to_utc(end) if end else None,
            txn_type=_coerce_type(txn_type).value if txn_type else None,
            category=category,
            user_id=require_user(user_id),
        )


__all__ = ["ADJUSTMENT_CATEGORY", "WalletLedger"]
