"""Exception taxonomy shared by the ledger and payment flows.

Every error is raised synchronously to the caller. Callers decide on messaging
and on re-invoking with an explicit override (for example retrying a payment
with ``allow_negative_balance=True`` after an ``InsufficientFunds``).
"""

from __future__ import annotations

from decimal import Decimal


class PocketWalletError(Exception):
    """Base exception for domain operations."""


class Unauthenticated(PocketWalletError):
    """No current user is available for the operation."""

    def __init__(self, message: str = "User must be authenticated"):
        super().__init__(message)


class Unauthorized(PocketWalletError):
    """The entity belongs to another user."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"Unauthorized access to {entity} {entity_id}")


class NotFound(PocketWalletError, LookupError):
    """The entity id does not resolve."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")


class InsufficientFunds(PocketWalletError):
    """The balance would go negative and no override was given."""

    def __init__(self, balance: Decimal, attempted: Decimal):
        self.balance = balance
        self.attempted = attempted
        super().__init__(
            f"Insufficient funds: balance {balance} cannot cover {abs(attempted)}"
        )


class AlreadyPaid(PocketWalletError):
    """Expense is already marked paid."""


class AlreadyUnpaid(PocketWalletError):
    """Expense is already marked unpaid."""


class PaymentExceedsBalance(PocketWalletError):
    """Credit card payment is above the statement balance and overpayment is off."""

    def __init__(self, amount: Decimal, statement_balance: Decimal):
        self.amount = amount
        self.statement_balance = statement_balance
        super().__init__(
            f"Payment {amount} exceeds statement balance {statement_balance} "
            "and overpayment is not allowed"
        )


class InvalidDueDate(PocketWalletError, ValueError):
    """Day of month outside 1..31."""


class InvalidAmount(PocketWalletError, ValueError):
    """Amount is missing, non-numeric or not positive."""


class InvalidSchedule(PocketWalletError, ValueError):
    """Recurring schedule is incomplete or uses an unsupported pattern."""


class CannotModifyPaid(PocketWalletError):
    """Mutation attempted on a settled expense."""


class CannotDeletePaid(CannotModifyPaid):
    """Paid expenses cannot be deleted."""


class CannotUpdatePaid(CannotModifyPaid):
    """Paid expenses cannot be edited."""


__all__ = [
    "AlreadyPaid",
    "AlreadyUnpaid",
    "CannotDeletePaid",
    "CannotModifyPaid",
    "CannotUpdatePaid",
    "InsufficientFunds",
    "InvalidAmount",
    "InvalidDueDate",
    "InvalidSchedule",
    "NotFound",
    "PaymentExceedsBalance",
    "PocketWalletError",
    "Unauthenticated",
    "Unauthorized",
]
