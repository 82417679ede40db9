"""Repository protocol definitions for domain layer."""

from .credit_card import CreditCardRepository
from .expense import ExpenseRepository
from .loan import LoanRepository
from .recurring_income import RecurringIncomeRepository
from .transaction import TransactionRepository
from .wallet import WalletRepository

__all__ = [
    "CreditCardRepository",
    "ExpenseRepository",
    "LoanRepository",
    "RecurringIncomeRepository",
    "TransactionRepository",
    "WalletRepository",
]
