"""Concrete repository implementations using SQLModel."""

from .credit_card import SQLModelCreditCardRepository
from .expense import SQLModelExpenseRepository
from .loan import SQLModelLoanRepository
from .recurring_income import SQLModelRecurringIncomeRepository
from .transaction import SQLModelTransactionRepository
from .user import SQLModelUserRepository
from .wallet import SQLModelWalletRepository

__all__ = [
    "SQLModelCreditCardRepository",
    "SQLModelExpenseRepository",
    "SQLModelLoanRepository",
    "SQLModelRecurringIncomeRepository",
    "SQLModelTransactionRepository",
    "SQLModelUserRepository",
    "SQLModelWalletRepository",
]
