"""SQLModel table exports."""

from .credit_card import CreditCard, CreditCardPayment
from .expense import Expense
from .loan import Loan, LoanPayment
from .recurring_income import RecurringIncome
from .user import User
from .wallet import Transaction, TransactionType, Wallet

__all__ = [
    "CreditCard",
    "CreditCardPayment",
    "Expense",
    "Loan",
    "LoanPayment",
    "RecurringIncome",
    "Transaction",
    "TransactionType",
    "User",
    "Wallet",
]
