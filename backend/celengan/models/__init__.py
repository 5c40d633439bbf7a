"""SQLAlchemy models package."""

from celengan.models.user import User
from celengan.models.transaction import Category, Transaction, TransactionType
from celengan.models.savings_target import Allocation, SavingsTarget

__all__ = [
    "User",
    "Category",
    "Transaction",
    "TransactionType",
    "SavingsTarget",
    "Allocation",
]
