"""
Storage components for fraud signal scoring.
"""

from .transaction_repository import TransactionRepository

__all__ = ["TransactionRepository"]
