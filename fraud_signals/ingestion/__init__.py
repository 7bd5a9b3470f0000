"""
Data ingestion components for fraud signal scoring.
"""

from .data_simulator import TransactionSimulator
from .transaction_producer import TransactionProducer

__all__ = ["TransactionSimulator", "TransactionProducer"]
