"""
Rule-based fraud signal scoring for payment transactions.
"""

from .exceptions import (
    ConfigurationError,
    FraudSignalsError,
    InvalidInput,
    StorageError,
)
from .models import FraudSignal, SignalCollection, SignalType, Transaction
from .processing import RuleEngine

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "FraudSignalsError",
    "InvalidInput",
    "StorageError",
    "FraudSignal",
    "SignalCollection",
    "SignalType",
    "Transaction",
    "RuleEngine",
]
