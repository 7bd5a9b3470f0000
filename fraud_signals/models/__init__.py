"""
Data models for fraud signal scoring.
"""

from .transaction import Transaction
from .fraud_signal import FraudSignal, SignalCollection, SignalType
from .audit_log import AuditLog, AuditOperation

__all__ = [
    "Transaction",
    "FraudSignal",
    "SignalCollection",
    "SignalType",
    "AuditLog",
    "AuditOperation",
]
