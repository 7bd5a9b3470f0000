"""
HTTP API for fraud signal scoring.

The Flask application lives in ``fraud_signals.api.app``.
"""

from .mapper import TransactionMapper

__all__ = ["TransactionMapper"]
