"""
Rule evaluation and transaction processing.
"""

from .rule_table import RuleTable, default_rule_table
from .rule_engine import Rule, RuleEngine, RULES
from .transaction_processor import TransactionProcessor, TransactionProcessorConfig

__all__ = [
    "RuleTable",
    "default_rule_table",
    "Rule",
    "RuleEngine",
    "RULES",
    "TransactionProcessor",
    "TransactionProcessorConfig",
]
