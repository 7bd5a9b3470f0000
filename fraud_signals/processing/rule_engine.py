"""
Rule engine producing the four fraud signals for a transaction.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..exceptions import InvalidInput
from ..models.fraud_signal import FraudSignal, SignalCollection, SignalType
from ..models.transaction import Transaction
from .evaluators import (
    TRANSACTION_NULL_OR_EMPTY,
    check_card_details,
    check_ip_address,
    check_location,
    check_transaction_details,
)
from .rule_table import RuleTable, default_rule_table


@dataclass(frozen=True)
class Rule:
    """A named evaluator producing one signal type."""

    signal_type: SignalType
    evaluate: Callable[[Transaction, RuleTable], FraudSignal]


# Declaration order is the order of SignalCollection's fields.
RULES: Tuple[Rule, Rule, Rule, Rule] = (
    Rule(SignalType.LOCATION, check_location),
    Rule(SignalType.IP_ADDRESS, check_ip_address),
    Rule(SignalType.TRANSACTION, check_transaction_details),
    Rule(SignalType.CARD_DETAILS, check_card_details),
)


class RuleEngine:
    """Stateless evaluator of the fixed rule set."""

    def __init__(self, rule_table: Optional[RuleTable] = None, max_workers: int = 1):
        """Initialize the rule engine.

        With ``max_workers`` above one, rules run on a thread pool; the
        resulting collection keeps declaration order either way.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.rule_table = rule_table or default_rule_table()
        self.max_workers = max_workers
        self.logger = logging.getLogger(__name__)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return RULES

    def evaluate(self, transaction: Transaction) -> SignalCollection:
        """Run every rule against the transaction.

        Raises:
            InvalidInput: the transaction, or a field some rule needs, is missing.
                No signals are returned in that case.
        """
        if transaction is None:
            raise InvalidInput(TRANSACTION_NULL_OR_EMPTY)

        if self.max_workers > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(RULES))) as executor:
                # map() yields in submission order and re-raises the first failure
                signals = list(
                    executor.map(
                        lambda rule: rule.evaluate(transaction, self.rule_table), RULES
                    )
                )
        else:
            signals = [rule.evaluate(transaction, self.rule_table) for rule in RULES]

        for rule, signal in zip(RULES, signals):
            if signal.signal_type is not rule.signal_type:
                raise RuntimeError(
                    f"Rule {rule.signal_type.value} produced a {signal.signal_type.value} signal"
                )
            self.logger.info(
                f"{signal.signal_type.value} signal for transaction "
                f"{transaction.transaction_id}: fraud={signal.potential_fraud} "
                f"details={list(signal.details)}"
            )

        return SignalCollection(*signals)
