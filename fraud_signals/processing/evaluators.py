"""
Rule evaluators. Each maps one transaction to one fraud signal.

Evaluators are stateless: all lookups go through the rule table passed in,
and the returned signal is built in one step from the table's verdict.
"""

import logging

from ..exceptions import InvalidInput
from ..models.fraud_signal import FraudSignal, SignalType
from ..models.transaction import Transaction
from .rule_table import RuleTable

logger = logging.getLogger(__name__)

TRANSACTION_NULL_OR_EMPTY = "Transaction cannot be null or empty"
LOCATION_DETAILS_MISSING = "Customer and merchant city/state cannot be null"
IP_ADDRESS_NULL_OR_EMPTY = "Transaction or IP address cannot be null or empty"
CARD_DETAILS_NULL_OR_EMPTY = "Transaction, customer name, or name on card cannot be null"


def check_location(transaction: Transaction, table: RuleTable) -> FraudSignal:
    """Compare customer and merchant city/state.

    An unknown state abbreviation on either side is flagged before any
    comparison. A state mismatch is flagged even when the cities agree.
    """
    if transaction is None:
        raise InvalidInput(TRANSACTION_NULL_OR_EMPTY)
    if (
        transaction.customer_city is None
        or transaction.customer_state is None
        or transaction.merchant_city is None
        or transaction.merchant_state is None
    ):
        raise InvalidInput(LOCATION_DETAILS_MISSING)

    if not (
        table.is_valid_state(transaction.customer_state)
        and table.is_valid_state(transaction.merchant_state)
    ):
        outcome = "invalid_state"
    else:
        same_city = _same(transaction.customer_city, transaction.merchant_city)
        same_state = _same(transaction.customer_state, transaction.merchant_state)
        logger.debug(f"same_city={same_city}, same_state={same_state}")

        if same_city and same_state:
            outcome = "locations_match"
        elif same_state:
            outcome = "same_state"
        else:
            outcome = "locations_differ"

    return table.signal(SignalType.LOCATION, outcome)


def check_ip_address(transaction: Transaction, table: RuleTable) -> FraudSignal:
    """Flag IPv4 addresses in the private ranges.

    Static prefix heuristic only; IPv6 never matches.
    """
    if transaction is None or not transaction.ip_address:
        raise InvalidInput(IP_ADDRESS_NULL_OR_EMPTY)

    if table.is_private_ip(transaction.ip_address):
        logger.debug(f"IP address {transaction.ip_address} is private")
        outcome = "private_range"
    else:
        outcome = "not_private"

    return table.signal(SignalType.IP_ADDRESS, outcome)


def check_transaction_details(transaction: Transaction, table: RuleTable) -> FraudSignal:
    """Flag a positive charge with no purchased items."""
    if (
        transaction is None
        or transaction.purchased_item_count is None
        or transaction.purchase_amount is None
    ):
        raise InvalidInput(TRANSACTION_NULL_OR_EMPTY)

    if transaction.purchased_item_count < 1 and transaction.purchase_amount > 0:
        outcome = "items_missing_for_amount"
    else:
        outcome = "unremarkable"

    return table.signal(SignalType.TRANSACTION, outcome)


def check_card_details(transaction: Transaction, table: RuleTable) -> FraudSignal:
    """Compare the customer name with the name on the card."""
    if (
        transaction is None
        or transaction.customer_name is None
        or transaction.name_on_card is None
    ):
        raise InvalidInput(CARD_DETAILS_NULL_OR_EMPTY)

    if _same(transaction.customer_name, transaction.name_on_card):
        outcome = "unremarkable"
    else:
        outcome = "name_mismatch"

    return table.signal(SignalType.CARD_DETAILS, outcome)


def _same(left: str, right: str) -> bool:
    # case-insensitive exact match, no trimming
    return left.lower() == right.lower()
