"""
Mapping between the JSON wire format and the Transaction model.
"""

import re
from typing import Dict, Any, Iterable, Optional

from ..exceptions import InvalidInput
from ..models.fraud_signal import FraudSignal
from ..models.transaction import Transaction

TRANSACTION_NULL_OR_EMPTY = "Transaction cannot be null or empty"
ITEM_COUNT_NOT_INTEGER = "purchasedItemCount must be an integer"

_INTEGER = re.compile(r"-?[0-9]+")


class TransactionMapper:
    """Translates score-transaction requests and responses.

    Request shape::

        {
            "customerName": "...",
            "ipAddress": "...",
            "location": {"city": "...", "state": "..."},
            "paymentDetails": {"cardLast4": "...", "nameOnCard": "...",
                               "purchaseAmount": 100.00},
            "transactionDetails": {"merchantName": "...",
                                   "merchantLocation": {"city": "...", "state": "..."},
                                   "purchasedItemCount": 1}
        }
    """

    @staticmethod
    def to_transaction(data: Optional[Dict[str, Any]]) -> Transaction:
        """Map a request body to a Transaction.

        Missing nested objects leave the corresponding fields unset; the rule
        engine decides which of them are required.
        """
        if data is None:
            raise InvalidInput(TRANSACTION_NULL_OR_EMPTY)
        if not isinstance(data, dict):
            raise InvalidInput("Transaction must be a JSON object")

        location = _section(data, "location")
        payment = _section(data, "paymentDetails")
        details = _section(data, "transactionDetails")
        merchant_location = _section(details, "merchantLocation")

        return Transaction(
            customer_name=_text(data, "customerName"),
            ip_address=_text(data, "ipAddress"),
            customer_city=_text(location, "city"),
            customer_state=_text(location, "state"),
            card_last4=_text(payment, "cardLast4"),
            name_on_card=_text(payment, "nameOnCard"),
            purchase_amount=payment.get("purchaseAmount"),
            merchant_name=_text(details, "merchantName"),
            merchant_city=_text(merchant_location, "city"),
            merchant_state=_text(merchant_location, "state"),
            purchased_item_count=_item_count(details.get("purchasedItemCount")),
        )

    @staticmethod
    def to_response(
        transaction: Transaction, signals: Iterable[FraudSignal]
    ) -> Dict[str, Any]:
        """Echo the transaction back with its fraud signals."""
        if transaction is None:
            raise InvalidInput(TRANSACTION_NULL_OR_EMPTY)
        if signals is None:
            raise InvalidInput("Fraud signals cannot be null")

        amount = transaction.purchase_amount
        return {
            "transactionId": transaction.transaction_id,
            "customerName": transaction.customer_name,
            "ipAddress": transaction.ip_address,
            "location": {
                "city": transaction.customer_city,
                "state": transaction.customer_state,
            },
            "paymentDetails": {
                "cardLast4": transaction.card_last4,
                "nameOnCard": transaction.name_on_card,
                "purchaseAmount": str(amount) if amount is not None else None,
            },
            "transactionDetails": {
                "merchantName": transaction.merchant_name,
                "merchantLocation": {
                    "city": transaction.merchant_city,
                    "state": transaction.merchant_state,
                },
                "purchasedItemCount": transaction.purchased_item_count,
            },
            "fraudSignals": [signal.to_dict() for signal in signals],
        }


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidInput(f"{key} must be a JSON object")
    return value


def _text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise InvalidInput(f"{key} must be a string")


def _item_count(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidInput(ITEM_COUNT_NOT_INTEGER)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        return int(value.strip())
    raise InvalidInput(ITEM_COUNT_NOT_INTEGER)
