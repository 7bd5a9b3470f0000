"""
Transaction data model for fraud signal scoring.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Any

from ..exceptions import InvalidInput


@dataclass
class Transaction:
    """A single card transaction as seen by the rule engine.

    Rule-relevant fields are optional so that a missing value reaches the
    evaluator that needs it and is reported there.
    """

    # Customer
    customer_name: Optional[str] = None
    ip_address: Optional[str] = None
    customer_city: Optional[str] = None
    customer_state: Optional[str] = None

    # Payment
    card_last4: Optional[str] = None
    name_on_card: Optional[str] = None
    purchase_amount: Optional[Decimal] = None

    # Merchant
    merchant_name: Optional[str] = None
    merchant_city: Optional[str] = None
    merchant_state: Optional[str] = None
    purchased_item_count: Optional[int] = None

    # Assigned by the repository
    transaction_id: Optional[str] = None

    def __post_init__(self):
        """Validate transaction data after initialization."""
        if self.purchase_amount is not None:
            self.purchase_amount = to_decimal(self.purchase_amount)
            if self.purchase_amount < 0:
                raise InvalidInput("Purchase amount cannot be negative")

        if self.purchased_item_count is not None:
            if isinstance(self.purchased_item_count, bool) or not isinstance(
                self.purchased_item_count, int
            ):
                raise InvalidInput("Purchased item count must be an integer")
            if self.purchased_item_count < 0:
                raise InvalidInput("Purchased item count cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction to a flat dictionary for storage."""
        return {
            "transaction_id": self.transaction_id,
            "customer_name": self.customer_name,
            "ip_address": self.ip_address,
            "customer_city": self.customer_city,
            "customer_state": self.customer_state,
            "card_last4": self.card_last4,
            "name_on_card": self.name_on_card,
            "purchase_amount": str(self.purchase_amount)
            if self.purchase_amount is not None
            else None,
            "merchant_name": self.merchant_name,
            "merchant_city": self.merchant_city,
            "merchant_state": self.merchant_state,
            "purchased_item_count": self.purchased_item_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Create transaction from a flat dictionary."""
        return cls(
            transaction_id=data.get("transaction_id"),
            customer_name=data.get("customer_name"),
            ip_address=data.get("ip_address"),
            customer_city=data.get("customer_city"),
            customer_state=data.get("customer_state"),
            card_last4=data.get("card_last4"),
            name_on_card=data.get("name_on_card"),
            purchase_amount=data.get("purchase_amount"),
            merchant_name=data.get("merchant_name"),
            merchant_city=data.get("merchant_city"),
            merchant_state=data.get("merchant_state"),
            purchased_item_count=data.get("purchased_item_count"),
        )

    def __str__(self) -> str:
        return (
            f"Transaction(id={self.transaction_id}, merchant={self.merchant_name}, "
            f"amount={self.purchase_amount}, items={self.purchased_item_count})"
        )


def to_decimal(value: Any) -> Decimal:
    """Coerce a wire or storage amount to an exact Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid purchase amount: {value!r}")
    try:
        # str() first so floats keep their printed value, not their binary one
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidInput(f"Invalid purchase amount: {value!r}", cause=e)
    if not amount.is_finite():
        raise InvalidInput(f"Invalid purchase amount: {value!r}")
    return amount
