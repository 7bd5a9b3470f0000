"""Shared fixtures for fraud signal tests."""

import copy
from decimal import Decimal
from typing import Any, Dict

import pytest

from fraud_signals.models.transaction import Transaction
from fraud_signals.processing.rule_table import default_rule_table

VALID_REQUEST: Dict[str, Any] = {
    "customerName": "John Doe",
    "ipAddress": "11.168.1.1",
    "location": {"city": "Springfield", "state": "IL"},
    "paymentDetails": {
        "cardLast4": "1234",
        "nameOnCard": "John Doe",
        "purchaseAmount": "100.00",
    },
    "transactionDetails": {
        "merchantName": "Merchant Name",
        "merchantLocation": {"city": "Chicago", "state": "IL"},
        "purchasedItemCount": 1,
    },
}


@pytest.fixture
def valid_request() -> Dict[str, Any]:
    """A score-transaction request body that raises no fraud signals."""
    return copy.deepcopy(VALID_REQUEST)


@pytest.fixture
def valid_transaction() -> Transaction:
    """The Transaction equivalent of valid_request."""
    return Transaction(
        customer_name="John Doe",
        ip_address="11.168.1.1",
        customer_city="Springfield",
        customer_state="IL",
        card_last4="1234",
        name_on_card="John Doe",
        purchase_amount=Decimal("100.00"),
        merchant_name="Merchant Name",
        merchant_city="Chicago",
        merchant_state="IL",
        purchased_item_count=1,
    )


@pytest.fixture
def rule_table():
    return default_rule_table()
