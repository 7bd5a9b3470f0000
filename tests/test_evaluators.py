"""
Tests for the four rule evaluators.
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from fraud_signals.exceptions import InvalidInput
from fraud_signals.models.fraud_signal import SignalType
from fraud_signals.processing.evaluators import (
    check_card_details,
    check_ip_address,
    check_location,
    check_transaction_details,
)


class TestLocationEvaluator:
    """Location rule"""

    def test_same_city_and_state_is_not_fraud(self, valid_transaction, rule_table):
        transaction = replace(valid_transaction, merchant_city="Springfield")

        signal = check_location(transaction, rule_table)

        assert signal.signal_type is SignalType.LOCATION
        assert signal.potential_fraud is False
        assert signal.details == ("locations match",)

    def test_same_state_different_city_is_not_fraud(self, valid_transaction, rule_table):
        signal = check_location(valid_transaction, rule_table)

        assert signal.potential_fraud is False
        assert signal.details == ("same state",)

    def test_different_state_is_fraud(self, valid_transaction, rule_table):
        transaction = replace(valid_transaction, merchant_city="Chicago", merchant_state="MO")

        signal = check_location(transaction, rule_table)

        assert signal.potential_fraud is True
        assert signal.details == ("locations differ", "potential fraud risk")

    def test_state_mismatch_dominates_city_match(self, valid_transaction, rule_table):
        transaction = replace(
            valid_transaction, merchant_city="Springfield", merchant_state="MO"
        )

        signal = check_location(transaction, rule_table)

        assert signal.potential_fraud is True
        assert signal.details == ("locations differ", "potential fraud risk")

    @pytest.mark.parametrize(
        "customer_state, merchant_state",
        [("XX", "IL"), ("IL", "XX"), ("DC", "DC"), ("", "IL"), ("ILL", "IL")],
    )
    def test_invalid_state_is_fraud(
        self, valid_transaction, rule_table, customer_state, merchant_state
    ):
        transaction = replace(
            valid_transaction,
            customer_state=customer_state,
            merchant_state=merchant_state,
        )

        signal = check_location(transaction, rule_table)

        assert signal.potential_fraud is True
        assert signal.details == ("invalid state abbreviation", "potential fraud risk")

    def test_invalid_state_short_circuits_matching_locations(
        self, valid_transaction, rule_table
    ):
        transaction = replace(
            valid_transaction,
            customer_city="Springfield",
            customer_state="XX",
            merchant_city="Springfield",
            merchant_state="XX",
        )

        signal = check_location(transaction, rule_table)

        assert signal.details == ("invalid state abbreviation", "potential fraud risk")

    def test_state_validation_is_case_insensitive(self, valid_transaction, rule_table):
        transaction = replace(
            valid_transaction,
            customer_state="il",
            merchant_city="Springfield",
            merchant_state="IL",
        )

        signal = check_location(transaction, rule_table)

        assert signal.potential_fraud is False
        assert signal.details == ("locations match",)

    def test_city_comparison_is_case_insensitive(self, valid_transaction, rule_table):
        transaction = replace(
            valid_transaction,
            customer_city="Chicago",
            merchant_city="CHICAGO",
        )

        signal = check_location(transaction, rule_table)

        assert signal.details == ("locations match",)

    @pytest.mark.parametrize(
        "field", ["customer_city", "customer_state", "merchant_city", "merchant_state"]
    )
    def test_missing_location_field_raises(self, valid_transaction, rule_table, field):
        transaction = replace(valid_transaction, **{field: None})

        with pytest.raises(InvalidInput, match="city/state cannot be null"):
            check_location(transaction, rule_table)

    def test_null_transaction_raises(self, rule_table):
        with pytest.raises(InvalidInput):
            check_location(None, rule_table)


class TestIpAddressEvaluator:
    """IP address rule"""

    @pytest.mark.parametrize(
        "ip_address",
        [
            "10.0.0.1",
            "10.255.255.255",
            "192.168.0.10",
            "172.16.0.1",
            "172.31.255.255",
            "172.20.1.1",
            "172.+16.0.1",
        ],
    )
    def test_private_range_is_fraud(self, valid_transaction, rule_table, ip_address):
        signal = check_ip_address(replace(valid_transaction, ip_address=ip_address), rule_table)

        assert signal.signal_type is SignalType.IP_ADDRESS
        assert signal.potential_fraud is True
        assert signal.details == ("private range may mask origin via VPN",)

    @pytest.mark.parametrize(
        "ip_address",
        [
            "11.168.1.1",
            "8.8.8.8",
            "172.15.0.1",
            "172.32.0.1",
            "192.169.0.1",
            "100.10.0.1",
            "fd00::1",
            "::ffff:10.0.0.1",
        ],
    )
    def test_public_or_unsupported_address_is_not_fraud(
        self, valid_transaction, rule_table, ip_address
    ):
        signal = check_ip_address(replace(valid_transaction, ip_address=ip_address), rule_table)

        assert signal.potential_fraud is False
        assert signal.details == ("not known fraudulent or malicious",)

    @pytest.mark.parametrize(
        "ip_address",
        [
            "172.abc.0.1",
            "172.",
            "172",
            "172.-16.0.1",
            "172. 16.0.1",
            "172.1_6.0.1",
            "172.16 .0.1",
        ],
    )
    def test_malformed_second_octet_is_not_a_match(
        self, valid_transaction, rule_table, ip_address
    ):
        signal = check_ip_address(replace(valid_transaction, ip_address=ip_address), rule_table)

        assert signal.potential_fraud is False

    @pytest.mark.parametrize("ip_address", [None, ""])
    def test_missing_ip_address_raises(self, valid_transaction, rule_table, ip_address):
        with pytest.raises(InvalidInput, match="IP address cannot be null or empty"):
            check_ip_address(replace(valid_transaction, ip_address=ip_address), rule_table)


class TestTransactionDetailsEvaluator:
    """Transaction consistency rule"""

    def test_zero_items_with_positive_amount_is_fraud(self, valid_transaction, rule_table):
        transaction = replace(
            valid_transaction, purchased_item_count=0, purchase_amount=Decimal("100.00")
        )

        signal = check_transaction_details(transaction, rule_table)

        assert signal.signal_type is SignalType.TRANSACTION
        assert signal.potential_fraud is True
        assert signal.details == (
            "purchased item count < 1 while amount positive",
            "potential fraud risk",
        )

    def test_zero_items_with_zero_amount_is_not_fraud(self, valid_transaction, rule_table):
        transaction = replace(
            valid_transaction, purchased_item_count=0, purchase_amount=Decimal("0.00")
        )

        signal = check_transaction_details(transaction, rule_table)

        assert signal.potential_fraud is False
        assert signal.details == ("transaction details unremarkable",)

    def test_items_with_amount_is_not_fraud(self, valid_transaction, rule_table):
        signal = check_transaction_details(valid_transaction, rule_table)

        assert signal.potential_fraud is False

    def test_smallest_positive_amount_counts(self, valid_transaction, rule_table):
        transaction = replace(
            valid_transaction, purchased_item_count=0, purchase_amount=Decimal("0.01")
        )

        assert check_transaction_details(transaction, rule_table).potential_fraud is True

    @pytest.mark.parametrize("field", ["purchased_item_count", "purchase_amount"])
    def test_missing_field_raises(self, valid_transaction, rule_table, field):
        with pytest.raises(InvalidInput, match="Transaction cannot be null or empty"):
            check_transaction_details(replace(valid_transaction, **{field: None}), rule_table)

    def test_null_transaction_raises(self, rule_table):
        with pytest.raises(InvalidInput):
            check_transaction_details(None, rule_table)


class TestCardDetailsEvaluator:
    """Card details rule"""

    def test_name_mismatch_is_fraud(self, valid_transaction, rule_table):
        transaction = replace(valid_transaction, name_on_card="Mismatched Name")

        signal = check_card_details(transaction, rule_table)

        assert signal.signal_type is SignalType.CARD_DETAILS
        assert signal.potential_fraud is True
        assert signal.details == ("name on card does not match customer name",)

    def test_name_match_ignores_case(self, valid_transaction, rule_table):
        transaction = replace(valid_transaction, name_on_card="JOHN DOE")

        signal = check_card_details(transaction, rule_table)

        assert signal.potential_fraud is False
        assert signal.details == ("card details unremarkable",)

    def test_name_match_is_exact_otherwise(self, valid_transaction, rule_table):
        transaction = replace(valid_transaction, name_on_card="John  Doe")

        assert check_card_details(transaction, rule_table).potential_fraud is True

    @pytest.mark.parametrize("field", ["customer_name", "name_on_card"])
    def test_missing_name_raises(self, valid_transaction, rule_table, field):
        with pytest.raises(InvalidInput, match="name on card cannot be null"):
            check_card_details(replace(valid_transaction, **{field: None}), rule_table)
