"""
Tests for Transaction, FraudSignal, SignalCollection and AuditLog.
"""

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fraud_signals.exceptions import FraudSignalsError, InvalidInput
from fraud_signals.models import (
    AuditLog,
    AuditOperation,
    FraudSignal,
    SignalCollection,
    SignalType,
    Transaction,
)


class TestTransaction:
    def test_amount_is_coerced_to_decimal(self):
        transaction = Transaction(purchase_amount="100.10")

        assert transaction.purchase_amount == Decimal("100.10")

    def test_float_amount_keeps_printed_value(self):
        transaction = Transaction(purchase_amount=0.1)

        assert transaction.purchase_amount == Decimal("0.1")

    @pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity", True])
    def test_invalid_amount_raises(self, amount):
        with pytest.raises(InvalidInput, match="Invalid purchase amount"):
            Transaction(purchase_amount=amount)

    def test_negative_amount_raises(self):
        with pytest.raises(InvalidInput, match="negative"):
            Transaction(purchase_amount=Decimal("-0.01"))

    @pytest.mark.parametrize("count", [-1, 1.5, "2", True])
    def test_invalid_item_count_raises(self, count):
        with pytest.raises(InvalidInput):
            Transaction(purchased_item_count=count)

    def test_invalid_input_is_a_value_error(self):
        with pytest.raises(ValueError):
            Transaction(purchased_item_count=-1)

    def test_dict_round_trip_keeps_exact_amount(self, valid_transaction):
        data = valid_transaction.to_dict()

        assert data["purchase_amount"] == "100.00"
        assert Transaction.from_dict(data) == valid_transaction

    def test_str_mentions_merchant_and_amount(self, valid_transaction):
        text = str(valid_transaction)

        assert "Merchant Name" in text
        assert "100.00" in text


class TestFraudSignal:
    def test_details_are_stored_as_tuple(self):
        signal = FraudSignal(SignalType.LOCATION, False, ["same state"])

        assert signal.details == ("same state",)

    @pytest.mark.parametrize("details", [[], (), None, [""]])
    def test_empty_details_rejected(self, details):
        with pytest.raises(ValueError):
            FraudSignal(SignalType.LOCATION, False, details)

    def test_signal_is_immutable(self):
        signal = FraudSignal(SignalType.IP_ADDRESS, True, ("x",))

        with pytest.raises(dataclasses.FrozenInstanceError):
            signal.potential_fraud = False

    def test_wire_form(self):
        signal = FraudSignal(SignalType.CARD_DETAILS, True, ("a", "b"))

        assert signal.to_dict() == {
            "signalType": "CARD_DETAILS",
            "potentialFraud": True,
            "details": ["a", "b"],
        }
        assert FraudSignal.from_dict(signal.to_dict()) == signal


class TestSignalCollection:
    @pytest.fixture
    def collection(self):
        return SignalCollection(
            FraudSignal(SignalType.LOCATION, False, ("same state",)),
            FraudSignal(SignalType.IP_ADDRESS, True, ("private",)),
            FraudSignal(SignalType.TRANSACTION, False, ("ok",)),
            FraudSignal(SignalType.CARD_DETAILS, False, ("ok",)),
        )

    def test_fixed_size(self):
        with pytest.raises(TypeError):
            SignalCollection(FraudSignal(SignalType.LOCATION, False, ("x",)))

    def test_any_fraud_and_flagged(self, collection):
        assert collection.any_fraud
        assert [s.signal_type for s in collection.flagged] == [SignalType.IP_ADDRESS]

    def test_to_list_preserves_order(self, collection):
        assert [s["signalType"] for s in collection.to_list()] == [
            "LOCATION",
            "IP_ADDRESS",
            "TRANSACTION",
            "CARD_DETAILS",
        ]


class TestAuditLog:
    def test_round_trip(self):
        entry = AuditLog(
            table_name="transaction",
            record_id="abc",
            operation=AuditOperation.INSERT,
            executed_by="tester",
            new_state={"k": "v"},
            executed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        assert AuditLog.from_dict(entry.to_dict()) == entry


class TestExceptions:
    def test_cause_is_chained(self):
        original = KeyError("x")
        error = InvalidInput("bad", cause=original)

        assert error.__cause__ is original
        assert error.cause is original
        assert error.message == "bad"
        assert isinstance(error, FraudSignalsError)
