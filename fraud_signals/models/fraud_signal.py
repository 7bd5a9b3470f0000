"""
Fraud signal data model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Any, NamedTuple, Tuple


class SignalType(Enum):
    """Signal type enumeration, one per rule."""

    LOCATION = "LOCATION"
    IP_ADDRESS = "IP_ADDRESS"
    TRANSACTION = "TRANSACTION"
    CARD_DETAILS = "CARD_DETAILS"


@dataclass(frozen=True)
class FraudSignal:
    """One rule's verdict about a transaction."""

    signal_type: SignalType
    potential_fraud: bool
    details: Tuple[str, ...]

    def __post_init__(self):
        details = tuple(self.details or ())
        if not details:
            raise ValueError("Signal details cannot be null or empty")
        if not all(isinstance(d, str) and d for d in details):
            raise ValueError("Signal details must be non-empty strings")
        # frozen, so bypass __setattr__ to normalise the list into a tuple
        object.__setattr__(self, "details", details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert signal to its wire representation."""
        return {
            "signalType": self.signal_type.value,
            "potentialFraud": self.potential_fraud,
            "details": list(self.details),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FraudSignal":
        """Create signal from its wire representation."""
        return cls(
            signal_type=SignalType(data["signalType"]),
            potential_fraud=bool(data["potentialFraud"]),
            details=tuple(data["details"]),
        )


class SignalCollection(NamedTuple):
    """The four signals produced for one transaction, in evaluation order."""

    location: FraudSignal
    ip_address: FraudSignal
    transaction: FraudSignal
    card_details: FraudSignal

    @property
    def any_fraud(self) -> bool:
        return any(signal.potential_fraud for signal in self)

    @property
    def flagged(self) -> List[FraudSignal]:
        return [signal for signal in self if signal.potential_fraud]

    def to_list(self) -> List[Dict[str, Any]]:
        return [signal.to_dict() for signal in self]
