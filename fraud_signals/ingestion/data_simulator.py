"""
Data simulator for generating score-transaction requests.
"""

import random
import time
from decimal import Decimal
from typing import List, Dict, Any, Generator, Optional


class TransactionSimulator:
    """Simulates card transaction requests, some carrying fraud patterns."""

    fraud_patterns = (
        "state_mismatch",
        "private_ip",
        "empty_basket",
        "name_mismatch",
    )

    def __init__(self, config: Dict[str, Any] = None):
        """Initialize the transaction simulator."""
        self.config = config or {}
        self.fraud_rate = self.config.get("fraud_rate", 0.1)
        self.random = random.Random(self.config.get("seed"))

        self.merchants = self._load_merchants()
        self.cities = self._load_cities()
        self.customers = self._generate_customers()

        self.transaction_counter = 0

    def _load_merchants(self) -> List[Dict[str, Any]]:
        """Load merchant names with their typical basket sizes."""
        return [
            {"name": "Amazon", "max_items": 6},
            {"name": "Starbucks", "max_items": 3},
            {"name": "Walmart", "max_items": 20},
            {"name": "Shell", "max_items": 2},
            {"name": "Best Buy", "max_items": 3},
            {"name": "Target", "max_items": 15},
            {"name": "CVS Pharmacy", "max_items": 5},
            {"name": "Home Depot", "max_items": 12},
        ]

    def _load_cities(self) -> List[Dict[str, str]]:
        """Load US cities with their state abbreviations."""
        return [
            {"city": "New York", "state": "NY"},
            {"city": "Los Angeles", "state": "CA"},
            {"city": "San Diego", "state": "CA"},
            {"city": "Chicago", "state": "IL"},
            {"city": "Springfield", "state": "IL"},
            {"city": "Houston", "state": "TX"},
            {"city": "Dallas", "state": "TX"},
            {"city": "Phoenix", "state": "AZ"},
            {"city": "Philadelphia", "state": "PA"},
            {"city": "Seattle", "state": "WA"},
            {"city": "Kansas City", "state": "MO"},
            {"city": "Springfield", "state": "MO"},
        ]

    def _generate_customers(self) -> List[Dict[str, Any]]:
        """Generate customer profiles with a home city and card."""
        first_names = ["John", "Maria", "Wei", "Aisha", "Carlos", "Emma", "Noah", "Priya"]
        last_names = ["Doe", "Garcia", "Chen", "Khan", "Silva", "Smith", "Brown", "Patel"]

        customers = []
        for i in range(50):
            name = f"{self.random.choice(first_names)} {self.random.choice(last_names)}"
            customers.append(
                {
                    "name": name,
                    "home": self.random.choice(self.cities),
                    "card_last4": f"{self.random.randint(0, 9999):04d}",
                    "ip_address": self._public_ip(),
                }
            )
        return customers

    def _public_ip(self) -> str:
        # first octet avoids 10, 127, 172 and 192 so the address is never private
        first = self.random.choice([23, 34, 52, 64, 98, 104, 151, 203])
        rest = [self.random.randint(0, 255) for _ in range(3)]
        return ".".join(str(octet) for octet in [first] + rest)

    def _private_ip(self) -> str:
        kind = self.random.choice(["10", "172", "192"])
        if kind == "10":
            return f"10.{self.random.randint(0, 255)}.{self.random.randint(0, 255)}.{self.random.randint(1, 254)}"
        if kind == "172":
            return f"172.{self.random.randint(16, 31)}.{self.random.randint(0, 255)}.{self.random.randint(1, 254)}"
        return f"192.168.{self.random.randint(0, 255)}.{self.random.randint(1, 254)}"

    def generate_transaction(
        self, is_fraud: bool = False, fraud_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """Generate a single score-transaction request body."""
        if is_fraud and fraud_type is None:
            fraud_type = self.random.choice(self.fraud_patterns)
        if fraud_type is not None and fraud_type not in self.fraud_patterns:
            raise ValueError(f"Unknown fraud pattern: {fraud_type}")

        customer = self.random.choice(self.customers)
        merchant = self.random.choice(self.merchants)

        # Normal transactions happen in the customer's home state
        home = customer["home"]
        same_state = [c for c in self.cities if c["state"] == home["state"]]
        merchant_location = self.random.choice(same_state)

        ip_address = customer["ip_address"]
        name_on_card = customer["name"]
        item_count = self.random.randint(1, merchant["max_items"])
        amount = Decimal(self.random.randint(100, 50000)) / 100

        if fraud_type == "state_mismatch":
            merchant_location = self.random.choice(
                [c for c in self.cities if c["state"] != home["state"]]
            )
        elif fraud_type == "private_ip":
            ip_address = self._private_ip()
        elif fraud_type == "empty_basket":
            item_count = 0
        elif fraud_type == "name_mismatch":
            others = [c["name"] for c in self.customers if c["name"] != customer["name"]]
            name_on_card = self.random.choice(others)

        self.transaction_counter += 1

        return {
            "customerName": customer["name"],
            "ipAddress": ip_address,
            "location": {"city": home["city"], "state": home["state"]},
            "paymentDetails": {
                "cardLast4": customer["card_last4"],
                "nameOnCard": name_on_card,
                "purchaseAmount": str(amount),
            },
            "transactionDetails": {
                "merchantName": merchant["name"],
                "merchantLocation": {
                    "city": merchant_location["city"],
                    "state": merchant_location["state"],
                },
                "purchasedItemCount": item_count,
            },
        }

    def generate_transactions(
        self, count: int, fraud_rate: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """Generate multiple transactions, the first fraud_rate share fraudulent."""
        fraud_rate = self.fraud_rate if fraud_rate is None else fraud_rate
        fraud_count = int(count * fraud_rate)

        transactions = [
            self.generate_transaction(is_fraud=i < fraud_count) for i in range(count)
        ]

        # Shuffle to mix fraud and normal transactions
        self.random.shuffle(transactions)
        return transactions

    def stream_transactions(
        self, tps: int = 10, duration_seconds: int = 60, fraud_rate: Optional[float] = None
    ) -> Generator[Dict[str, Any], None, None]:
        """Stream transactions at the specified rate."""
        fraud_rate = self.fraud_rate if fraud_rate is None else fraud_rate

        for _ in range(tps * duration_seconds):
            yield self.generate_transaction(is_fraud=self.random.random() < fraud_rate)
            time.sleep(1.0 / tps)
