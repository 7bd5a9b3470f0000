"""
Kafka producer feeding score-transaction requests to the consumer.
"""

import json
import logging
from typing import Dict, Any, Iterable, Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from .data_simulator import TransactionSimulator


def _card_key(transaction: Dict[str, Any]) -> Optional[str]:
    # one card's transactions land on one partition, in order
    return (transaction.get("paymentDetails") or {}).get("cardLast4")


class TransactionProducer:
    """Publishes request bodies to the transactions topic."""

    def __init__(
        self,
        bootstrap_servers: str = "localhost:9092",
        topic: str = "payment-transactions",
        simulator: Optional[TransactionSimulator] = None,
        producer: Optional[KafkaProducer] = None,
        send_timeout: float = 10,
    ):
        self.topic = topic
        self.send_timeout = send_timeout
        self.simulator = simulator or TransactionSimulator()
        self.logger = logging.getLogger(__name__)
        self.producer = producer or KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            key_serializer=lambda k: k.encode("utf-8") if k else None,
            acks="all",
            retries=3,
        )
        self.sent = 0
        self.failed = 0

    @classmethod
    def from_config(
        cls, kafka_config: Dict[str, Any], simulator_config: Optional[Dict[str, Any]] = None
    ) -> "TransactionProducer":
        """Create a producer from the ``kafka`` and ``simulator`` config sections."""
        return cls(
            bootstrap_servers=kafka_config.get("bootstrap_servers", "localhost:9092"),
            topic=kafka_config.get("topic_transactions", "payment-transactions"),
            simulator=TransactionSimulator(simulator_config),
        )

    def send(self, transaction: Dict[str, Any], key: Optional[str] = None) -> bool:
        """Publish one request and wait for the broker to acknowledge it."""
        try:
            self.producer.send(
                self.topic, key=key or _card_key(transaction), value=transaction
            ).get(timeout=self.send_timeout)
        except KafkaError as e:
            self.failed += 1
            self.logger.error(f"Failed to publish transaction to {self.topic}: {e}")
            return False

        self.sent += 1
        return True

    def send_all(self, transactions: Iterable[Dict[str, Any]]) -> int:
        """Publish every request; returns how many were acknowledged."""
        return sum(1 for transaction in transactions if self.send(transaction))

    def stream_simulated(
        self, tps: int = 10, duration_seconds: int = 60, fraud_rate: Optional[float] = None
    ):
        """Publish simulated requests at ``tps`` until the duration runs out."""
        self.logger.info(f"Streaming simulated transactions at {tps}/s to {self.topic}")
        try:
            self.send_all(
                self.simulator.stream_transactions(tps, duration_seconds, fraud_rate)
            )
        except KeyboardInterrupt:
            self.logger.info("Simulated stream interrupted")
        self.logger.info(f"Simulated stream done: {self.sent} sent, {self.failed} failed")

    def close(self):
        self.producer.flush()
        self.producer.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
