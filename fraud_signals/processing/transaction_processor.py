"""
Transaction processor orchestrating mapping, scoring and storage.
"""

import json
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Dict, List, Any, Optional, Callable
from concurrent.futures import ThreadPoolExecutor, as_completed

from kafka import KafkaConsumer
from kafka.errors import KafkaError

from ..api.mapper import TRANSACTION_NULL_OR_EMPTY, TransactionMapper
from ..exceptions import FraudSignalsError, InvalidInput
from ..storage.transaction_repository import TransactionRepository
from .rule_engine import RuleEngine
from .rule_table import RuleTable


class TransactionProcessor:
    """Scores transactions from HTTP requests or a Kafka topic."""

    def __init__(
        self,
        config: Dict[str, Any],
        repository: Optional[TransactionRepository] = None,
        engine: Optional[RuleEngine] = None,
    ):
        """Initialize the transaction processor."""
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.repository = repository
        self.engine = engine or RuleEngine(
            rule_table=RuleTable.load(config["rules_path"])
            if config.get("rules_path")
            else None,
            max_workers=config.get("engine_max_workers", 1),
        )
        self.mapper = TransactionMapper()

        # Kafka configuration
        self.kafka_config = {
            "bootstrap_servers": config.get(
                "kafka_bootstrap_servers", "localhost:9092"
            ),
            "topic": config.get("kafka_topic_transactions", "payment-transactions"),
            "group_id": config.get("kafka_consumer_group", "fraud-signals-group"),
            "auto_offset_reset": "latest",
            "enable_auto_commit": True,
            "value_deserializer": _deserialize,
        }

        # Processing configuration
        self.max_workers = config.get("max_workers", 4)
        self.batch_size = config.get("batch_size", 100)
        self.batch_timeout = config.get("batch_timeout", 5.0)  # seconds

        self.consumer = None
        self.response_callback = None
        self.fraud_callback = None

        # Metrics
        self._metrics_lock = threading.Lock()
        self.metrics = {
            "transactions_processed": 0,
            "transactions_flagged": 0,
            "invalid_transactions": 0,
            "processing_errors": 0,
            "start_time": datetime.now(timezone.utc),
            "last_processed_time": None,
        }

    def _count(self, *keys: str):
        with self._metrics_lock:
            for key in keys:
                self.metrics[key] += 1

    def initialize(self) -> bool:
        """Create the Kafka consumer for the streaming path."""
        try:
            consumer_args = {
                k: v for k, v in self.kafka_config.items() if k != "topic"
            }
            self.consumer = KafkaConsumer(**consumer_args)
            self.consumer.subscribe([self.kafka_config["topic"]])
            self.logger.info("Transaction processor initialized successfully")
            return True
        except KafkaError as e:
            self.logger.error(f"Error initializing transaction processor: {e}")
            return False

    def set_callbacks(
        self,
        response_callback: Callable[[Dict[str, Any]], None] = None,
        fraud_callback: Callable[[Dict[str, Any]], None] = None,
    ):
        """Set callbacks for scored responses and for responses with fraud."""
        self.response_callback = response_callback
        self.fraud_callback = fraud_callback

    def score_transaction(self, request_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Score one transaction request and return the response body.

        The transaction is evaluated before it is stored, so a request
        rejected with InvalidInput leaves nothing behind.

        Raises:
            InvalidInput: the request or a field a rule needs is missing.
            StorageError: the repository could not persist the result.
        """
        if request_data is None:
            raise InvalidInput(TRANSACTION_NULL_OR_EMPTY)

        try:
            transaction = self.mapper.to_transaction(request_data)
            self.logger.info(f"Mapped transaction request to {transaction}")

            signals = self.engine.evaluate(transaction)
        except InvalidInput:
            self._count("invalid_transactions")
            raise

        if self.repository is not None:
            transaction = self.repository.save_scored(transaction, signals)

        self.logger.info(
            f"Generated {len(signals)} fraud signals for transaction ID: "
            f"{transaction.transaction_id} ({len(signals.flagged)} flagged)"
        )

        with self._metrics_lock:
            self.metrics["transactions_processed"] += 1
            if signals.any_fraud:
                self.metrics["transactions_flagged"] += 1
            self.metrics["last_processed_time"] = datetime.now(timezone.utc)

        response = self.mapper.to_response(transaction, signals)

        if self.response_callback:
            self.response_callback(response)
        if self.fraud_callback and signals.any_fraud:
            self.fraud_callback(response)

        return response

    def process_transaction(
        self, transaction_data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Score a streamed transaction, logging failures instead of raising."""
        try:
            return self.score_transaction(transaction_data)
        except InvalidInput as e:
            self.logger.warning(f"Rejected transaction: {e}")
            return None
        except FraudSignalsError as e:
            self._count("processing_errors")
            self.logger.error(f"Error processing transaction: {e}")
            return None

    def process_transactions_batch(
        self, transactions_data: List[Dict[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Process a batch of transactions in parallel."""
        responses = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_transaction = {
                executor.submit(self.process_transaction, txn_data): txn_data
                for txn_data in transactions_data
            }

            for future in as_completed(future_to_transaction):
                try:
                    response = future.result()
                    if response:
                        responses.append(response)
                except Exception as e:
                    self.logger.error(f"Error in batch processing: {e}")
                    self._count("processing_errors")

        return responses

    def start_consuming(self):
        """Start consuming transactions from Kafka."""
        if not self.consumer:
            raise RuntimeError("Transaction processor not initialized")

        self.logger.info(
            f"Starting to consume transactions from topic: {self.kafka_config['topic']}"
        )

        try:
            batch = []
            batch_start_time = time.time()

            for message in self.consumer:
                if message.value is None:
                    self.logger.warning(
                        f"Skipping undecodable message at offset {message.offset}"
                    )
                    self._count("processing_errors")
                    continue

                batch.append(message.value)

                current_time = time.time()
                if len(batch) >= self.batch_size or (
                    current_time - batch_start_time >= self.batch_timeout
                ):
                    responses = self.process_transactions_batch(batch)
                    self.logger.info(
                        f"Processed batch of {len(batch)} transactions, "
                        f"scored {len(responses)}"
                    )
                    batch = []
                    batch_start_time = current_time

            if batch:
                self.process_transactions_batch(batch)

        except KeyboardInterrupt:
            self.logger.info("Transaction consumption interrupted by user")
        except KafkaError as e:
            self.logger.error(f"Error in transaction consumption: {e}")
        finally:
            self.stop_consuming()

    def stop_consuming(self):
        """Stop consuming transactions."""
        if self.consumer:
            self.consumer.close()
            self.consumer = None
            self.logger.info("Transaction consumption stopped")

    def get_metrics(self) -> Dict[str, Any]:
        """Get processing metrics."""
        with self._metrics_lock:
            metrics = dict(self.metrics)

        uptime = (datetime.now(timezone.utc) - metrics["start_time"]).total_seconds()
        last = metrics["last_processed_time"]

        return {
            **metrics,
            "start_time": metrics["start_time"].isoformat(),
            "last_processed_time": last.isoformat() if last else None,
            "uptime_seconds": uptime,
            "transactions_per_second": metrics["transactions_processed"]
            / max(1, uptime),
            "fraud_rate": metrics["transactions_flagged"]
            / max(1, metrics["transactions_processed"]),
        }

    def health_check(self) -> Dict[str, Any]:
        """Perform health check on the processor."""
        health_status = {
            "status": "healthy",
            "components": {"rule_engine": "healthy"},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        if self.repository is None:
            health_status["components"]["repository"] = "not_configured"
        elif self.repository.ping():
            health_status["components"]["repository"] = "healthy"
        else:
            health_status["components"]["repository"] = "unreachable"
            health_status["status"] = "unhealthy"

        health_status["components"]["kafka_consumer"] = (
            "healthy" if self.consumer else "not_initialized"
        )

        return health_status


class TransactionProcessorConfig:
    """Configuration for transaction processor."""

    def __init__(self, **kwargs):
        """Initialize configuration."""
        # Kafka settings
        self.kafka_bootstrap_servers = kwargs.get(
            "kafka_bootstrap_servers", "localhost:9092"
        )
        self.kafka_topic_transactions = kwargs.get(
            "kafka_topic_transactions", "payment-transactions"
        )
        self.kafka_consumer_group = kwargs.get(
            "kafka_consumer_group", "fraud-signals-group"
        )

        # Processing settings
        self.max_workers = kwargs.get("max_workers", 4)
        self.batch_size = kwargs.get("batch_size", 100)
        self.batch_timeout = kwargs.get("batch_timeout", 5.0)
        self.engine_max_workers = kwargs.get("engine_max_workers", 1)
        self.rules_path = kwargs.get("rules_path")

    @classmethod
    def from_loader(cls, loader) -> "TransactionProcessorConfig":
        """Build processor settings from a ConfigLoader."""
        kafka = loader.get_kafka_config()
        processing = loader.get_processing_config()
        return cls(
            kafka_bootstrap_servers=kafka.get("bootstrap_servers", "localhost:9092"),
            kafka_topic_transactions=kafka.get(
                "topic_transactions", "payment-transactions"
            ),
            kafka_consumer_group=kafka.get("consumer_group", "fraud-signals-group"),
            max_workers=processing.get("max_workers", 4),
            batch_size=processing.get("batch_size", 100),
            batch_timeout=processing.get("batch_timeout", 5.0),
            engine_max_workers=loader.get("engine.max_workers", 1),
            rules_path=loader.get("rules.path"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "kafka_bootstrap_servers": self.kafka_bootstrap_servers,
            "kafka_topic_transactions": self.kafka_topic_transactions,
            "kafka_consumer_group": self.kafka_consumer_group,
            "max_workers": self.max_workers,
            "batch_size": self.batch_size,
            "batch_timeout": self.batch_timeout,
            "engine_max_workers": self.engine_max_workers,
            "rules_path": self.rules_path,
        }


def _deserialize(raw: bytes) -> Optional[Dict[str, Any]]:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
