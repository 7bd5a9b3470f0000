#!/usr/bin/env python3
"""
Script to start the fraud signal service.

Modes:
    api       serve POST /api/v1/score-transaction over HTTP
    consumer  score transactions read from the Kafka transactions topic
"""

import os
import sys
import argparse
import logging
import signal
import threading
from pathlib import Path

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from fraud_signals.api.app import create_app
from fraud_signals.config.config_loader import ConfigLoader
from fraud_signals.exceptions import ConfigurationError
from fraud_signals.ingestion.transaction_producer import TransactionProducer
from fraud_signals.processing.transaction_processor import (
    TransactionProcessor,
    TransactionProcessorConfig,
)
from fraud_signals.storage.transaction_repository import TransactionRepository


def setup_logging(level: str = "INFO", log_file: str = None):
    """Setup logging configuration."""
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


class ConsumerService:
    """Kafka consumer mode: scores every transaction on the topic."""

    def __init__(self, config: ConfigLoader, start_producer: bool = False):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.processor = None
        self.producer = None
        self.start_producer = start_producer

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        self.logger.info(f"Received signal {signum}, initiating shutdown...")
        self.stop()

    def initialize(self) -> bool:
        """Initialize repository, processor and optional producer."""
        repository = TransactionRepository.from_config(self.config.get_redis_config())
        if not repository.ping():
            self.logger.error("Redis is not reachable")
            return False
        self.logger.info("Redis connection established")

        self.processor = TransactionProcessor(
            TransactionProcessorConfig.from_loader(self.config).to_dict(),
            repository=repository,
        )
        self.processor.set_callbacks(fraud_callback=self._on_fraud)

        if not self.processor.initialize():
            return False

        if self.start_producer:
            self.producer = TransactionProducer.from_config(
                self.config.get_kafka_config(), self.config.get_simulator_config()
            )

        return True

    def _on_fraud(self, response):
        flagged = [s["signalType"] for s in response["fraudSignals"] if s["potentialFraud"]]
        self.logger.warning(
            f"Potential fraud on transaction {response['transactionId']}: {', '.join(flagged)}"
        )

    def start(self):
        if self.producer:
            thread = threading.Thread(
                target=self.producer.stream_simulated, kwargs={"tps": 10}, daemon=True
            )
            thread.start()
            self.logger.info("Transaction producer started in background")

        self.processor.start_consuming()
        self.logger.info(f"Final metrics: {self.processor.get_metrics()}")

    def stop(self):
        if self.processor:
            self.processor.stop_consuming()
        if self.producer:
            self.producer.close()
            self.producer = None


def main():
    """Main service script."""
    parser = argparse.ArgumentParser(description="Start the fraud signal service")
    parser.add_argument("mode", choices=["api", "consumer"], nargs="?", default="api")
    parser.add_argument("--config", default=None, help="Path to service config YAML")
    parser.add_argument("--host", default=None, help="API host (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="API port (overrides config)")
    parser.add_argument(
        "--start-producer",
        action="store_true",
        help="In consumer mode, also stream simulated transactions",
    )
    args = parser.parse_args()

    try:
        config = ConfigLoader(args.config)
        config.validate_config()
    except ConfigurationError as e:
        setup_logging()
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        return 1

    log_config = config.get_logging_config()
    setup_logging(log_config.get("level", "INFO"), log_config.get("file"))
    logger = logging.getLogger(__name__)

    if args.mode == "consumer":
        service = ConsumerService(config, start_producer=args.start_producer)
        if not service.initialize():
            logger.error("Failed to initialize consumer service")
            return 1
        service.start()
        return 0

    api = config.get_api_config()
    app = create_app(config)
    host = args.host or api.get("host", "0.0.0.0")
    port = args.port or api.get("port", 8080)
    logger.info(f"Starting scoring API on {host}:{port}")
    app.run(host=host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
