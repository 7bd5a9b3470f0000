"""
Flask application exposing the transaction scoring endpoint.
"""

import logging
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from ..config.config_loader import ConfigLoader
from ..exceptions import InvalidInput, StorageError
from ..processing.transaction_processor import (
    TransactionProcessor,
    TransactionProcessorConfig,
)
from ..storage.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)

scoring_bp = Blueprint("scoring", __name__)

MAX_LIMIT = 1000


def _processor() -> TransactionProcessor:
    return current_app.extensions["transaction_processor"]


@scoring_bp.route("/api/v1/score-transaction", methods=["POST"])
def score_transaction():
    """Score a transaction and return it with its fraud signals."""
    payload = request.get_json(silent=True)
    if payload is None and request.get_data():
        return jsonify({"error": "Request body must be valid JSON"}), 400

    try:
        response = _processor().score_transaction(payload)
        return jsonify(response)
    except InvalidInput as e:
        logger.warning(f"Rejected transaction: {e}")
        return jsonify({"error": str(e)}), 400
    except StorageError as e:
        logger.error(f"Storage failure while scoring transaction: {e}")
        return jsonify({"error": "Transaction storage unavailable"}), 503
    except Exception as e:
        logger.error(f"Error in score transaction endpoint: {e}")
        return jsonify({"error": "Internal server error"}), 500


@scoring_bp.route("/api/v1/transactions/<transaction_id>", methods=["GET"])
def get_transaction(transaction_id):
    """Get a stored transaction with its fraud signals."""
    repository = _processor().repository
    if repository is None:
        return jsonify({"error": "Transaction storage not configured"}), 404

    try:
        transaction = repository.get_transaction(transaction_id)
    except StorageError as e:
        logger.error(f"Error getting transaction {transaction_id}: {e}")
        return jsonify({"error": "Transaction storage unavailable"}), 503

    if transaction:
        return jsonify(transaction)
    return jsonify({"error": "Transaction not found"}), 404


def _limit() -> int:
    return max(1, min(request.args.get("limit", 100, type=int), MAX_LIMIT))


@scoring_bp.route("/api/v1/transactions", methods=["GET"])
def get_recent_transactions():
    """Get the ids of the most recently scored transactions, newest first."""
    repository = _processor().repository
    if repository is None:
        return jsonify({"error": "Transaction storage not configured"}), 404

    try:
        ids = repository.get_recent_transaction_ids(limit=_limit())
    except StorageError as e:
        logger.error(f"Error getting recent transactions: {e}")
        return jsonify({"error": "Transaction storage unavailable"}), 503

    return jsonify({"transactionIds": ids, "count": len(ids)})


@scoring_bp.route("/api/v1/audit-log", methods=["GET"])
def get_audit_log():
    """Get the most recent audit entries, newest first."""
    repository = _processor().repository
    if repository is None:
        return jsonify({"error": "Transaction storage not configured"}), 404

    try:
        entries = repository.get_audit_log(limit=_limit())
    except StorageError as e:
        logger.error(f"Error getting audit log: {e}")
        return jsonify({"error": "Transaction storage unavailable"}), 503

    return jsonify({"entries": [entry.to_dict() for entry in entries]})


@scoring_bp.route("/api/v1/metrics", methods=["GET"])
def get_metrics():
    """Get processing metrics."""
    return jsonify(_processor().get_metrics())


@scoring_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    status = _processor().health_check()
    code = 200 if status["status"] == "healthy" else 503
    return jsonify(status), code


def create_app(
    config: Optional[ConfigLoader] = None,
    processor: Optional[TransactionProcessor] = None,
) -> Flask:
    """Create the scoring application.

    Without an explicit processor, one is built from the configuration,
    backed by Redis.
    """
    app = Flask(__name__)
    CORS(app)

    if processor is None:
        config = config or ConfigLoader()
        repository = TransactionRepository.from_config(config.get_redis_config())
        processor = TransactionProcessor(
            TransactionProcessorConfig.from_loader(config).to_dict(),
            repository=repository,
        )

    app.extensions["transaction_processor"] = processor
    app.register_blueprint(scoring_bp)

    return app
