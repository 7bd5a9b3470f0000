"""
Redis-backed storage for scored transactions, their signals and audit log.
"""

import json
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Any, Iterable, Optional

import redis

from ..exceptions import StorageError
from ..models.audit_log import AuditLog, AuditOperation
from ..models.fraud_signal import FraudSignal
from ..models.transaction import Transaction

TRANSACTION_TABLE = "transaction"
SIGNAL_TABLE = "fraud_signal"


class TransactionRepository:
    """Stores transactions and fraud signals in Redis."""

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "fraud",
        ttl: Optional[int] = None,
        executed_by: str = "fraud-signals",
        max_recent: int = 10000,
        max_audit_entries: int = 10000,
    ):
        """Initialize the repository."""
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.ttl = ttl
        self.executed_by = executed_by
        self.max_recent = max_recent
        self.max_audit_entries = max_audit_entries
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, redis_config: Dict[str, Any]) -> "TransactionRepository":
        """Create a repository with its own Redis connection."""
        client = redis.Redis(
            host=redis_config.get("host", "localhost"),
            port=redis_config.get("port", 6379),
            db=redis_config.get("db", 0),
            decode_responses=True,
        )
        return cls(
            client,
            key_prefix=redis_config.get("key_prefix", "fraud"),
            ttl=redis_config.get("transaction_ttl"),
        )

    def _key(self, *parts: str) -> str:
        return ":".join((self.key_prefix,) + parts)

    @property
    def recent_key(self) -> str:
        return self._key("recent_transactions")

    @property
    def audit_key(self) -> str:
        return self._key("audit_log")

    def transaction_key(self, transaction_id: str) -> str:
        return self._key("transaction", transaction_id)

    def signals_key(self, transaction_id: str) -> str:
        return self._key("signals", transaction_id)

    def save_scored(
        self, transaction: Transaction, signals: Iterable[FraudSignal]
    ) -> Transaction:
        """Store a transaction and its signals, assigning the transaction a new id.

        Both records, the recent-id index and both audit entries are written
        in one MULTI/EXEC pipeline, so either all of them land or none do.
        Returns a copy of the transaction carrying the id.
        """
        saved = replace(transaction, transaction_id=str(uuid.uuid4()))
        transaction_id = saved.transaction_id
        data = saved.to_dict()
        payload = [signal.to_dict() for signal in signals]
        now = datetime.now(timezone.utc)

        try:
            pipe = self.redis.pipeline(transaction=True)
            pipe.set(self.transaction_key(transaction_id), json.dumps(data))
            pipe.set(self.signals_key(transaction_id), json.dumps(payload))
            if self.ttl:
                pipe.expire(self.transaction_key(transaction_id), self.ttl)
                pipe.expire(self.signals_key(transaction_id), self.ttl)
            pipe.zadd(self.recent_key, {transaction_id: now.timestamp()})
            # Keep only the newest max_recent ids
            pipe.zremrangebyrank(self.recent_key, 0, -self.max_recent - 1)
            self._queue_audit(pipe, self._audit(TRANSACTION_TABLE, transaction_id, data, now))
            self._queue_audit(
                pipe, self._audit(SIGNAL_TABLE, transaction_id, {"signals": payload}, now)
            )
            pipe.execute()
        except redis.RedisError as e:
            self.logger.error(f"Error saving transaction: {e}")
            raise StorageError(f"Failed to save transaction: {e}", cause=e)

        self.logger.info(
            f"Transaction saved with ID: {transaction_id} ({len(payload)} signals)"
        )
        return saved

    def get_transaction(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        """Get a stored transaction with its signals, or None."""
        try:
            raw_transaction = self.redis.get(self.transaction_key(transaction_id))
            if raw_transaction is None:
                return None
            raw_signals = self.redis.get(self.signals_key(transaction_id))
        except redis.RedisError as e:
            self.logger.error(f"Error getting transaction {transaction_id}: {e}")
            raise StorageError(f"Failed to read transaction: {e}", cause=e)

        data = json.loads(raw_transaction)
        data["signals"] = json.loads(raw_signals) if raw_signals else []
        return data

    def get_recent_transaction_ids(self, limit: int = 100) -> List[str]:
        """Get the ids of the most recently stored transactions."""
        try:
            return list(self.redis.zrevrange(self.recent_key, 0, limit - 1))
        except redis.RedisError as e:
            raise StorageError(f"Failed to read recent transactions: {e}", cause=e)

    def get_audit_log(self, limit: int = 100) -> List[AuditLog]:
        """Get the most recent audit entries, newest first."""
        try:
            entries = self.redis.lrange(self.audit_key, 0, limit - 1)
        except redis.RedisError as e:
            raise StorageError(f"Failed to read audit log: {e}", cause=e)
        return [AuditLog.from_dict(json.loads(entry)) for entry in entries]

    def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except redis.RedisError as e:
            self.logger.warning(f"Redis ping failed: {e}")
            return False

    def _queue_audit(self, pipe, entry: AuditLog):
        pipe.lpush(self.audit_key, entry.to_json())
        pipe.ltrim(self.audit_key, 0, self.max_audit_entries - 1)

    def _audit(
        self, table_name: str, record_id: str, new_state: Dict[str, Any], at: datetime
    ) -> AuditLog:
        return AuditLog(
            table_name=table_name,
            record_id=record_id,
            operation=AuditOperation.INSERT,
            executed_by=self.executed_by,
            new_state=new_state,
            executed_at=at,
        )
