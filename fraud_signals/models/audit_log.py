"""
Audit log entries for stored records.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Any


class AuditOperation(Enum):
    """Audit operation enumeration."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class AuditLog:
    """A single change to a stored record."""

    table_name: str
    record_id: str
    operation: AuditOperation
    executed_by: str
    old_state: Optional[Dict[str, Any]] = None
    new_state: Optional[Dict[str, Any]] = None
    executed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "record_id": self.record_id,
            "operation": self.operation.value,
            "old_state": self.old_state,
            "new_state": self.new_state,
            "executed_by": self.executed_by,
            "executed_at": self.executed_at.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditLog":
        executed_at = data.get("executed_at")
        if isinstance(executed_at, str):
            executed_at = datetime.fromisoformat(executed_at.replace("Z", "+00:00"))

        return cls(
            table_name=data["table_name"],
            record_id=data["record_id"],
            operation=AuditOperation(data["operation"]),
            executed_by=data["executed_by"],
            old_state=data.get("old_state"),
            new_state=data.get("new_state"),
            executed_at=executed_at or datetime.now(timezone.utc),
        )
