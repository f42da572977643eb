"""Activity log service."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from factorybooks.database.base import Database
from factorybooks.domain.entities import ActivityLogEntry
from factorybooks.domain.errors import DomainError
from factorybooks.logging_config import get_logger

logger = get_logger("activity")


def _json_safe(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


class ActivityLogService:
    """Fire-and-forget trail of operator-facing actions."""

    def __init__(self, db: Database, user_id: Optional[str] = None):
        """Initialize activity log service.

        Args:
            db: Database instance
            user_id: Operator recorded on every entry
        """
        self.db = db
        self.user_id = user_id

    def log_activity(
        self,
        action: str,
        module: str,
        description: str,
        target_id: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Optional[str]:
        """Record an activity. A store failure is logged, never raised.

        Returns:
            The new entry's ID, or None if it could not be written
        """
        try:
            return self.db.add_activity_log(
                action=action,
                module=module,
                description=description,
                target_id=target_id,
                user_id=self.user_id,
                metadata=_json_safe(metadata or {}),
            )
        except DomainError as e:
            logger.warning(
                "activity log write failed",
                extra={"action": action, "activity_module": module, "error": str(e)},
            )
            return None

    def recent(self, limit: int = 50) -> list[ActivityLogEntry]:
        return self.db.list_activity_logs(limit=limit)
