from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import Column, DateTime


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """
    created_at / updated_at columns maintained by an explicit ``touch()``.

    Repositories call ``touch()`` at the start of every mutating operation
    on a loaded instance, and merge ``touched_values()`` into the values of
    every bulk UPDATE; there are no ORM-level defaults or update triggers,
    so a row written without being touched fails the NOT NULL constraint.
    """

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def touch(self, now: Optional[datetime] = None) -> datetime:
        now = now or utcnow()
        if self.created_at is None:
            self.created_at = now
        self.updated_at = now
        return now

    @staticmethod
    def touched_values(now: Optional[datetime] = None) -> Dict[str, datetime]:
        """``touch()`` for bulk UPDATE statements, which bypass instances."""
        return {"updated_at": now or utcnow()}
