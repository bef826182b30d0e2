"""
Base model class for SQLAlchemy ORM.

Re-exports the Base class from the database module together with the
timestamp helpers shared by all models.
"""

from datetime import datetime, timezone

from core.db import Base


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes read back from the database as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


__all__ = ["Base", "utcnow", "as_utc"]
