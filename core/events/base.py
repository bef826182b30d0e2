"""Base domain event class.

Domain events are immutable records of something that already happened,
named in past tense (UserStartedSponsoring, not StartSponsoring).

Usage:
    >>> @dataclass(frozen=True, kw_only=True, slots=True)
    ... class UserStartedSponsoring(DomainEvent):
    ...     user_id: int
    ...     sponsor_id: int
    >>>
    >>> event = UserStartedSponsoring(user_id=1, sponsor_id=7)
    >>> event.event_id  # auto-generated UUID
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """Base class for all domain events.

    Attributes:
        event_id: Unique identifier for this event instance.
        occurred_at: When the event happened (UTC).
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)
