"""
Domain events and the in-memory event bus.

Usage:
    from core.events import get_event_bus, UserStartedSponsoring

    get_event_bus().publish(UserStartedSponsoring(user_id=user.id, sponsor_id=sponsor.id))
"""

from .auth_events import GithubCredentialsUpdated
from .base import DomainEvent
from .bus import BufferedEventBus, EventBus, EventHandler, get_event_bus
from .sponsor_events import UserStartedSponsoring, UserStoppedSponsoring

__all__ = [
    "BufferedEventBus",
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "GithubCredentialsUpdated",
    "UserStartedSponsoring",
    "UserStoppedSponsoring",
]
