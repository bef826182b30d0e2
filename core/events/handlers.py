"""Default domain event handlers."""

from dataclasses import asdict

from core.logging import get_logger

from .auth_events import GithubCredentialsUpdated
from .base import DomainEvent
from .bus import EventBus
from .sponsor_events import UserStartedSponsoring, UserStoppedSponsoring

logger = get_logger("events.handlers")


def log_event(event: DomainEvent) -> None:
    """Write every domain event to the structured log."""
    payload = {
        key: value
        for key, value in asdict(event).items()
        if key not in ("event_id", "occurred_at")
    }
    logger.info(
        "domain_event",
        event_type=type(event).__name__,
        event_id=str(event.event_id),
        **payload,
    )


def queue_sponsor_status_sync(event: GithubCredentialsUpdated) -> None:
    """Re-check sponsorship whenever a user's GitHub credentials change."""
    from workers.tasks.sponsor_tasks import synchronize_sponsor_status_task

    synchronize_sponsor_status_task.delay(event.user_id)
    logger.info("sponsor_sync_queued", user_id=event.user_id, reason="credentials_updated")


def register_default_handlers(bus: EventBus) -> None:
    for event_type in (GithubCredentialsUpdated, UserStartedSponsoring, UserStoppedSponsoring):
        bus.subscribe(event_type, log_event)

    bus.subscribe(GithubCredentialsUpdated, queue_sponsor_status_sync)  # type: ignore[arg-type]
