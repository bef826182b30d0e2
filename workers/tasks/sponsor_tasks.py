"""
Background tasks for GitHub sponsorship synchronization.

Rate Limited: GitHub's GraphQL API is shared by every queued user.
"""

from celery import shared_task

from core.api.github_api import GitHubAPIError
from core.config import get_settings
from core.db import db
from core.events import BufferedEventBus, get_event_bus
from core.logging import LogContext, get_logger
from core.repositories import UserRepository
from core.services import synchronize_sponsor_status

logger = get_logger("worker.sponsors")


def _ensure_db_initialized() -> None:
    if not db.is_initialized:
        db.initialize(get_settings().database_url)


@shared_task(
    bind=True,
    name="workers.tasks.sponsor_tasks.synchronize_sponsor_status",
    rate_limit="30/m",
    max_retries=3,
    default_retry_delay=60,
)
def synchronize_sponsor_status_task(self, user_id: int) -> dict:
    """
    Reconcile one user's sponsor record with GitHub.

    GitHub outages are retried; a revoked token is handled inside the
    service and counts as "not sponsoring".

    Args:
        user_id: User to synchronize

    Returns:
        Dict with the outcome ("started", "stopped", "unchanged" or "user_not_found")
    """
    _ensure_db_initialized()

    with LogContext(user_id=user_id):
        logger.info("sponsor_sync_started")

        # Events are held until the transaction commits
        pending = BufferedEventBus()

        try:
            with db.session() as session:
                user = UserRepository(session).get_by_id(user_id)
                if user is None:
                    logger.warning("sponsor_sync_user_not_found")
                    return {"user_id": user_id, "status": "user_not_found"}

                result = synchronize_sponsor_status(session, user, pending)

        except GitHubAPIError as exc:
            logger.error(
                "sponsor_sync_failed",
                error=str(exc),
                status_code=exc.status_code,
                retries=self.request.retries,
            )
            raise self.retry(exc=exc)

        pending.flush(get_event_bus())
        logger.info("sponsor_sync_complete", status=result.value)
        return {"user_id": user_id, "status": result.value}


@shared_task(name="workers.tasks.sponsor_tasks.synchronize_all_sponsors")
def synchronize_all_sponsors_task() -> dict:
    """
    Queue a synchronization job for every user with GitHub credentials.

    Typically run as a scheduled job.
    """
    _ensure_db_initialized()

    with db.session() as session:
        user_ids = [user.id for user in UserRepository(session).list_with_credentials()]

    for user_id in user_ids:
        synchronize_sponsor_status_task.delay(user_id)

    logger.info("sponsor_sync_fanout_complete", queued=len(user_ids))
    return {"queued": len(user_ids)}
