"""
Housekeeping tasks.

Every logout adds a token_blacklist row; once the token's own expiry has
passed the row can never match again, so it is pruned here.
"""

from celery import shared_task

from core.db import db
from core.logging import get_logger
from core.repositories import TokenBlacklistRepository

logger = get_logger("worker.maintenance")


@shared_task(name="workers.tasks.maintenance_tasks.cleanup_token_blacklist")
def cleanup_token_blacklist_task() -> dict:
    """
    Delete blacklist entries whose token has expired.

    Returns:
        Dict with the number of rows removed
    """
    db.initialize()

    with db.session() as session:
        removed = TokenBlacklistRepository(session).cleanup_expired()

    if removed:
        logger.info("token_blacklist_cleanup_complete", removed=removed)
    else:
        logger.debug("token_blacklist_cleanup_nothing_expired")

    return {"removed": removed}
