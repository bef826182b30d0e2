"""Celery task definitions."""

from workers.tasks.maintenance_tasks import cleanup_token_blacklist_task
from workers.tasks.sponsor_tasks import (
    synchronize_all_sponsors_task,
    synchronize_sponsor_status_task,
)

__all__ = [
    "synchronize_sponsor_status_task",
    "synchronize_all_sponsors_task",
    "cleanup_token_blacklist_task",
]
