"""
Celery Beat schedule configuration.

Sponsorships lapse on GitHub without notifying us, so every user with
GitHub credentials is re-checked once a day. Expired entries are pruned
from the token blacklist every hour.
"""

from celery.schedules import crontab

from core.config import get_settings

settings = get_settings()


def get_beat_schedule():
    """
    Get the Celery Beat schedule configuration.

    The hour is configurable via SPONSOR_SYNC_HOUR (UTC).
    """
    return {
        "synchronize-sponsors-daily": {
            "task": "workers.tasks.sponsor_tasks.synchronize_all_sponsors",
            "schedule": crontab(hour=settings.sponsor_sync_hour, minute=0),
            "args": [],
            "options": {"queue": "sponsors"},
        },
        "cleanup-token-blacklist-hourly": {
            "task": "workers.tasks.maintenance_tasks.cleanup_token_blacklist",
            "schedule": crontab(minute=30),
            "args": [],
            "options": {"queue": "default"},
        },
    }


def apply_beat_schedule(celery_app):
    """
    Apply the beat schedule to a Celery app.

    Args:
        celery_app: Celery application instance
    """
    if settings.enable_scheduler:
        celery_app.conf.beat_schedule = get_beat_schedule()
        celery_app.conf.beat_schedule_filename = "celerybeat-schedule"
