"""
Celery application configuration.

Configures Celery with:
- Redis as broker and result backend
- A dedicated queue for sponsorship synchronization; housekeeping runs on
  the default queue
- Late acknowledgement so interrupted jobs are redelivered
"""

from celery import Celery
from celery.signals import worker_process_init
from kombu import Exchange, Queue

from core.config import get_settings
from workers.schedules import apply_beat_schedule

settings = get_settings()

celery_app = Celery(
    "sponsors_portal",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "workers.tasks.sponsor_tasks",
        "workers.tasks.maintenance_tasks",
    ],
)

# =============================================================================
# Queue Configuration
# =============================================================================

default_exchange = Exchange("default", type="direct")
sponsors_exchange = Exchange("sponsors", type="direct")

celery_app.conf.task_queues = (
    Queue("default", default_exchange, routing_key="default"),
    Queue("sponsors", sponsors_exchange, routing_key="sponsors"),
)

celery_app.conf.task_default_queue = "default"
celery_app.conf.task_default_exchange = "default"
celery_app.conf.task_default_routing_key = "default"

celery_app.conf.task_routes = {
    "workers.tasks.sponsor_tasks.*": {
        "queue": "sponsors",
        "routing_key": "sponsors",
    },
}

# celery -A workers worker -Q sponsors,default -c 2 --prefetch-multiplier=1

# =============================================================================
# Serialization
# =============================================================================

celery_app.conf.update(
    # Tasks only carry ids; records are re-read on the worker
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
)

# =============================================================================
# Reliability
# =============================================================================

celery_app.conf.update(
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
    result_expires=86400,
    task_soft_time_limit=60,
    task_time_limit=120,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)

# =============================================================================
# Logging
# =============================================================================

celery_app.conf.update(
    worker_hijack_root_logger=False,
    task_send_sent_event=True,
)


@worker_process_init.connect
def setup_worker_logging(**kwargs):
    """Configure structured logging when worker starts."""
    from core.logging import configure_celery_logging, configure_logging

    configure_logging(level="DEBUG" if settings.debug else "INFO")
    configure_celery_logging()


# =============================================================================
# Beat Schedule (Periodic Tasks)
# =============================================================================

apply_beat_schedule(celery_app)
