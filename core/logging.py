"""
structlog setup shared by the API and the Celery workers.

Log events are snake_case names with keyword context:

    logger.info("sponsor_started", user_id=user.id, sponsor_id=sponsor.id)

Development renders coloured console lines, production one JSON object per
line. Request and task ids travel in contextvars so every line emitted while
handling a request or a job carries them.
"""

import logging
import sys
import time
import uuid
from collections.abc import MutableMapping
from functools import lru_cache
from typing import Any

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "sponsors_portal"


def _add_app_name(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> EventDict:
    event_dict["app"] = APP_NAME
    return event_dict  # type: ignore[return-value]


def _use_json_output() -> bool:
    from .config import get_settings

    settings = get_settings()
    return settings.is_production and not settings.debug


def get_processors(json_output: bool | None = None) -> list[Processor]:
    if json_output is None:
        json_output = _use_json_output()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _add_app_name,
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback))
    return processors


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Route structlog through stdlib logging. Runs once per process."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """
    Bind context for the duration of a block.

        with LogContext(user_id=user_id):
            logger.info("sponsor_sync_started")  # carries user_id
    """

    def __init__(self, **kwargs: Any):
        self.kwargs = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        structlog.contextvars.unbind_contextvars(*self.kwargs)
        return False


class RequestLoggingMiddleware:
    """ASGI middleware logging the start, status and duration of each request."""

    def __init__(self, app):
        self.app = app
        self.logger = get_logger("http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_info = {"method": scope.get("method", ""), "path": scope.get("path", "")}
        if "request_id" not in structlog.contextvars.get_contextvars():
            bind_context(request_id=uuid.uuid4().hex[:8])

        self.logger.info("request_started", **request_info)
        started = time.perf_counter()
        status_code = 500

        async def capture_status(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, capture_status)
        finally:
            if status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            else:
                log = self.logger.info
            log(
                "request_complete",
                status_code=status_code,
                duration_seconds=round(time.perf_counter() - started, 3),
                **request_info,
            )
            clear_context()


def configure_celery_logging() -> None:
    """Bind task id and name to every log line a Celery task emits."""
    from celery.signals import task_failure, task_postrun, task_prerun

    logger = get_logger("celery.tasks")

    @task_prerun.connect(weak=False)
    def _task_started(task_id=None, task=None, **kwargs):
        bind_context(task_id=task_id, task_name=task.name if task else None)
        logger.info("task_started")

    @task_postrun.connect(weak=False)
    def _task_finished(state=None, **kwargs):
        logger.info("task_completed", state=state)
        clear_context()

    @task_failure.connect(weak=False)
    def _task_failed(exception=None, **kwargs):
        logger.error("task_failed", error=str(exception), error_type=type(exception).__name__)
        clear_context()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "LogContext",
    "RequestLoggingMiddleware",
    "configure_celery_logging",
]
