"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from ..core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "practice_ledger_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.worker.tasks"]
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Retry settings
    task_default_retry_delay=60,  # 1 minute
    task_max_retries=3,

    # Result settings
    result_expires=86400,  # 24 hours

    # Worker settings
    worker_prefetch_multiplier=1,

    # Task routing
    task_routes={
        "app.worker.tasks.mark_overdue_invoices_task": {"queue": "invoices"},
    },

    # Beat schedule (periodic tasks)
    beat_schedule={
        "mark-overdue-invoices-daily": {
            "task": "app.worker.tasks.mark_overdue_invoices_task",
            "schedule": crontab(
                hour=settings.overdue_sweep_hour,
                minute=settings.overdue_sweep_minute,
            ),
        },
    },
)
