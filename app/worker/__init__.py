"""Celery worker configuration and tasks."""

from .celery_app import celery_app
from .tasks import mark_overdue_invoices_task

__all__ = [
    "celery_app",
    "mark_overdue_invoices_task",
]
