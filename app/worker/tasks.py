"""Celery tasks for scheduled invoice maintenance."""

from datetime import date, datetime
from typing import Optional
import structlog

from celery import shared_task
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.session import SessionLocal
from ..domain.accounting.invoice_service import mark_overdue_invoices

logger = structlog.get_logger()


def get_db() -> Session:
    """Get database session."""
    return SessionLocal()


@shared_task(bind=True, max_retries=3, default_retry_delay=300)
def mark_overdue_invoices_task(self, as_of: Optional[str] = None):
    """
    Move every past-due open invoice to OVERDUE.

    ``as_of`` is an ISO date; defaults to today (UTC).
    """
    sweep_date = date.fromisoformat(as_of) if as_of else datetime.utcnow().date()
    db = get_db()

    try:
        logger.info("Starting overdue invoice sweep", as_of=sweep_date.isoformat())
        result = mark_overdue_invoices(db, sweep_date)
        logger.info("Overdue invoice sweep finished", as_of=sweep_date.isoformat(), **result)
        return result

    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Overdue invoice sweep failed", error=str(e))
        raise self.retry(exc=e)

    finally:
        db.close()
