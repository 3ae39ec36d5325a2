"""Tests for the scheduled overdue sweep."""

from datetime import date

from sqlalchemy.orm import Session

from app.domain.accounting.enums import InvoiceStatus
from app.domain.accounting import invoice_service
from app.models import Notification
from app.models.accounting import Invoice, InvoiceStatusHistory
from app.worker.tasks import mark_overdue_invoices_task

from tests.factories import TENANT_A, TENANT_B, make_invoice

AS_OF = date(2025, 3, 1)
PAST_DUE = date(2025, 2, 15)


def seed(db: Session) -> dict:
    return {
        "sent": make_invoice(db, status=InvoiceStatus.SENT, invoice_number="A-1", due_date=PAST_DUE),
        "approved": make_invoice(db, status=InvoiceStatus.APPROVED, invoice_number="A-2", due_date=PAST_DUE),
        "partial": make_invoice(db, status=InvoiceStatus.PARTIALLY_PAID, invoice_number="A-3", due_date=PAST_DUE),
        "draft": make_invoice(db, status=InvoiceStatus.DRAFT, invoice_number="A-4", due_date=PAST_DUE),
        "paid": make_invoice(db, status=InvoiceStatus.PAID, invoice_number="A-5", due_date=PAST_DUE),
        "due_today": make_invoice(db, status=InvoiceStatus.SENT, invoice_number="A-6", due_date=AS_OF),
        "other_tenant": make_invoice(
            db, tenant_id=TENANT_B, status=InvoiceStatus.SENT, invoice_number="B-1", due_date=PAST_DUE
        ),
    }


def statuses(db: Session, invoices: dict) -> dict:
    db.expire_all()
    return {name: db.get(Invoice, invoice.id).status for name, invoice in invoices.items()}


def test_sweep_marks_only_open_past_due_invoices(db: Session):
    invoices = seed(db)

    result = invoice_service.mark_overdue_invoices(db, AS_OF)

    assert result == {"checked": 4, "marked": 4, "failed": 0}
    assert statuses(db, invoices) == {
        "sent": InvoiceStatus.OVERDUE,
        "approved": InvoiceStatus.OVERDUE,
        "partial": InvoiceStatus.OVERDUE,
        "draft": InvoiceStatus.DRAFT,
        "paid": InvoiceStatus.PAID,
        "due_today": InvoiceStatus.SENT,
        "other_tenant": InvoiceStatus.OVERDUE,
    }


def test_sweep_records_history_and_notifies_each_tenant(db: Session):
    invoices = seed(db)

    invoice_service.mark_overdue_invoices(db, AS_OF)

    history = db.query(InvoiceStatusHistory).filter(
        InvoiceStatusHistory.invoice_id == invoices["other_tenant"].id
    ).one()
    assert history.tenant_id == TENANT_B
    assert history.to_status == InvoiceStatus.OVERDUE

    assert db.query(Notification).filter(Notification.tenant_id == TENANT_A).count() == 3
    assert db.query(Notification).filter(Notification.tenant_id == TENANT_B).count() == 1


def test_sweep_is_idempotent(db: Session):
    seed(db)

    invoice_service.mark_overdue_invoices(db, AS_OF)
    second = invoice_service.mark_overdue_invoices(db, AS_OF)

    assert second == {"checked": 0, "marked": 0, "failed": 0}


def test_celery_task_runs_sweep(db: Session):
    invoices = seed(db)

    result = mark_overdue_invoices_task(as_of=AS_OF.isoformat())

    assert result["marked"] == 4
    assert statuses(db, invoices)["sent"] == InvoiceStatus.OVERDUE
