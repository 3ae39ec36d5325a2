"""Invoice lifecycle: creation, status transitions and the overdue sweep."""

import logging
from datetime import datetime, date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.db.tenancy import tenant_query, only_tenant_rows
from app.models.accounting import Invoice, InvoiceStatusHistory
from app.domain.accounting.enums import InvoiceStatus
from app.domain.accounting.exceptions import (
    AccountingError,
    ConcurrentModification,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from app.services.notifications import EventBus, InvoiceStatusChanged, event_bus

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Numeric(18, 2) holds at most 16 integer digits
MAX_AMOUNT = Decimal("1e16")

ALLOWED_TRANSITIONS: Dict[InvoiceStatus, frozenset] = {
    InvoiceStatus.DRAFT: frozenset({
        InvoiceStatus.APPROVED,
        InvoiceStatus.SENT,
        InvoiceStatus.CANCELED,
        InvoiceStatus.VOID,
    }),
    InvoiceStatus.SENT: frozenset({
        InvoiceStatus.APPROVED,
        InvoiceStatus.PAID,
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELED,
        InvoiceStatus.VOID,
    }),
    InvoiceStatus.APPROVED: frozenset({
        InvoiceStatus.PAID,
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELED,
        InvoiceStatus.VOID,
    }),
    InvoiceStatus.PARTIALLY_PAID: frozenset({
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.VOID,
    }),
    InvoiceStatus.OVERDUE: frozenset({
        InvoiceStatus.PAID,
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.VOID,
    }),
    InvoiceStatus.PAID: frozenset({InvoiceStatus.VOID}),
    InvoiceStatus.CANCELED: frozenset({InvoiceStatus.DRAFT}),
    InvoiceStatus.VOID: frozenset(),
}

# Statuses the overdue sweep may move to OVERDUE
OVERDUE_CANDIDATES = (
    InvoiceStatus.SENT,
    InvoiceStatus.APPROVED,
    InvoiceStatus.PARTIALLY_PAID,
)


def _to_status(value: InvoiceStatus | str) -> InvoiceStatus | None:
    try:
        return InvoiceStatus(value)
    except ValueError:
        return None


def can_transition(from_status: InvoiceStatus | str, to_status: InvoiceStatus | str) -> bool:
    """Return True only if ``from_status -> to_status`` is an edge of the lifecycle."""
    source = _to_status(from_status)
    target = _to_status(to_status)
    if source is None or target is None:
        return False
    return target in ALLOWED_TRANSITIONS[source]


def allowed_transitions(from_status: InvoiceStatus | str) -> List[InvoiceStatus]:
    """Legal target statuses from ``from_status``, in declaration order."""
    source = _to_status(from_status)
    if source is None:
        return []
    targets = ALLOWED_TRANSITIONS[source]
    return [status for status in InvoiceStatus if status in targets]


def _money(value: Any, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidOperation
        if abs(amount) >= MAX_AMOUNT:
            raise ValidationFailed(f"{field} is too large", [field])
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationFailed(f"{field} must be a decimal amount", [field])


def create_invoice(
    db: Session,
    tenant_id: int,
    invoice_number: str,
    issue_date: date,
    due_date: date,
    subtotal: Decimal,
    tax_percent: Decimal = Decimal("0"),
    tax_amount: Decimal | None = None,
    discount_amount: Decimal = Decimal("0"),
    amount_paid: Decimal = Decimal("0"),
    currency_code: str = "USD",
    client_id: int | None = None,
    notes: str | None = None,
    created_by: int | None = None,
) -> Invoice:
    """
    Create a DRAFT invoice.

    ``tax_amount`` is derived from ``tax_percent`` when not supplied.
    total = subtotal + tax - discount; amount_due = total - amount_paid.

    Raises:
        ValidationFailed: On blank number, inverted dates or inconsistent amounts
    """
    if not invoice_number or not invoice_number.strip():
        raise ValidationFailed("invoice_number is required", ["invoice_number"])
    if due_date < issue_date:
        raise ValidationFailed("due_date cannot be before issue_date", ["due_date"])

    subtotal = _money(subtotal, "subtotal")
    tax_percent = _money(tax_percent, "tax_percent")
    if tax_amount is None:
        tax_amount = subtotal * tax_percent / Decimal("100")
    tax_amount = _money(tax_amount, "tax_amount")
    discount_amount = _money(discount_amount, "discount_amount")
    amount_paid = _money(amount_paid, "amount_paid")

    negative = [
        name
        for name, value in (
            ("subtotal", subtotal),
            ("tax_percent", tax_percent),
            ("tax_amount", tax_amount),
            ("discount_amount", discount_amount),
            ("amount_paid", amount_paid),
        )
        if value < 0
    ]
    if negative:
        raise ValidationFailed(f"Amounts cannot be negative: {', '.join(negative)}", negative)

    if tax_percent > 100:
        raise ValidationFailed("tax_percent cannot exceed 100", ["tax_percent"])

    total_amount = subtotal + tax_amount - discount_amount
    if total_amount >= MAX_AMOUNT:
        raise ValidationFailed("total_amount is too large", ["total_amount"])
    if total_amount < 0:
        raise ValidationFailed("discount_amount exceeds subtotal plus tax", ["discount_amount"])
    if amount_paid > total_amount:
        raise ValidationFailed("amount_paid exceeds total_amount", ["amount_paid"])

    invoice = Invoice(
        tenant_id=tenant_id,
        invoice_number=invoice_number.strip(),
        client_id=client_id,
        status=InvoiceStatus.DRAFT,
        issue_date=issue_date,
        due_date=due_date,
        currency_code=currency_code,
        subtotal=subtotal,
        tax_percent=tax_percent,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
        amount_paid=amount_paid,
        amount_due=total_amount - amount_paid,
        notes=notes,
        updated_by=created_by,
    )
    db.add(invoice)
    db.commit()
    db.refresh(invoice)

    logger.info(f"Created invoice {invoice.id} ({invoice.invoice_number}) for tenant {tenant_id}")
    return invoice


def get_invoice(db: Session, tenant_id: int, invoice_id: int) -> Invoice:
    """Fetch an invoice owned by ``tenant_id`` or raise NotFound."""
    invoice = tenant_query(db, Invoice, tenant_id).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise NotFound("invoice", invoice_id)
    return invoice


def list_invoices(
    db: Session,
    tenant_id: int,
    status: InvoiceStatus | None = None,
) -> List[Invoice]:
    query = tenant_query(db, Invoice, tenant_id)
    if status is not None:
        query = query.filter(Invoice.status == status)
    return only_tenant_rows(query.order_by(Invoice.issue_date.desc(), Invoice.id.desc()).all(), tenant_id)


def get_status_history(db: Session, tenant_id: int, invoice_id: int) -> List[InvoiceStatusHistory]:
    get_invoice(db, tenant_id, invoice_id)
    return (
        tenant_query(db, InvoiceStatusHistory, tenant_id)
        .filter(InvoiceStatusHistory.invoice_id == invoice_id)
        .order_by(InvoiceStatusHistory.changed_at, InvoiceStatusHistory.id)
        .all()
    )


def apply_transition(
    db: Session,
    tenant_id: int,
    invoice_id: int,
    to_status: InvoiceStatus | str,
    changed_by: int | None = None,
    bus: EventBus = event_bus,
) -> Invoice:
    """
    Move an invoice to ``to_status`` if the lifecycle allows it.

    The invoice row is locked for the duration of the check; the version
    column turns a lost update into ConcurrentModification.

    Raises:
        ValidationFailed: If ``to_status`` is not a known status
        NotFound: If the invoice does not exist for the tenant
        InvalidTransition: If the edge is not in the lifecycle (nothing is changed)
        ConcurrentModification: If the row changed underneath us
    """
    target = _to_status(to_status)
    if target is None:
        raise ValidationFailed(f"Invalid invoice status '{to_status}'", ["status"])

    invoice = (
        tenant_query(db, Invoice, tenant_id)
        .filter(Invoice.id == invoice_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not invoice:
        raise NotFound("invoice", invoice_id)

    current = invoice.status
    if not can_transition(current, target):
        db.rollback()
        logger.warning(
            f"Rejected transition {current.value} -> {target.value} for invoice {invoice_id}"
        )
        raise InvalidTransition(current.value, target.value)

    changed_at = datetime.utcnow()
    invoice.status = target
    invoice.updated_at = changed_at
    invoice.updated_by = changed_by

    db.add(InvoiceStatusHistory(
        tenant_id=tenant_id,
        invoice_id=invoice.id,
        from_status=current,
        to_status=target,
        changed_by=changed_by,
        changed_at=changed_at,
    ))

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Concurrent update detected on invoice {invoice_id}")
        raise ConcurrentModification("invoice", invoice_id)

    db.refresh(invoice)
    logger.info(f"Invoice {invoice_id} status {current.value} -> {target.value}")

    bus.publish(db, InvoiceStatusChanged(
        tenant_id=tenant_id,
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number,
        from_status=current,
        to_status=target,
        changed_by=changed_by,
        changed_at=changed_at,
    ))

    return invoice


def mark_overdue_invoices(db: Session, as_of: date) -> Dict[str, int]:
    """
    Move past-due open invoices to OVERDUE, tenant by tenant.

    Each invoice goes through ``apply_transition``; a rejected one is
    counted and logged, the sweep carries on.
    """
    tenant_ids = [
        row[0]
        for row in db.query(Invoice.tenant_id)
        .filter(Invoice.status.in_(OVERDUE_CANDIDATES), Invoice.due_date < as_of)
        .distinct()
        .all()
    ]

    checked = marked = failed = 0
    for tenant_id in tenant_ids:
        invoice_ids = [
            row[0]
            for row in tenant_query(db, Invoice, tenant_id)
            .with_entities(Invoice.id)
            .filter(Invoice.status.in_(OVERDUE_CANDIDATES), Invoice.due_date < as_of)
            .all()
        ]
        for invoice_id in invoice_ids:
            checked += 1
            try:
                apply_transition(db, tenant_id, invoice_id, InvoiceStatus.OVERDUE)
                marked += 1
            except AccountingError as e:
                failed += 1
                logger.warning(f"Could not mark invoice {invoice_id} overdue: {e}")

    logger.info(f"Overdue sweep as of {as_of}: checked={checked} marked={marked} failed={failed}")
    return {"checked": checked, "marked": marked, "failed": failed}
