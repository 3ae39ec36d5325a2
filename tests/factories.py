"""Builders for test data."""

from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from app.domain.accounting import hierarchy_service, invoice_service
from app.domain.accounting.enums import InvoiceStatus
from app.models.accounting import Invoice

TENANT_A = 1
TENANT_B = 2


def tenant_headers(tenant_id: int) -> dict:
    return {"X-Tenant-ID": str(tenant_id)}


def build_tree(db: Session, tenant_id: int, element_name: str = "Assets") -> dict:
    """Main group -> element -> sub-element -> detailed group, one of each."""
    main = hierarchy_service.create_main_group(db, tenant_id, "Balance Sheet", "1")
    element = hierarchy_service.create_element_group(db, tenant_id, element_name, "10", main.id)
    sub = hierarchy_service.create_sub_element_group(db, tenant_id, "Current Assets", "11", element.id)
    detailed = hierarchy_service.create_detailed_group(db, tenant_id, "Cash and Bank", "111", sub.id)
    return {"main": main, "element": element, "sub": sub, "detailed": detailed}


def make_invoice(
    db: Session,
    tenant_id: int = TENANT_A,
    status: InvoiceStatus = InvoiceStatus.DRAFT,
    **kwargs,
) -> Invoice:
    values = {
        "invoice_number": "INV-0001",
        "issue_date": date(2025, 1, 1),
        "due_date": date(2025, 1, 31),
        "subtotal": Decimal("100.00"),
    }
    values.update(kwargs)
    invoice = invoice_service.create_invoice(db, tenant_id, **values)
    if status != InvoiceStatus.DRAFT:
        # Place the invoice directly in the wanted state for setup
        invoice.status = status
        db.commit()
        db.refresh(invoice)
    return invoice
