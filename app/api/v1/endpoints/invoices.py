"""Invoice API endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.dependencies import get_db, get_tenant_id
from app.domain.accounting.enums import InvoiceStatus
from app.domain.accounting.exceptions import AccountingError
from app.domain.accounting import invoice_service
from app.schemas.invoices import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceDetailResponse,
    InvoiceStatusUpdate,
    InvoiceStatusHistoryResponse,
)
from app.api.v1.errors import http_error

logger = logging.getLogger(__name__)

router = APIRouter()


def _detail(invoice) -> InvoiceDetailResponse:
    response = InvoiceDetailResponse.model_validate(invoice)
    response.allowed_transitions = invoice_service.allowed_transitions(invoice.status)
    return response


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> InvoiceResponse:
    """
    Create a new invoice.

    Returns the created invoice with DRAFT status.
    """
    try:
        invoice = invoice_service.create_invoice(db, tenant_id, **invoice_data.model_dump())
    except AccountingError as e:
        raise http_error(e)

    return InvoiceResponse.model_validate(invoice)


@router.get("", response_model=List[InvoiceResponse])
def list_invoices(
    invoice_status: Optional[InvoiceStatus] = Query(None, alias="status"),
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """List the tenant's invoices, newest first, optionally by status."""
    invoices = invoice_service.list_invoices(db, tenant_id, status=invoice_status)
    return [InvoiceResponse.model_validate(invoice) for invoice in invoices]


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
def get_invoice(
    invoice_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Get an invoice together with the statuses it can move to."""
    try:
        invoice = invoice_service.get_invoice(db, tenant_id, invoice_id)
    except AccountingError as e:
        raise http_error(e)

    return _detail(invoice)


@router.get("/{invoice_id}/history", response_model=List[InvoiceStatusHistoryResponse])
def get_invoice_history(
    invoice_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    try:
        history = invoice_service.get_status_history(db, tenant_id, invoice_id)
    except AccountingError as e:
        raise http_error(e)

    return [InvoiceStatusHistoryResponse.model_validate(row) for row in history]


@router.post("/{invoice_id}/status", response_model=InvoiceDetailResponse)
def update_invoice_status(
    invoice_id: int,
    request: InvoiceStatusUpdate,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Move an invoice to a new status.

    Illegal transitions are rejected with 409 and the current and requested
    statuses; the invoice is left unchanged.
    """
    try:
        invoice = invoice_service.apply_transition(
            db,
            tenant_id,
            invoice_id,
            request.status,
            changed_by=request.changed_by,
        )
    except AccountingError as e:
        raise http_error(e)

    return _detail(invoice)
