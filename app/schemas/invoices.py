"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.domain.accounting.enums import InvoiceStatus


class InvoiceCreate(BaseModel):
    """Schema for creating a draft invoice."""
    invoice_number: str = Field(..., max_length=100)
    client_id: Optional[int] = None
    issue_date: date
    due_date: date
    currency_code: str = Field(default="USD", max_length=10)
    subtotal: Decimal
    tax_percent: Decimal = Decimal("0")
    tax_amount: Optional[Decimal] = None
    discount_amount: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    notes: Optional[str] = None
    created_by: Optional[int] = None


class InvoiceResponse(BaseModel):
    """Schema for invoice response."""
    id: int
    tenant_id: int
    invoice_number: str
    client_id: Optional[int] = None
    status: InvoiceStatus
    issue_date: date
    due_date: date
    currency_code: str
    subtotal: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    amount_paid: Decimal
    amount_due: Decimal
    notes: Optional[str] = None
    updated_by: Optional[int] = None
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceStatusUpdate(BaseModel):
    """Request to move an invoice to another status."""
    status: str
    changed_by: Optional[int] = None


class InvoiceStatusHistoryResponse(BaseModel):
    id: int
    invoice_id: int
    from_status: InvoiceStatus
    to_status: InvoiceStatus
    changed_by: Optional[int] = None
    changed_at: datetime

    class Config:
        from_attributes = True


class InvoiceDetailResponse(InvoiceResponse):
    """Invoice with the statuses it may move to next."""
    allowed_transitions: List[InvoiceStatus] = []
