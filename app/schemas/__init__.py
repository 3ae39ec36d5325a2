"""Pydantic schemas for API requests and responses."""

from .invoices import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceDetailResponse,
    InvoiceStatusUpdate,
    InvoiceStatusHistoryResponse,
)
from .chart_of_accounts import (
    GroupResponse,
    AccountResponse,
    CsvUploadRequest,
    CsvImportSummary,
)
from .notifications import (
    NotificationResponse,
    NotificationListResponse,
)

__all__ = [
    "InvoiceCreate",
    "InvoiceResponse",
    "InvoiceDetailResponse",
    "InvoiceStatusUpdate",
    "InvoiceStatusHistoryResponse",
    "GroupResponse",
    "AccountResponse",
    "CsvUploadRequest",
    "CsvImportSummary",
    "NotificationResponse",
    "NotificationListResponse",
]
