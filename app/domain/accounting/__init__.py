"""Accounting domain module."""

from .enums import (
    AccountType,
    InvoiceStatus,
    HierarchyLevel,
    CsvStrictness,
    NotificationSeverity,
)
from .exceptions import AccountingError

__all__ = [
    "AccountType",
    "InvoiceStatus",
    "HierarchyLevel",
    "CsvStrictness",
    "NotificationSeverity",
    "AccountingError",
]
