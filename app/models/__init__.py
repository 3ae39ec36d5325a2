"""Database models."""

from .base import Base, TenantMixin, TimestampMixin
from .notification import Notification
from .accounting import (
    MainGroup,
    ElementGroup,
    SubElementGroup,
    DetailedGroup,
    ChartOfAccount,
    Invoice,
    InvoiceStatusHistory,
)

__all__ = [
    "Base",
    "TenantMixin",
    "TimestampMixin",
    "Notification",
    "MainGroup",
    "ElementGroup",
    "SubElementGroup",
    "DetailedGroup",
    "ChartOfAccount",
    "Invoice",
    "InvoiceStatusHistory",
]
