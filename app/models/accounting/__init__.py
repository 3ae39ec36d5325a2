"""Accounting models."""

from .chart_of_accounts import (
    MainGroup,
    ElementGroup,
    SubElementGroup,
    DetailedGroup,
    ChartOfAccount,
)
from .invoice import Invoice, InvoiceStatusHistory

__all__ = [
    "MainGroup",
    "ElementGroup",
    "SubElementGroup",
    "DetailedGroup",
    "ChartOfAccount",
    "Invoice",
    "InvoiceStatusHistory",
]
