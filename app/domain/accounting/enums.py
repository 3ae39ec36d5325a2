"""Accounting domain enums."""

from enum import Enum as PyEnum


class AccountType(str, PyEnum):
    """Chart of Accounts account types."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class InvoiceStatus(str, PyEnum):
    """Invoice status."""
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    PARTIALLY_PAID = "partially_paid"
    OVERDUE = "overdue"
    PAID = "paid"
    CANCELED = "canceled"
    VOID = "void"


class HierarchyLevel(str, PyEnum):
    """Levels of the chart-of-accounts tree, coarsest first."""
    MAIN_GROUP = "main-groups"
    ELEMENT_GROUP = "element-groups"
    SUB_ELEMENT_GROUP = "sub-element-groups"
    DETAILED_GROUP = "detailed-groups"
    ACCOUNT = "accounts"

    @property
    def label(self) -> str:
        return self.value[:-1].replace("-", " ")


class CsvStrictness(str, PyEnum):
    """How the CSV importer treats rows with blank required cells."""
    LENIENT = "lenient"  # skip silently
    STRICT = "strict"  # report partially filled rows


class NotificationSeverity(str, PyEnum):
    """Notification severity."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
