import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.db.tenancy import tenant_query
from app.domain.accounting.enums import InvoiceStatus, NotificationSeverity
from app.models.notification import Notification
from .events import InvoiceStatusChanged

logger = logging.getLogger(__name__)


STATUS_SEVERITY = {
    InvoiceStatus.PAID: NotificationSeverity.SUCCESS,
    InvoiceStatus.OVERDUE: NotificationSeverity.WARNING,
    InvoiceStatus.CANCELED: NotificationSeverity.WARNING,
    InvoiceStatus.VOID: NotificationSeverity.WARNING,
}


class NotificationService:
    """
    Service for managing tenant notifications.

    Handles:
    - Creating notifications
    - Querying notifications
    - Updating notification status
    """

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        tenant_id: int,
        title: str,
        message: str,
        notification_type: str = "manual",
        severity: str = NotificationSeverity.INFO.value,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
        reference_code: Optional[str] = None,
    ) -> Notification:
        """
        Create a new notification.

        Args:
            tenant_id: Owning tenant
            title: Notification title
            message: Notification message
            notification_type: Type (invoice_status, import, manual)
            severity: Severity level (success, warning, error, info)
            reference_type: Type of referenced entity
            reference_id: ID of referenced entity
            reference_code: Display code for reference

        Returns:
            Created Notification
        """
        notification = Notification(
            tenant_id=tenant_id,
            title=title,
            message=message,
            notification_type=notification_type,
            severity=severity,
            reference_type=reference_type,
            reference_id=reference_id,
            reference_code=reference_code,
            status="unread",
        )

        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)

        return notification

    def create_for_invoice_status(self, event: InvoiceStatusChanged) -> Notification:
        """Create a notification describing an applied invoice transition."""
        to_label = event.to_status.value.replace("_", " ")
        severity = STATUS_SEVERITY.get(event.to_status, NotificationSeverity.INFO)

        return self.create(
            tenant_id=event.tenant_id,
            title=f"Invoice {event.invoice_number} is now {to_label}",
            message=(
                f"Invoice {event.invoice_number} moved from "
                f"{event.from_status.value} to {event.to_status.value}"
            ),
            notification_type="invoice_status",
            severity=severity.value,
            reference_type="invoice",
            reference_id=event.invoice_id,
            reference_code=event.invoice_number,
        )

    def _filtered(
        self,
        tenant_id: int,
        status: Optional[str] = None,
        notification_type: Optional[str] = None,
    ):
        query = tenant_query(self.db, Notification, tenant_id)

        if status:
            query = query.filter(Notification.status == status)

        if notification_type:
            query = query.filter(Notification.notification_type == notification_type)

        return query

    def get_notifications(
        self,
        tenant_id: int,
        status: Optional[str] = None,
        notification_type: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Notification]:
        """Get a tenant's notifications, newest first."""
        return (
            self._filtered(tenant_id, status, notification_type)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count(
        self,
        tenant_id: int,
        status: Optional[str] = None,
        notification_type: Optional[str] = None,
    ) -> int:
        return self._filtered(tenant_id, status, notification_type).count()

    def get_unread_count(self, tenant_id: int) -> int:
        return self.count(tenant_id, status="unread")

    def mark_as_read(self, tenant_id: int, notification_id: int) -> Optional[Notification]:
        notification = (
            tenant_query(self.db, Notification, tenant_id)
            .filter(Notification.id == notification_id)
            .first()
        )

        if notification:
            notification.status = "read"
            self.db.commit()
            self.db.refresh(notification)

        return notification


def notify_invoice_status_changed(db: Session, event: InvoiceStatusChanged) -> None:
    """Event handler: record a notification for every applied transition."""
    notification = NotificationService(db).create_for_invoice_status(event)
    logger.info(
        f"Notification {notification.id} created for invoice {event.invoice_id} "
        f"({event.from_status.value} -> {event.to_status.value})"
    )
