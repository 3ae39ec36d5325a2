from .events import EventBus, InvoiceStatusChanged, event_bus
from .notification_service import NotificationService, notify_invoice_status_changed

event_bus.subscribe(InvoiceStatusChanged, notify_invoice_status_changed)

__all__ = [
    "EventBus",
    "InvoiceStatusChanged",
    "event_bus",
    "NotificationService",
    "notify_invoice_status_changed",
]
