"""In-process domain events and their subscribers."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from app.domain.accounting.enums import InvoiceStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceStatusChanged:
    """Published after an invoice status transition has been committed."""
    tenant_id: int
    invoice_id: int
    invoice_number: str
    from_status: InvoiceStatus
    to_status: InvoiceStatus
    changed_by: int | None
    changed_at: datetime


Handler = Callable[[Session, object], None]


class EventBus:
    """
    Synchronous publish/subscribe registry.

    Handlers run in registration order after the publishing operation has
    committed. A failing handler is logged and does not stop the others or
    undo the committed change.
    """

    def __init__(self):
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Handler) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def handlers_for(self, event_type: type) -> list[Handler]:
        return list(self._handlers[event_type])

    def publish(self, db: Session, event: object) -> int:
        """Deliver ``event`` to its subscribers; returns how many succeeded."""
        delivered = 0
        for handler in self.handlers_for(type(event)):
            try:
                handler(db, event)
                delivered += 1
            except Exception:
                db.rollback()
                logger.exception(
                    f"Handler {getattr(handler, '__name__', handler)} failed for {type(event).__name__}"
                )
        return delivered


event_bus = EventBus()
