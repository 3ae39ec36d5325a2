from sqlalchemy import Column, Integer, String, Text

from .base import Base, TimestampMixin


class Notification(Base, TimestampMixin):
    """Per-tenant notifications for the notification center."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, nullable=False, index=True)

    # Content
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Classification
    notification_type = Column(String(50), nullable=False, index=True)  # invoice_status, import
    severity = Column(String(20), default="info")  # success, warning, error, info

    # Reference
    reference_type = Column(String(50), nullable=True)  # invoice, chart_of_accounts
    reference_id = Column(Integer, nullable=True)
    reference_code = Column(String(100), nullable=True)  # e.g., "INV-0042"

    # Status
    status = Column(String(20), default="unread", index=True)  # unread, read

    def __repr__(self):
        return f"<Notification(id={self.id}, tenant={self.tenant_id}, title='{self.title}')>"
