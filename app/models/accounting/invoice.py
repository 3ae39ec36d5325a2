"""Invoice and invoice status history models."""

from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TenantMixin, TimestampMixin, enum_type
from app.domain.accounting.enums import InvoiceStatus


class Invoice(TenantMixin, TimestampMixin, Base):
    """Customer invoice. Never deleted; ``void`` is its terminal state."""

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_number: Mapped[str] = mapped_column(String(100), nullable=False)
    client_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[InvoiceStatus] = mapped_column(
        enum_type(InvoiceStatus, "invoicestatus"),
        default=InvoiceStatus.DRAFT,
        nullable=False,
    )

    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    currency_code: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    tax_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)
    amount_due: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Optimistic concurrency counter, bumped on every flush
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_invoices_status_due_date", "status", "due_date"),
    )


class InvoiceStatusHistory(TenantMixin, Base):
    """One row per applied status transition."""

    __tablename__ = "invoice_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("invoices.id"), nullable=False, index=True
    )
    from_status: Mapped[InvoiceStatus] = mapped_column(enum_type(InvoiceStatus, "invoicestatus"), nullable=False)
    to_status: Mapped[InvoiceStatus] = mapped_column(enum_type(InvoiceStatus, "invoicestatus"), nullable=False)
    changed_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
