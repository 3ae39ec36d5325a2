from datetime import datetime

from sqlalchemy import Enum, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class TenantMixin:
    """Mixin for tenant-owned rows."""
    tenant_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


def enum_type(enum_cls: type, name: str) -> Enum:
    """Enum column type that stores member values ("partially_paid"), not names."""
    return Enum(enum_cls, name=name, values_callable=lambda members: [m.value for m in members])
