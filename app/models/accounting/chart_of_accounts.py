"""Chart of Accounts hierarchy models.

Four fixed levels of grouping (main → element → sub-element → detailed)
with accounts as leaves. Every row is tenant-owned.
"""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TenantMixin, TimestampMixin, enum_type
from app.domain.accounting.enums import AccountType


class MainGroup(TenantMixin, TimestampMixin, Base):
    """Top of the tree, e.g. Balance Sheet or Profit and Loss."""

    __tablename__ = "coa_main_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index("idx_coa_main_groups_tenant_code", "tenant_id", "code"),
    )


class ElementGroup(TenantMixin, TimestampMixin, Base):
    """Second level, e.g. Assets or Liabilities."""

    __tablename__ = "coa_element_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    main_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("coa_main_groups.id"), nullable=False, index=True
    )


class SubElementGroup(TenantMixin, TimestampMixin, Base):
    """Third level, e.g. current_assets."""

    __tablename__ = "coa_sub_element_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    element_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("coa_element_groups.id"), nullable=False, index=True
    )


class DetailedGroup(TenantMixin, TimestampMixin, Base):
    """Finest grouping, e.g. cash_and_bank_balances."""

    __tablename__ = "coa_detailed_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    sub_element_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("coa_sub_element_groups.id"), nullable=False, index=True
    )


class ChartOfAccount(TenantMixin, TimestampMixin, Base):
    """Leaf account (AC head) attached to a detailed group."""

    __tablename__ = "chart_of_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    detailed_group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("coa_detailed_groups.id"), nullable=False, index=True
    )

    account_code: Mapped[str] = mapped_column(String(100), nullable=False)
    account_name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(enum_type(AccountType, "accounttype"), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_system_account: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    opening_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)
    current_balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=0, nullable=False)

    __table_args__ = (
        Index("idx_chart_of_accounts_tenant_code", "tenant_id", "account_code"),
    )
