"""Initial schema: chart of accounts, invoices, notifications

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACCOUNT_TYPES = ('asset', 'liability', 'equity', 'revenue', 'expense')
INVOICE_STATUSES = ('draft', 'sent', 'approved', 'partially_paid', 'overdue', 'paid', 'canceled', 'void')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _group_table(name: str, parent_column: str = None, parent_table: str = None, is_active: bool = False):
    columns = [
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('code', sa.String(50), nullable=False),
    ]
    if parent_column:
        columns.append(sa.Column(parent_column, sa.Integer(), sa.ForeignKey(f'{parent_table}.id'), nullable=False))
    if is_active:
        columns.append(sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'))
    op.create_table(name, *columns, *_timestamps())
    op.create_index(f'ix_{name}_tenant_id', name, ['tenant_id'])
    if parent_column:
        op.create_index(f'ix_{name}_{parent_column}', name, [parent_column])


def upgrade() -> None:
    # Create enums (with IF NOT EXISTS check)
    op.execute(
        "DO $$ BEGIN CREATE TYPE accounttype AS ENUM "
        f"({', '.join(repr(v) for v in ACCOUNT_TYPES)}); "
        "EXCEPTION WHEN duplicate_object THEN null; END $$;"
    )
    op.execute(
        "DO $$ BEGIN CREATE TYPE invoicestatus AS ENUM "
        f"({', '.join(repr(v) for v in INVOICE_STATUSES)}); "
        "EXCEPTION WHEN duplicate_object THEN null; END $$;"
    )
    account_type = postgresql.ENUM(*ACCOUNT_TYPES, name='accounttype', create_type=False)
    invoice_status = postgresql.ENUM(*INVOICE_STATUSES, name='invoicestatus', create_type=False)

    # Chart of Accounts hierarchy
    _group_table('coa_main_groups', is_active=True)
    op.create_index('idx_coa_main_groups_tenant_code', 'coa_main_groups', ['tenant_id', 'code'])
    _group_table('coa_element_groups', 'main_group_id', 'coa_main_groups')
    _group_table('coa_sub_element_groups', 'element_group_id', 'coa_element_groups')
    _group_table('coa_detailed_groups', 'sub_element_group_id', 'coa_sub_element_groups')

    op.create_table(
        'chart_of_accounts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('detailed_group_id', sa.Integer(), sa.ForeignKey('coa_detailed_groups.id'), nullable=False),
        sa.Column('account_code', sa.String(100), nullable=False),
        sa.Column('account_name', sa.String(200), nullable=False),
        sa.Column('account_type', account_type, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_system_account', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('opening_balance', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('current_balance', sa.Numeric(18, 2), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_chart_of_accounts_tenant_id', 'chart_of_accounts', ['tenant_id'])
    op.create_index('ix_chart_of_accounts_detailed_group_id', 'chart_of_accounts', ['detailed_group_id'])
    op.create_index('idx_chart_of_accounts_tenant_code', 'chart_of_accounts', ['tenant_id', 'account_code'])

    # Invoices
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('invoice_number', sa.String(100), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('status', invoice_status, nullable=False, server_default='draft'),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('currency_code', sa.String(10), nullable=False, server_default='USD'),
        sa.Column('subtotal', sa.Numeric(18, 2), nullable=False),
        sa.Column('tax_percent', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('tax_amount', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('discount_amount', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('total_amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('amount_due', sa.Numeric(18, 2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_invoices_tenant_id', 'invoices', ['tenant_id'])
    op.create_index('idx_invoices_status_due_date', 'invoices', ['status', 'due_date'])

    op.create_table(
        'invoice_status_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=False),
        sa.Column('from_status', invoice_status, nullable=False),
        sa.Column('to_status', invoice_status, nullable=False),
        sa.Column('changed_by', sa.Integer(), nullable=True),
        sa.Column('changed_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_invoice_status_history_tenant_id', 'invoice_status_history', ['tenant_id'])
    op.create_index('ix_invoice_status_history_invoice_id', 'invoice_status_history', ['invoice_id'])

    # Notifications
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('notification_type', sa.String(50), nullable=False),
        sa.Column('severity', sa.String(20), nullable=True, server_default='info'),
        sa.Column('reference_type', sa.String(50), nullable=True),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('reference_code', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), nullable=True, server_default='unread'),
        *_timestamps(),
    )
    op.create_index('ix_notifications_tenant_id', 'notifications', ['tenant_id'])
    op.create_index('ix_notifications_notification_type', 'notifications', ['notification_type'])
    op.create_index('ix_notifications_status', 'notifications', ['status'])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table('notifications')
    op.drop_table('invoice_status_history')
    op.drop_table('invoices')
    op.drop_table('chart_of_accounts')
    op.drop_table('coa_detailed_groups')
    op.drop_table('coa_sub_element_groups')
    op.drop_table('coa_element_groups')
    op.drop_table('coa_main_groups')

    # Drop enums
    op.execute("DROP TYPE IF EXISTS invoicestatus")
    op.execute("DROP TYPE IF EXISTS accounttype")
