"""Initial event finance schema

Revision ID: 20261018_0900_initial_event_finance_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates the event finance tables:
- organizations, users
- events, strategic_goals, vendors
- budget_line_items (non-negative cost checks)
- expenses (positive amount check), expense_workflow_entries
- activity_logs, notifications

Enum types store the exact display values (e.g. 'StaffTravel', 'Pending').
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '20261018_0900_initial_event_finance_schema'
down_revision = None
branch_labels = None
depends_on = None


USER_ROLES = ('Admin', 'EventManager', 'Finance', 'Viewer')
EVENT_STATUSES = ('Planning', 'Active', 'Completed', 'Cancelled')
CATEGORIES = (
    'Venue', 'Catering', 'Marketing', 'Logistics',
    'Entertainment', 'StaffTravel', 'Miscellaneous',
)
APPROVAL_STATUSES = ('Pending', 'Approved', 'Rejected')
WORKFLOW_ACTIONS = ('approved', 'rejected')
NOTIFICATION_TYPES = ('Info', 'Warning', 'Error', 'Success')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create event finance tables."""

    op.create_table(
        'organizations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('role', sa.Enum(*USER_ROLES, name='user_role'), nullable=False),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_organization_id', 'users', ['organization_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('venue', sa.String(255), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('budget', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.Enum(*EVENT_STATUSES, name='event_status'), nullable=False),
        sa.Column('created_by_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_events_organization_id', 'events', ['organization_id'])

    op.create_table(
        'strategic_goals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_strategic_goals_event_id', 'strategic_goals', ['event_id'])

    op.create_table(
        'vendors',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('service_type', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_vendors_organization_id', 'vendors', ['organization_id'])

    op.create_table(
        'budget_line_items',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category', sa.Enum(*CATEGORIES, name='budget_item_category'), nullable=False),
        sa.Column('subcategory', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('estimated_cost', sa.Numeric(12, 2), nullable=True),
        sa.Column('actual_cost', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.Enum(*APPROVAL_STATUSES, name='budget_item_status'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('assigned_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('vendor', sa.String(255), nullable=True),
        sa.Column('vendor_id', sa.Uuid(), sa.ForeignKey('vendors.id', ondelete='SET NULL'), nullable=True),
        sa.Column('strategic_goal_id', sa.Uuid(), sa.ForeignKey('strategic_goals.id', ondelete='SET NULL'), nullable=True),
        sa.Column('file_attachment', sa.String(500), nullable=True),
        sa.Column('last_edited_by_id', sa.Uuid(), nullable=True),
        sa.Column('last_edited_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('estimated_cost IS NULL OR estimated_cost >= 0', name='ck_budget_line_items_estimated_cost_non_negative'),
        sa.CheckConstraint('actual_cost IS NULL OR actual_cost >= 0', name='ck_budget_line_items_actual_cost_non_negative'),
    )
    op.create_index('ix_budget_line_items_event_id', 'budget_line_items', ['event_id'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('budget_item_id', sa.Uuid(), sa.ForeignKey('budget_line_items.id', ondelete='SET NULL'), nullable=True),
        sa.Column('category', sa.Enum(*CATEGORIES, name='expense_category'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('vendor', sa.String(255), nullable=True),
        sa.Column('vendor_id', sa.Uuid(), sa.ForeignKey('vendors.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.Enum(*APPROVAL_STATUSES, name='expense_status'), nullable=False),
        sa.Column('created_by_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('amount > 0', name='ck_expenses_amount_positive'),
    )
    op.create_index('ix_expenses_event_id', 'expenses', ['event_id'])
    op.create_index('ix_expenses_organization_id', 'expenses', ['organization_id'])
    op.create_index('ix_expenses_budget_item_id', 'expenses', ['budget_item_id'])
    op.create_index('ix_expenses_status', 'expenses', ['status'])

    op.create_table(
        'expense_workflow_entries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('expense_id', sa.Uuid(), sa.ForeignKey('expenses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('approver_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.Enum(*WORKFLOW_ACTIONS, name='workflow_action'), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('action_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_expense_workflow_entries_expense_id', 'expense_workflow_entries', ['expense_id'])

    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
    op.create_index('ix_activity_logs_event_id', 'activity_logs', ['event_id'])
    op.create_index('ix_activity_logs_action', 'activity_logs', ['action'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Enum(*NOTIFICATION_TYPES, name='notification_type'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    """Drop event finance tables."""
    for table in (
        'notifications',
        'activity_logs',
        'expense_workflow_entries',
        'expenses',
        'budget_line_items',
        'vendors',
        'strategic_goals',
        'events',
        'users',
        'organizations',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_name in (
        'notification_type', 'workflow_action', 'expense_status', 'expense_category',
        'budget_item_status', 'budget_item_category', 'event_status', 'user_role',
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
