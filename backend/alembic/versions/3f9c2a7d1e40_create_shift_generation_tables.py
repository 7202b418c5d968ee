"""create_shift_generation_tables

Revision ID: 3f9c2a7d1e40
Revises:
Create Date: 2026-10-18 09:12:44.503118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create managers, shift_templates and shifts tables."""
    op.create_table(
        'managers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=200), nullable=True),
        sa.Column('can_create_shifts', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_managers_is_active', 'managers', ['is_active'])

    op.create_table(
        'shift_templates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('contract_id', sa.Uuid(), nullable=True),
        sa.Column('template_code', sa.String(length=50), nullable=True),
        sa.Column('template_name', sa.String(length=200), nullable=False),
        sa.Column('effective_from', sa.Date(), nullable=True),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_shift_templates_contract_id', 'shift_templates', ['contract_id'])
    op.create_index('ix_shift_templates_is_active', 'shift_templates', ['is_active'])
    op.create_index('ix_shift_templates_contract_active', 'shift_templates', ['contract_id', 'is_active'])

    shift_status = sa.Enum(
        'DRAFT', 'SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='shiftstatus'
    )

    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('contract_id', sa.Uuid(), nullable=True),
        sa.Column('shift_template_id', sa.Uuid(), nullable=True),
        sa.Column('location_id', sa.Uuid(), nullable=False),
        sa.Column('location_name', sa.String(length=200), nullable=True),
        sa.Column('location_address', sa.String(length=500), nullable=True),
        sa.Column('manager_id', sa.Uuid(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('shift_date', sa.Date(), nullable=False),
        sa.Column('shift_day', sa.Integer(), nullable=False),
        sa.Column('shift_month', sa.Integer(), nullable=False),
        sa.Column('shift_year', sa.Integer(), nullable=False),
        sa.Column('shift_quarter', sa.Integer(), nullable=False),
        sa.Column('shift_week', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('shift_end_date', sa.Date(), nullable=True),
        sa.Column('shift_start', sa.DateTime(), nullable=False),
        sa.Column('shift_end', sa.DateTime(), nullable=False),
        sa.Column('total_duration_minutes', sa.Integer(), nullable=False),
        sa.Column('work_duration_minutes', sa.Integer(), nullable=False),
        sa.Column('work_duration_hours', sa.Float(), nullable=False),
        sa.Column('break_duration_minutes', sa.Integer(), nullable=True),
        sa.Column('paid_break_minutes', sa.Integer(), nullable=True),
        sa.Column('unpaid_break_minutes', sa.Integer(), nullable=True),
        sa.Column('shift_type', sa.String(length=30), nullable=True),
        sa.Column('is_regular_weekday', sa.Boolean(), nullable=True),
        sa.Column('is_saturday', sa.Boolean(), nullable=True),
        sa.Column('is_sunday', sa.Boolean(), nullable=True),
        sa.Column('is_public_holiday', sa.Boolean(), nullable=True),
        sa.Column('is_night_shift', sa.Boolean(), nullable=True),
        sa.Column('night_hours', sa.Float(), nullable=True),
        sa.Column('day_hours', sa.Float(), nullable=True),
        sa.Column('required_guards', sa.Integer(), nullable=True),
        sa.Column('assigned_guards_count', sa.Integer(), nullable=True),
        sa.Column('confirmed_guards_count', sa.Integer(), nullable=True),
        sa.Column('checked_in_guards_count', sa.Integer(), nullable=True),
        sa.Column('completed_guards_count', sa.Integer(), nullable=True),
        sa.Column('is_fully_staffed', sa.Boolean(), nullable=True),
        sa.Column('is_understaffed', sa.Boolean(), nullable=True),
        sa.Column('is_overstaffed', sa.Boolean(), nullable=True),
        sa.Column('staffing_percentage', sa.Float(), nullable=True),
        sa.Column('status', shift_status, nullable=False),
        sa.Column('approval_status', sa.String(length=20), nullable=True),
        sa.Column('requires_approval', sa.Boolean(), nullable=True),
        sa.Column('is_training_shift', sa.Boolean(), nullable=True),
        sa.Column('requires_armed_guard', sa.Boolean(), nullable=True),
        sa.Column('requires_supervisor', sa.Boolean(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'location_id', 'shift_date', 'shift_start', 'shift_end',
            name='uq_shift_location_date_start_end'
        )
    )
    op.create_index('ix_shifts_contract_id', 'shifts', ['contract_id'])
    op.create_index('ix_shifts_shift_template_id', 'shifts', ['shift_template_id'])
    op.create_index('ix_shifts_shift_date', 'shifts', ['shift_date'])
    op.create_index('ix_shifts_created_at', 'shifts', ['created_at'])
    op.create_index('ix_shifts_contract_date', 'shifts', ['contract_id', 'shift_date'])


def downgrade() -> None:
    """Drop shift generation tables."""
    op.drop_index('ix_shifts_contract_date', table_name='shifts')
    op.drop_index('ix_shifts_created_at', table_name='shifts')
    op.drop_index('ix_shifts_shift_date', table_name='shifts')
    op.drop_index('ix_shifts_shift_template_id', table_name='shifts')
    op.drop_index('ix_shifts_contract_id', table_name='shifts')
    op.drop_table('shifts')
    sa.Enum(name='shiftstatus').drop(op.get_bind(), checkfirst=True)

    op.drop_index('ix_shift_templates_contract_active', table_name='shift_templates')
    op.drop_index('ix_shift_templates_is_active', table_name='shift_templates')
    op.drop_index('ix_shift_templates_contract_id', table_name='shift_templates')
    op.drop_table('shift_templates')

    op.drop_index('ix_managers_is_active', table_name='managers')
    op.drop_table('managers')
