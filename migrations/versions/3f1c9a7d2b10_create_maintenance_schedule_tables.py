"""create_maintenance_schedule_tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2025-06-02 09:14:27.518340

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c9a7d2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # create_all() may already have built some tables on a fresh database
    from sqlalchemy import inspect
    conn = op.get_bind()
    existing_tables = inspect(conn).get_table_names()

    if 'shifts' not in existing_tables:
        op.create_table(
            'shifts',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('start_time', sa.Time(), nullable=False),
            sa.Column('end_time', sa.Time(), nullable=False),
            sa.Column('break_minutes', sa.Integer(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_shifts_active', 'shifts', ['is_active'])

    if 'operators' not in existing_tables:
        op.create_table(
            'operators',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('department', sa.String(length=50), nullable=True),
            sa.Column('email', sa.String(length=120), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False),
            sa.Column('default_shift_id', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['default_shift_id'], ['shifts.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('email')
        )
        op.create_index('idx_operators_active', 'operators', ['is_active'])

    if 'operator_authorizations' not in existing_tables:
        op.create_table(
            'operator_authorizations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('operator_id', sa.Integer(), nullable=False),
            sa.Column('authorization_group', sa.String(length=50), nullable=False),
            sa.Column('granted_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('operator_id', 'authorization_group', name='unique_operator_authorization')
        )

    if 'operator_shift_overrides' not in existing_tables:
        op.create_table(
            'operator_shift_overrides',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('operator_id', sa.Integer(), nullable=False),
            sa.Column('shift_date', sa.Date(), nullable=False),
            sa.Column('shift_id', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['operator_id'], ['operators.id']),
            sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('operator_id', 'shift_date', name='unique_operator_shift_date')
        )
        op.create_index('idx_shift_overrides_date', 'operator_shift_overrides', ['shift_date'])

    if 'machines' not in existing_tables:
        op.create_table(
            'machines',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('final_code', sa.String(length=50), nullable=False),
            sa.Column('description', sa.String(length=200), nullable=True),
            sa.Column('area', sa.String(length=50), nullable=True),
            sa.Column('authorization_group', sa.String(length=50), nullable=True),
            sa.Column('maintenance_needed', sa.Boolean(), nullable=False),
            sa.Column('maintenance_on_hold', sa.Boolean(), nullable=False),
            sa.Column('person_in_charge_id', sa.Integer(), nullable=True),
            sa.ForeignKeyConstraint(['person_in_charge_id'], ['operators.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_machines_final_code', 'machines', ['final_code'])

    if 'maintenance_actions' not in existing_tables:
        op.create_table(
            'maintenance_actions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('machine_id', sa.Integer(), nullable=False),
            sa.Column('action', sa.String(length=500), nullable=False),
            sa.Column('periodicity', sa.String(length=30), nullable=False),
            sa.Column('priority', sa.String(length=20), nullable=False),
            sa.Column('time_needed', sa.Integer(), nullable=True),
            sa.Column('month', sa.String(length=20), nullable=True),
            sa.Column('anchor_date', sa.Date(), nullable=True),
            sa.Column('maintenance_in_charge', sa.Boolean(), nullable=False),
            sa.CheckConstraint('time_needed IS NULL OR time_needed >= 0', name='check_action_time_needed'),
            sa.ForeignKeyConstraint(['machine_id'], ['machines.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_actions_machine', 'maintenance_actions', ['machine_id'])

    if 'maintenance_executions' not in existing_tables:
        op.create_table(
            'maintenance_executions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('action_id', sa.Integer(), nullable=False),
            sa.Column('machine_id', sa.Integer(), nullable=False),
            sa.Column('scheduled_date', sa.Date(), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('actual_time', sa.Integer(), nullable=True),
            sa.Column('completed_by_id', sa.Integer(), nullable=True),
            sa.Column('completed_date', sa.DateTime(), nullable=True),
            sa.Column('notes', sa.String(length=1000), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.CheckConstraint('actual_time IS NULL OR actual_time >= 0', name='check_execution_actual_time'),
            sa.ForeignKeyConstraint(['action_id'], ['maintenance_actions.id']),
            sa.ForeignKeyConstraint(['machine_id'], ['machines.id']),
            sa.ForeignKeyConstraint(['completed_by_id'], ['operators.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('action_id', 'machine_id', 'scheduled_date',
                                name='unique_execution_action_machine_date')
        )
        op.create_index('idx_executions_date', 'maintenance_executions', ['scheduled_date'])


def downgrade():
    op.drop_index('idx_executions_date', table_name='maintenance_executions')
    op.drop_table('maintenance_executions')
    op.drop_index('idx_actions_machine', table_name='maintenance_actions')
    op.drop_table('maintenance_actions')
    op.drop_index('idx_machines_final_code', table_name='machines')
    op.drop_table('machines')
    op.drop_index('idx_shift_overrides_date', table_name='operator_shift_overrides')
    op.drop_table('operator_shift_overrides')
    op.drop_table('operator_authorizations')
    op.drop_index('idx_operators_active', table_name='operators')
    op.drop_table('operators')
    op.drop_index('idx_shifts_active', table_name='shifts')
    op.drop_table('shifts')
