"""create tasks table

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

task_status = sa.Enum('OPEN', 'IN_PROGRESS', 'UAT_TEST', 'COMPLETED', name='taskstatus')


def upgrade():
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('task_code', sa.String(length=100), nullable=False),
        sa.Column('task_subject', sa.String(length=500), nullable=False),
        sa.Column('task_detail', sa.Text(), nullable=True),
        sa.Column('task_status', task_status, nullable=False),
        sa.Column('assigned_date', sa.Date(), nullable=False),
        sa.Column('project_code', sa.String(length=100), nullable=False),
        sa.Column('assigned_manager', sa.String(length=255), nullable=False),
        sa.Column('assigned_employee', sa.String(length=255), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_tasks_id', 'tasks', ['id'])
    op.create_index('ix_tasks_task_status', 'tasks', ['task_status'])
    op.create_index('ix_tasks_project_code', 'tasks', ['project_code'])
    op.create_index('idx_task_assignee_status', 'tasks', ['assigned_employee', 'task_status'])
    op.create_index(
        'uq_task_code_active', 'tasks', ['task_code'],
        unique=True,
        postgresql_where=sa.text('is_deleted = false'),
    )


def downgrade():
    op.drop_index('uq_task_code_active', table_name='tasks')
    op.drop_index('idx_task_assignee_status', table_name='tasks')
    op.drop_index('ix_tasks_project_code', table_name='tasks')
    op.drop_index('ix_tasks_task_status', table_name='tasks')
    op.drop_index('ix_tasks_id', table_name='tasks')
    op.drop_table('tasks')
    task_status.drop(op.get_bind(), checkfirst=True)
