"""initial myday schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_0001'
down_revision = None
branch_labels = None
depends_on = None


def _owner():
    return sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('avatar_emoji', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )

    op.create_table(
        'myday_tasks',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('color', sa.String(), nullable=True),
        sa.Column('custom_background_color', sa.String(), nullable=True),
        sa.Column('weightage', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('frequency', sa.String(), nullable=False, server_default='daily'),
        sa.Column('custom_frequency', sa.String(), nullable=True),
        sa.Column('days_of_week', sa.JSON(), nullable=True),
        sa.Column('day_of_month', sa.Integer(), nullable=True),
        sa.Column('frequency_count', sa.Integer(), nullable=True),
        sa.Column('frequency_period', sa.String(), nullable=True),
        sa.Column('interval_value', sa.Integer(), nullable=True),
        sa.Column('interval_unit', sa.String(), nullable=True),
        sa.Column('interval_start_date', sa.String(10), nullable=True),
        sa.Column('time_of_day', sa.String(), nullable=True),
        sa.Column('start_date', sa.String(10), nullable=True),
        sa.Column('end_date', sa.String(10), nullable=True),
        sa.Column('specific_date', sa.String(10), nullable=True),
        sa.Column('end_time', sa.String(), nullable=True),
        sa.Column('dependent_task_ids', sa.JSON(), nullable=True),
        sa.Column('on_hold', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('hold_start_date', sa.String(10), nullable=True),
        sa.Column('hold_end_date', sa.String(10), nullable=True),
        sa.Column('hold_reason', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_myday_tasks_user_created', 'myday_tasks', ['user_id', 'created_at'])

    op.create_table(
        'myday_task_completions',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column('task_id', sa.String(), sa.ForeignKey('myday_tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('completion_date', sa.String(10), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'task_id', 'completion_date', name='uq_completion_user_task_date'),
    )
    op.create_index('ix_myday_completions_user_date', 'myday_task_completions', ['user_id', 'completion_date'])

    op.create_table(
        'myday_task_spillovers',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column('task_id', sa.String(), sa.ForeignKey('myday_tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_date', sa.String(10), nullable=False),
        sa.Column('to_date', sa.String(10), nullable=False),
        sa.Column('moved_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'task_id', 'from_date', name='uq_spillover_user_task_from'),
    )

    op.create_table(
        'myday_events',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('event_date', sa.String(10), nullable=False),
        sa.Column('frequency', sa.String(), nullable=False, server_default='one-time'),
        sa.Column('custom_frequency', sa.String(), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('notify_days_before', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('hide_from_dashboard', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('color', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'myday_journal_entries',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column('entry_date', sa.String(10), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('mood', sa.String(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'entry_date', name='uq_journal_user_date'),
    )

    op.create_table(
        'myday_tags',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('color', sa.String(), nullable=True),
        sa.Column('trackable', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'name', name='uq_tag_user_name'),
    )

    op.create_table(
        'myday_routines',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('time_of_day', sa.String(), nullable=False, server_default='anytime'),
        sa.Column('task_ids', sa.JSON(), nullable=False),
        sa.Column('is_pre_defined', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'myday_user_settings',
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), primary_key=True),
        sa.Column('theme', sa.String(), nullable=False, server_default='purple'),
        sa.Column('dashboard_layout', sa.String(), nullable=False, server_default='uniform'),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # Family collaboration (enums stored as strings, SQLite doesn't need enum creation)
    op.create_table(
        'families',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'family_members',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('family_id', sa.String(), sa.ForeignKey('families.id', ondelete='CASCADE'), nullable=False, index=True),
        _owner(),
        sa.Column('role', sa.Enum('admin', 'member', name='familyroleenum'), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('family_id', 'user_id', name='uq_family_member'),
    )

    op.create_table(
        'family_invitations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('family_id', sa.String(), sa.ForeignKey('families.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('invited_by', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('invited_email', sa.String(), nullable=False, index=True),
        sa.Column('invited_user_id', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('status', sa.Enum('pending', 'accepted', 'rejected', 'cancelled', name='invitationstatusenum'), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'task_assignments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('task_id', sa.String(), sa.ForeignKey('myday_tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_by', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('assigned_to', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('family_id', sa.String(), sa.ForeignKey('families.id', ondelete='CASCADE'), nullable=False),
        sa.Column('due_date', sa.String(10), nullable=True),
        sa.Column('priority', sa.Enum('low', 'normal', 'high', 'urgent', name='assignmentpriorityenum'), nullable=False),
        sa.Column('status', sa.Enum('pending', 'accepted', 'rejected', 'completed', name='assignmentstatusenum'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'shared_tasks',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('task_id', sa.String(), sa.ForeignKey('myday_tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shared_by', sa.String(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('shared_with', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('family_id', sa.String(), sa.ForeignKey('families.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission', sa.Enum('view', 'edit', name='sharepermissionenum'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(), primary_key=True),
        _owner(),
        sa.Column(
            'type',
            sa.Enum('invitation', 'task_assigned', 'task_shared', 'task_completed', 'family_update', name='notificationtypeenum'),
            nullable=False,
        ),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('link', sa.String(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'read'])


def downgrade():
    op.drop_index('ix_notifications_user_read', table_name='notifications')
    op.drop_table('notifications')
    op.drop_table('shared_tasks')
    op.drop_table('task_assignments')
    op.drop_table('family_invitations')
    op.drop_table('family_members')
    op.drop_table('families')
    op.drop_table('myday_user_settings')
    op.drop_table('myday_routines')
    op.drop_table('myday_tags')
    op.drop_table('myday_journal_entries')
    op.drop_table('myday_events')
    op.drop_table('myday_task_spillovers')
    op.drop_index('ix_myday_completions_user_date', table_name='myday_task_completions')
    op.drop_table('myday_task_completions')
    op.drop_index('ix_myday_tasks_user_created', table_name='myday_tasks')
    op.drop_table('myday_tasks')
    op.drop_table('users')
    op.execute("DROP TYPE IF EXISTS familyroleenum")
    op.execute("DROP TYPE IF EXISTS invitationstatusenum")
    op.execute("DROP TYPE IF EXISTS assignmentpriorityenum")
    op.execute("DROP TYPE IF EXISTS assignmentstatusenum")
    op.execute("DROP TYPE IF EXISTS sharepermissionenum")
    op.execute("DROP TYPE IF EXISTS notificationtypeenum")
