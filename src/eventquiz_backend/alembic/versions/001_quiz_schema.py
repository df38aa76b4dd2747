"""Create quiz schema, role grants and profiles

Revision ID: 001_quiz_schema
Revises: 
Create Date: 2025-07-27

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_quiz_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id():
    return sa.Column('id', sa.String(36), primary_key=True, server_default=sa.text("gen_random_uuid()::text"))


def _timestamp(name):
    return sa.Column(name, sa.DateTime(True), nullable=False, server_default=sa.text("now()"))


def upgrade() -> None:
    op.create_table(
        'user',
        _id(),
        _timestamp('created_at'),
        sa.Column('email', sa.String(320), unique=True),
        sa.Column('user_metadata', sa.JSON()),
    )

    op.create_table(
        'profile',
        _id(),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('display_name', sa.String(255)),
        sa.Column('email', sa.String(320)),
    )

    op.create_table(
        'user_role',
        _id(),
        _timestamp('created_at'),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.Enum('admin', 'user', name='app_role'), nullable=False),
        sa.UniqueConstraint('user_id', 'role', name='user_role_user_id_role_key'),
    )
    op.create_index('idx_user_role_user_id', 'user_role', ['user_id'])

    op.create_table(
        'quiz',
        _id(),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('created_by', sa.String(36), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index('idx_quiz_created_by', 'quiz', ['created_by'])

    op.create_table(
        'question',
        _id(),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quiz.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('option_a', sa.Text()),
        sa.Column('option_b', sa.Text()),
        sa.Column('option_c', sa.Text()),
        sa.Column('option_d', sa.Text()),
        sa.Column('question_order', sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column('points', sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint('points > 0', name='ck_question_points_positive'),
    )
    op.create_index('idx_question_quiz_id', 'question', ['quiz_id'])
    op.create_index('idx_question_order', 'question', ['quiz_id', 'question_order'])

    op.create_table(
        'leaderboard_entry',
        _id(),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.Column('quiz_id', sa.String(36), sa.ForeignKey('quiz.id', ondelete='CASCADE'), nullable=False),
        sa.Column('participant_name', sa.String(255), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column('position', sa.Integer()),
        sa.Column('notes', sa.Text()),
    )
    op.create_index('idx_leaderboard_quiz_id', 'leaderboard_entry', ['quiz_id'])
    op.create_index('idx_leaderboard_position', 'leaderboard_entry', ['quiz_id', 'position'])

    # routines, triggers and policies come from the same declarations the
    # application evaluates
    from eventquiz_backend.permissions.routines import render_routines, render_triggers
    from eventquiz_backend.permissions.rls import render_policies

    for statement in render_routines() + render_triggers() + render_policies():
        op.execute(statement)


def downgrade() -> None:
    from eventquiz_backend.permissions.routines import ROUTINES, TRIGGERS
    from eventquiz_backend.permissions.rls import render_drop_policies

    for statement in render_drop_policies():
        op.execute(statement)
    for trigger in TRIGGERS:
        op.execute(trigger.render_drop())
    for routine in reversed(ROUTINES):
        op.execute(routine.render_drop())

    op.drop_table('leaderboard_entry')
    op.drop_table('question')
    op.drop_table('quiz')
    op.drop_table('user_role')
    op.drop_table('profile')
    op.drop_table('user')
    op.execute("DROP TYPE IF EXISTS app_role;")
