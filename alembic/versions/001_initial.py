"""Initial badge engine schema

Revision ID: 001_initial
Revises:
Create Date: 2025-09-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Activities (written by ingestion, read by the engine)
    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('strava_activity_id', sa.BigInteger(), unique=True, nullable=True),

        # Activity info
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('activity_type', sa.String(50), nullable=False),
        sa.Column('sport_type', sa.String(50), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('start_date_local', sa.DateTime(), nullable=False),

        # Core metrics
        sa.Column('distance_m', sa.Float(), nullable=True),
        sa.Column('moving_time_s', sa.Integer(), nullable=True),
        sa.Column('elapsed_time_s', sa.Integer(), nullable=True),
        sa.Column('elevation_gain_m', sa.Float(), nullable=True),
        sa.Column('avg_speed_mps', sa.Float(), nullable=True),
        sa.Column('calories', sa.Float(), nullable=True),
        sa.Column('suffer_score', sa.Float(), nullable=True),
        sa.Column('photo_count', sa.Integer(), nullable=True),
        sa.Column('summary_polyline', sa.Text(), nullable=True),

        # Metadata
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('synced_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_activities_user_id', 'activities', ['user_id'])
    op.create_index('ix_activities_start_date_local', 'activities', ['start_date_local'])

    # Badge catalog
    op.create_table(
        'badge_definitions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('code', sa.String(64), unique=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('emoji', sa.String(16), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),

        # Criteria
        sa.Column('criteria_type', sa.String(32), nullable=False),
        sa.Column('metric', sa.String(32), nullable=True),
        sa.Column('condition', sa.String(100), nullable=True),
        sa.Column('activity_type_filter', sa.String(50), nullable=True),
        sa.Column('sports_list', sa.JSON(), nullable=True),

        # Thresholds
        sa.Column('bronze_threshold', sa.Float(), nullable=False),
        sa.Column('silver_threshold', sa.Float(), nullable=False),
        sa.Column('gold_threshold', sa.Float(), nullable=False),
        sa.Column('reset_period', sa.String(16), nullable=False, server_default='none'),
        sa.Column('points_family', sa.String(16), nullable=False, server_default='standard'),

        # Availability
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    # Progress per (user, badge, period)
    op.create_table(
        'badge_progress',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('badge_id', sa.Integer(), nullable=False),
        sa.Column('period_key', sa.String(16), nullable=False, server_default='none'),
        sa.Column('period_start', sa.DateTime(), nullable=True),
        sa.Column('period_end', sa.DateTime(), nullable=True),
        sa.Column('current_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('bronze_achieved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('silver_achieved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('gold_achieved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_activity_id', sa.Integer(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('last_updated', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('user_id', 'badge_id', 'period_key', name='uq_badge_progress_period'),
    )
    op.create_index('ix_badge_progress_user_id', 'badge_progress', ['user_id'])
    op.create_index('ix_badge_progress_badge_id', 'badge_progress', ['badge_id'])

    # Awards per (user, badge)
    op.create_table(
        'awarded_badges',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('badge_id', sa.Integer(), nullable=False),
        sa.Column('tier', sa.String(16), nullable=False),
        sa.Column('progress_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('points_awarded', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('earned_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('user_id', 'badge_id', name='uq_awarded_badge'),
    )
    op.create_index('ix_awarded_badges_user_id', 'awarded_badges', ['user_id'])
    op.create_index('ix_awarded_badges_badge_id', 'awarded_badges', ['badge_id'])

    # Cumulative badge points
    op.create_table(
        'user_badge_points',
        sa.Column('user_id', sa.String(36), primary_key=True),
        sa.Column('badge_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('user_badge_points')
    op.drop_index('ix_awarded_badges_badge_id', 'awarded_badges')
    op.drop_index('ix_awarded_badges_user_id', 'awarded_badges')
    op.drop_table('awarded_badges')
    op.drop_index('ix_badge_progress_badge_id', 'badge_progress')
    op.drop_index('ix_badge_progress_user_id', 'badge_progress')
    op.drop_table('badge_progress')
    op.drop_table('badge_definitions')
    op.drop_index('ix_activities_start_date_local', 'activities')
    op.drop_index('ix_activities_user_id', 'activities')
    op.drop_table('activities')
