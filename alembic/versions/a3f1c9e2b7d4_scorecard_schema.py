"""scorecard schema

Revision ID: a3f1c9e2b7d4
Revises:
Create Date: 2026-10-17 09:12:44.301552

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a3f1c9e2b7d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'scorecard_roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('role_name', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('owner_id', 'role_name', name='uq_owner_role_name'),
    )
    op.create_index('ix_scorecard_roles_id', 'scorecard_roles', ['id'])
    op.create_index('ix_scorecard_roles_owner_id', 'scorecard_roles', ['owner_id'])

    op.create_table(
        'scorecard_metrics',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('scorecard_roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('metric_name', sa.String(), nullable=False),
        sa.Column('metric_type', sa.String(), nullable=False),
        sa.Column('goal_value', sa.Float(), nullable=False),
        sa.Column('is_inverted', sa.Boolean(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('is_visible', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('role_id', 'metric_name', name='uq_role_metric_name'),
    )
    op.create_index('ix_scorecard_metrics_id', 'scorecard_metrics', ['id'])
    op.create_index('ix_scorecard_metrics_role_id', 'scorecard_metrics', ['role_id'])

    op.create_table(
        'scorecard_weekly_data',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('metric_id', sa.Integer(), sa.ForeignKey('scorecard_metrics.id', ondelete='CASCADE'), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('actual_value', sa.Float(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('metric_id', 'week_number', 'year', name='uq_metric_week_year'),
    )
    op.create_index('ix_scorecard_weekly_data_id', 'scorecard_weekly_data', ['id'])
    op.create_index('ix_scorecard_weekly_data_metric_id', 'scorecard_weekly_data', ['metric_id'])

    op.create_table(
        'scorecard_monthly_summaries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('scorecard_roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('average_grade_percentage', sa.Float(), nullable=False),
        sa.Column('average_grade_letter', sa.String(length=1), nullable=False),
        sa.Column('computed_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('role_id', 'month', 'year', name='uq_role_month_year'),
    )
    op.create_index('ix_scorecard_monthly_summaries_id', 'scorecard_monthly_summaries', ['id'])
    op.create_index('ix_scorecard_monthly_summaries_role_id', 'scorecard_monthly_summaries', ['role_id'])

    op.create_table(
        'scorecard_metric_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'monthly_summary_id',
            sa.Integer(),
            sa.ForeignKey('scorecard_monthly_summaries.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('metric_id', sa.Integer(), sa.ForeignKey('scorecard_metrics.id', ondelete='CASCADE'), nullable=False),
        sa.Column('metric_name', sa.String(), nullable=False),
        sa.Column('metric_type', sa.String(), nullable=False),
        sa.Column('actual_value', sa.Float(), nullable=False),
        sa.Column('goal_value', sa.Float(), nullable=False),
        sa.Column('percentage_of_goal', sa.Float(), nullable=False),
        sa.Column('grade_letter', sa.String(length=1), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
    )
    op.create_index('ix_scorecard_metric_scores_id', 'scorecard_metric_scores', ['id'])
    op.create_index(
        'ix_scorecard_metric_scores_monthly_summary_id', 'scorecard_metric_scores', ['monthly_summary_id']
    )

    op.create_table(
        'company_summaries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('company_average', sa.Float(), nullable=False),
        sa.Column('company_grade', sa.String(length=1), nullable=False),
        sa.Column('computed_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('owner_id', 'month', 'year', name='uq_owner_month_year'),
    )
    op.create_index('ix_company_summaries_id', 'company_summaries', ['id'])
    op.create_index('ix_company_summaries_owner_id', 'company_summaries', ['owner_id'])


def downgrade() -> None:
    # Children first
    op.drop_table('company_summaries')
    op.drop_table('scorecard_metric_scores')
    op.drop_table('scorecard_monthly_summaries')
    op.drop_table('scorecard_weekly_data')
    op.drop_table('scorecard_metrics')
    op.drop_table('scorecard_roles')
