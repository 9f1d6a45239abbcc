"""initial_schema_scans_issues_recommendations

Revision ID: 001
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


scan_status = sa.Enum('pending', 'completed', 'failed', name='scanstatus')
issue_category = sa.Enum('layout', 'accessibility', 'conversion', 'mobile', 'performance', name='issuecategory')
issue_severity = sa.Enum('high', 'medium', 'low', name='issueseverity')
recommendation_priority = sa.Enum('high', 'medium', 'low', name='recommendationpriority')
recommendation_effort = sa.Enum('low', 'medium', 'high', name='recommendationeffort')


def upgrade() -> None:
    """Upgrade schema."""
    # Create scans table
    op.create_table(
        'scans',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('status', scan_status, nullable=False),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('issues_found', sa.Integer(), nullable=False),
        sa.Column('recommendations_count', sa.Integer(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('score IS NULL OR (score >= 0 AND score <= 100)', name='check_scan_score_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_scans_id'), 'scans', ['id'], unique=False)
    op.create_index(op.f('ix_scans_user_id'), 'scans', ['user_id'], unique=False)
    op.create_index(op.f('ix_scans_status'), 'scans', ['status'], unique=False)
    op.create_index('idx_scans_user_created', 'scans', ['user_id', 'created_at'], unique=False)

    # Create ux_issues table
    op.create_table(
        'ux_issues',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('scan_id', sa.String(), nullable=False),
        sa.Column('category', issue_category, nullable=False),
        sa.Column('severity', issue_severity, nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('element', sa.Text(), nullable=True),
        sa.Column('impact', sa.Text(), nullable=False),
        sa.Column('screenshot', sa.Text(), nullable=True),
        sa.Column('bounds_x', sa.Integer(), nullable=True),
        sa.Column('bounds_y', sa.Integer(), nullable=True),
        sa.Column('bounds_width', sa.Integer(), nullable=True),
        sa.Column('bounds_height', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['scan_id'], ['scans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ux_issues_id'), 'ux_issues', ['id'], unique=False)
    op.create_index(op.f('ix_ux_issues_scan_id'), 'ux_issues', ['scan_id'], unique=False)
    op.create_index('idx_ux_issues_category', 'ux_issues', ['category'], unique=False)
    op.create_index('idx_ux_issues_severity', 'ux_issues', ['severity'], unique=False)

    # Create recommendations table
    op.create_table(
        'recommendations',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('scan_id', sa.String(), nullable=False),
        sa.Column('priority', recommendation_priority, nullable=False),
        sa.Column('effort', recommendation_effort, nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('implementation', sa.Text(), nullable=False),
        sa.Column('expected_impact', sa.Text(), nullable=False),
        sa.Column('element', sa.Text(), nullable=True),
        sa.Column('screenshot', sa.Text(), nullable=True),
        sa.Column('is_implemented', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('implemented_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['scan_id'], ['scans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_recommendations_id'), 'recommendations', ['id'], unique=False)
    op.create_index(op.f('ix_recommendations_scan_id'), 'recommendations', ['scan_id'], unique=False)
    op.create_index('idx_recommendations_priority', 'recommendations', ['priority'], unique=False)
    op.create_index('idx_recommendations_effort', 'recommendations', ['effort'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_recommendations_effort', table_name='recommendations')
    op.drop_index('idx_recommendations_priority', table_name='recommendations')
    op.drop_index(op.f('ix_recommendations_scan_id'), table_name='recommendations')
    op.drop_index(op.f('ix_recommendations_id'), table_name='recommendations')
    op.drop_table('recommendations')
    op.drop_index('idx_ux_issues_severity', table_name='ux_issues')
    op.drop_index('idx_ux_issues_category', table_name='ux_issues')
    op.drop_index(op.f('ix_ux_issues_scan_id'), table_name='ux_issues')
    op.drop_index(op.f('ix_ux_issues_id'), table_name='ux_issues')
    op.drop_table('ux_issues')
    op.drop_index('idx_scans_user_created', table_name='scans')
    op.drop_index(op.f('ix_scans_status'), table_name='scans')
    op.drop_index(op.f('ix_scans_user_id'), table_name='scans')
    op.drop_index(op.f('ix_scans_id'), table_name='scans')
    op.drop_table('scans')

    bind = op.get_bind()
    for enum_type in (
        recommendation_effort,
        recommendation_priority,
        issue_severity,
        issue_category,
        scan_status,
    ):
        enum_type.drop(bind, checkfirst=True)
