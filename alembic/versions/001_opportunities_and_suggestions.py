"""opportunities_and_suggestions

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

opportunity_status = sa.Enum('NEW', 'IN_PROGRESS', 'RESOLVED', 'IGNORED', name='opportunitystatus')
suggestion_status = sa.Enum(
    'NEW', 'APPROVED', 'IN_PROGRESS', 'SKIPPED', 'FIXED', 'OUTDATED', 'ERROR', 'PENDING_VALIDATION',
    name='suggestionstatus',
)


def upgrade() -> None:
    """Upgrade schema."""
    # Create opportunities table
    op.create_table(
        'opportunities',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('site_id', sa.String(), nullable=False),
        sa.Column('audit_id', sa.String(), nullable=True),
        sa.Column('runbook', sa.Text(), nullable=True),
        sa.Column('type', sa.String(64), nullable=False),
        sa.Column('origin', sa.String(32), nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('status', opportunity_status, nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('updated_by', sa.String(128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_opportunities_id'), 'opportunities', ['id'], unique=False)
    op.create_index(op.f('ix_opportunities_site_id'), 'opportunities', ['site_id'], unique=False)
    op.create_index(op.f('ix_opportunities_type'), 'opportunities', ['type'], unique=False)
    op.create_index(op.f('ix_opportunities_status'), 'opportunities', ['status'], unique=False)
    op.create_index('ix_opportunities_site_type', 'opportunities', ['site_id', 'type'], unique=False)

    # Create suggestions table
    op.create_table(
        'suggestions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('opportunity_id', sa.String(), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('status', suggestion_status, nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('updated_by', sa.String(128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['opportunity_id'], ['opportunities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_suggestions_id'), 'suggestions', ['id'], unique=False)
    op.create_index(op.f('ix_suggestions_opportunity_id'), 'suggestions', ['opportunity_id'], unique=False)
    op.create_index(op.f('ix_suggestions_status'), 'suggestions', ['status'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_suggestions_status'), table_name='suggestions')
    op.drop_index(op.f('ix_suggestions_opportunity_id'), table_name='suggestions')
    op.drop_index(op.f('ix_suggestions_id'), table_name='suggestions')
    op.drop_table('suggestions')
    op.drop_index('ix_opportunities_site_type', table_name='opportunities')
    op.drop_index(op.f('ix_opportunities_status'), table_name='opportunities')
    op.drop_index(op.f('ix_opportunities_type'), table_name='opportunities')
    op.drop_index(op.f('ix_opportunities_site_id'), table_name='opportunities')
    op.drop_index(op.f('ix_opportunities_id'), table_name='opportunities')
    op.drop_table('opportunities')
    suggestion_status.drop(op.get_bind(), checkfirst=True)
    opportunity_status.drop(op.get_bind(), checkfirst=True)
