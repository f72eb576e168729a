"""Initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create companions table
    op.create_table(
        'companions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('subject', sa.String(), nullable=False),
        sa.Column('topic', sa.Text(), nullable=False),
        sa.Column('voice', sa.String(), nullable=False),
        sa.Column('style', sa.String(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('author', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_companions_subject'), 'companions', ['subject'], unique=False)
    op.create_index(op.f('ix_companions_author'), 'companions', ['author'], unique=False)

    # Create session_history table
    op.create_table(
        'session_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('companion_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['companion_id'], ['companions.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_session_history_id'), 'session_history', ['id'], unique=False)
    op.create_index(op.f('ix_session_history_user_id'), 'session_history', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_session_history_user_id'), table_name='session_history')
    op.drop_index(op.f('ix_session_history_id'), table_name='session_history')
    op.drop_table('session_history')
    op.drop_index(op.f('ix_companions_author'), table_name='companions')
    op.drop_index(op.f('ix_companions_subject'), table_name='companions')
    op.drop_table('companions')
