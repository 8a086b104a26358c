"""Create flashcard table

Revision ID: 001_create_flashcard
Revises: 
Create Date: 2024-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_create_flashcard'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'flashcard',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('question', sa.String(), nullable=False),
        sa.Column('answer', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('mastery_level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('mastery_level >= 0 AND mastery_level <= 5', name='ck_flashcard_mastery_level_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_flashcard_category'), 'flashcard', ['category'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_flashcard_category'), table_name='flashcard')
    op.drop_table('flashcard')
