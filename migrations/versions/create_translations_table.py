"""Create translations table for message translation caching

Revision ID: create_translations_table
Revises: create_messages_table
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_translations_table'
down_revision = 'create_messages_table'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'translations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('message_id', sa.String(36), nullable=False),
        sa.Column('source_language', sa.String(10), nullable=False),
        sa.Column('target_language', sa.String(10), nullable=False),
        sa.Column('translated_text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['message_id'], ['messages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        # One translation per message per language pair
        sa.UniqueConstraint(
            'message_id', 'source_language', 'target_language',
            name='uq_translations_message_language_pair'
        )
    )
    op.create_index('ix_translations_message_id', 'translations', ['message_id'])
    op.create_index('idx_translations_languages', 'translations', ['source_language', 'target_language'])


def downgrade():
    op.drop_index('idx_translations_languages', table_name='translations')
    op.drop_index('ix_translations_message_id', table_name='translations')
    op.drop_table('translations')
