"""Create translation_preferences table

Revision ID: create_translation_preferences_table
Revises: create_translations_table
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_translation_preferences_table'
down_revision = 'create_translations_table'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'translation_preferences',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_role', sa.String(1), nullable=False),
        sa.Column('message_id', sa.String(36), nullable=False),
        sa.Column('show_original', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('target_language', sa.String(10), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("user_role IN ('A', 'B')", name='ck_translation_preferences_user_role'),
        sa.ForeignKeyConstraint(['message_id'], ['messages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        # One preference per user per message
        sa.UniqueConstraint('user_role', 'message_id', name='uq_translation_preferences_user_message')
    )
    op.create_index('ix_translation_preferences_message_id', 'translation_preferences', ['message_id'])


def downgrade():
    op.drop_index('ix_translation_preferences_message_id', table_name='translation_preferences')
    op.drop_table('translation_preferences')
