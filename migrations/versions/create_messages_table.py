"""Create messages table

Revision ID: create_messages_table
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_messages_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'messages',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('sender', sa.String(1), nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='text'),
        sa.Column('text', sa.Text(), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_messages_sender', 'messages', ['sender'])
    op.create_index('ix_messages_created_at', 'messages', ['created_at'])


def downgrade():
    op.drop_index('ix_messages_created_at', table_name='messages')
    op.drop_index('ix_messages_sender', table_name='messages')
    op.drop_table('messages')
