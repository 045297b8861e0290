"""create card catalog and deck store tables

Revision ID: 4c1d9a7e2b10
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c1d9a7e2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'card',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('image', sa.String(length=512), nullable=True),
        sa.Column('power', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'deck',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('owner', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('deck') as batch_op:
        batch_op.create_index(batch_op.f('ix_deck_owner'), ['owner'], unique=False)
    op.create_table(
        'deck_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('deck_id', sa.Integer(), nullable=False),
        sa.Column('card_id', sa.String(length=64), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['card_id'], ['card.id']),
        sa.ForeignKeyConstraint(['deck_id'], ['deck.id']),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('deck_entry')
    with op.batch_alter_table('deck') as batch_op:
        batch_op.drop_index(batch_op.f('ix_deck_owner'))
    op.drop_table('deck')
    op.drop_table('card')
