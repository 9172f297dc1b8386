"""Create websites and logs tables

Revision ID: 0001_websites_and_logs
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_websites_and_logs'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'websites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('alias', sa.String(length=75), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('alias')
    )

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('website_alias', sa.String(length=75), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text("date_trunc('minute', now())"),
            nullable=False
        ),
        sa.ForeignKeyConstraint(['website_alias'], ['websites.alias']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('website_alias', 'created_at')
    )


def downgrade() -> None:
    op.drop_table('logs')
    op.drop_table('websites')
