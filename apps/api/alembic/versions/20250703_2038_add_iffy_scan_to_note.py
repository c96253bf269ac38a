"""Store the latest Iffy scan result on note.

Revision ID: 20250703_2038
Revises: 20250613_0756
Create Date: 2025-07-03
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from campra.db.migration_utils import has_column


# revision identifiers, used by Alembic.
revision: str = '20250703_2038'
down_revision: Union[str, Sequence[str], None] = '20250613_0756'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    if not has_column('note', 'iffyScanResult'):
        op.add_column(
            'note',
            sa.Column(
                'iffyScanResult',
                sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'),
                nullable=True,
            ),
        )
    if not has_column('note', 'iffyScanUrl'):
        op.add_column('note', sa.Column('iffyScanUrl', sa.String(512), nullable=True))


def downgrade() -> None:
    if has_column('note', 'iffyScanUrl'):
        op.drop_column('note', 'iffyScanUrl')
    if has_column('note', 'iffyScanResult'):
        op.drop_column('note', 'iffyScanResult')
