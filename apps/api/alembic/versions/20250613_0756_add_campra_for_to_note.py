"""Add campraFor to note.

Revision ID: 20250613_0756
Revises: 20231114_2213
Create Date: 2025-06-13
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from campra.db.migration_utils import has_column


# revision identifiers, used by Alembic.
revision: str = '20250613_0756'
down_revision: Union[str, Sequence[str], None] = '20231114_2213'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    if not has_column('note', 'campraFor'):
        op.add_column('note', sa.Column('campraFor', sa.String(128), nullable=True))


def downgrade() -> None:
    if has_column('note', 'campraFor'):
        op.drop_column('note', 'campraFor')
