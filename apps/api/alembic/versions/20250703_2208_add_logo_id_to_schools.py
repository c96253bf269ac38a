"""Add logoId to schools.

Revision ID: 20250703_2208
Revises: 20250703_2206
Create Date: 2025-07-03
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from campra.db.migration_utils import has_column


# revision identifiers, used by Alembic.
revision: str = '20250703_2208'
down_revision: Union[str, Sequence[str], None] = '20250703_2206'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    if not has_column('schools', 'logoId'):
        op.add_column('schools', sa.Column('logoId', sa.String(32), nullable=True))


def downgrade() -> None:
    if has_column('schools', 'logoId'):
        op.drop_column('schools', 'logoId')
