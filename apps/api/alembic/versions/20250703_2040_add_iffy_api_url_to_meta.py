"""Add iffyApiUrl to meta.

Revision ID: 20250703_2040
Revises: 20250703_2038
Create Date: 2025-07-03
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from campra.db.migration_utils import has_column


# revision identifiers, used by Alembic.
revision: str = '20250703_2040'
down_revision: Union[str, Sequence[str], None] = '20250703_2038'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    if not has_column('meta', 'iffyApiUrl'):
        op.add_column('meta', sa.Column('iffyApiUrl', sa.String(512), nullable=True))


def downgrade() -> None:
    if has_column('meta', 'iffyApiUrl'):
        op.drop_column('meta', 'iffyApiUrl')
