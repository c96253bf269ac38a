"""Add iffyConfidenceThreshold to meta.

Revision ID: 20250703_2041
Revises: 20250703_2040
Create Date: 2025-07-03

Values are 'low', 'medium' or 'high'; existing rows get 'medium'.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from campra.db.migration_utils import has_column


# revision identifiers, used by Alembic.
revision: str = '20250703_2041'
down_revision: Union[str, Sequence[str], None] = '20250703_2040'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    if not has_column('meta', 'iffyConfidenceThreshold'):
        op.add_column(
            'meta',
            sa.Column('iffyConfidenceThreshold', sa.String(16), server_default='medium', nullable=True),
        )


def downgrade() -> None:
    if has_column('meta', 'iffyConfidenceThreshold'):
        op.drop_column('meta', 'iffyConfidenceThreshold')
