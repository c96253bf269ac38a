"""Add billingExempt flag to user.

Revision ID: 20231114_2213
Revises: 0001_baseline
Create Date: 2023-11-14
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from campra.db.migration_utils import has_column


# revision identifiers, used by Alembic.
revision: str = '20231114_2213'
down_revision: Union[str, Sequence[str], None] = '0001_baseline'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    if not has_column('user', 'billingExempt'):
        op.add_column(
            'user',
            sa.Column('billingExempt', sa.Boolean(), server_default=sa.false(), nullable=False),
        )


def downgrade() -> None:
    if has_column('user', 'billingExempt'):
        op.drop_column('user', 'billingExempt')
