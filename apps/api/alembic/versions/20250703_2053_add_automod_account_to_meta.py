"""Add automodAccountId to meta with FK to user.

Revision ID: 20250703_2053
Revises: 20250703_2041
Create Date: 2025-07-03

Batch mode is used so SQLite can add and drop the constraint (table
recreate); PostgreSQL receives plain ALTER statements.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from campra.db.migration_utils import has_column, has_foreign_key


# revision identifiers, used by Alembic.
revision: str = '20250703_2053'
down_revision: Union[str, Sequence[str], None] = '20250703_2041'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

FK_NAME = 'FK_automod_account_id'


def upgrade() -> None:
    if not has_column('meta', 'automodAccountId'):
        with op.batch_alter_table('meta') as batch_op:
            batch_op.add_column(sa.Column('automodAccountId', sa.String(32), nullable=True))

    if not has_foreign_key('meta', FK_NAME):
        with op.batch_alter_table('meta') as batch_op:
            batch_op.create_foreign_key(
                FK_NAME,
                'user',
                ['automodAccountId'],
                ['id'],
                ondelete='SET NULL',
            )


def downgrade() -> None:
    if has_foreign_key('meta', FK_NAME):
        with op.batch_alter_table('meta') as batch_op:
            batch_op.drop_constraint(FK_NAME, type_='foreignkey')

    if has_column('meta', 'automodAccountId'):
        with op.batch_alter_table('meta') as batch_op:
            batch_op.drop_column('automodAccountId')
