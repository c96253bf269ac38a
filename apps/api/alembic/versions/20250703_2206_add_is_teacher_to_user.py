"""Add isTeacher role flag to user.

Revision ID: 20250703_2206
Revises: 20250703_2053
Create Date: 2025-07-03
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from campra.db.migration_utils import has_column, has_index


# revision identifiers, used by Alembic.
revision: str = '20250703_2206'
down_revision: Union[str, Sequence[str], None] = '20250703_2053'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INDEX_NAME = 'IDX_user_isTeacher'


def upgrade() -> None:
    if not has_column('user', 'isTeacher'):
        op.add_column(
            'user',
            sa.Column(
                'isTeacher',
                sa.Boolean(),
                server_default=sa.false(),
                nullable=False,
                comment='Whether the User is a teacher.',
            ),
        )
    if not has_index('user', INDEX_NAME):
        op.create_index(INDEX_NAME, 'user', ['isTeacher'])


def downgrade() -> None:
    if has_index('user', INDEX_NAME):
        op.drop_index(INDEX_NAME, table_name='user')
    if has_column('user', 'isTeacher'):
        op.drop_column('user', 'isTeacher')
