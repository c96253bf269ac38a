"""Existence checks used by every Alembic revision.

All structural changes in `alembic/versions` are guarded by one of these so
that `upgrade` and `downgrade` can be re-run safely against a database that
was partially migrated by hand or by an older deployment.
"""

from __future__ import annotations

from alembic import op
from sqlalchemy import inspect


def has_table(table_name: str) -> bool:
    return inspect(op.get_bind()).has_table(table_name)


def has_column(table_name: str, column_name: str) -> bool:
    if not has_table(table_name):
        return False
    inspector = inspect(op.get_bind())
    return any(column.get("name") == column_name for column in inspector.get_columns(table_name))


def has_index(table_name: str, index_name: str) -> bool:
    if not has_table(table_name):
        return False
    inspector = inspect(op.get_bind())
    return any(index.get("name") == index_name for index in inspector.get_indexes(table_name))


def has_foreign_key(table_name: str, constraint_name: str) -> bool:
    if not has_table(table_name):
        return False
    inspector = inspect(op.get_bind())
    return any(
        fk.get("name") == constraint_name for fk in inspector.get_foreign_keys(table_name)
    )
