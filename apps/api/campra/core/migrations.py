"""Alembic helpers for boot-time checks and the `campra migrate` commands."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

ALEMBIC_VERSION_TABLE = "alembic_version"
# pg_advisory_lock key shared by every worker that may auto-migrate
MIGRATION_LOCK_ID = 7_140_218
API_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class MigrationStatus:
    current_heads: tuple[str, ...]
    head_revisions: tuple[str, ...]

    @property
    def is_up_to_date(self) -> bool:
        return set(self.current_heads) == set(self.head_revisions)


class MigrationError(RuntimeError):
    """Raised when automatic migrations fail to reach head."""


def get_alembic_config(database_url: str) -> Config:
    alembic_ini = API_ROOT / "alembic.ini"
    config = Config(str(alembic_ini)) if alembic_ini.is_file() else Config()
    config.set_main_option("script_location", str(API_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def _config_for(engine: Engine) -> Config:
    return get_alembic_config(engine.url.render_as_string(hide_password=False))


def get_migration_status(engine: Engine) -> MigrationStatus:
    script = ScriptDirectory.from_config(_config_for(engine))

    with engine.connect() as connection:
        if inspect(connection).has_table(ALEMBIC_VERSION_TABLE):
            current = MigrationContext.configure(connection).get_current_heads()
        else:
            current = ()

    return MigrationStatus(
        current_heads=tuple(current or ()),
        head_revisions=tuple(script.get_heads() or ()),
    )


def ensure_migrations(engine: Engine, auto_migrate: bool) -> MigrationStatus:
    """Bring the schema to head when allowed, otherwise only warn."""
    status = get_migration_status(engine)
    if status.is_up_to_date:
        return status

    if not auto_migrate:
        logger.warning(
            "Database is not at head (current=%s head=%s); run `campra migrate`",
            ",".join(status.current_heads) or "none",
            ",".join(status.head_revisions),
        )
        return status

    upgrade(engine, "head")
    status = get_migration_status(engine)
    if not status.is_up_to_date:
        raise MigrationError("Database migrations did not reach head after auto-upgrade.")
    logger.info("Database migrated to %s", ",".join(status.current_heads))
    return status


def upgrade(engine: Engine, revision: str = "head") -> None:
    _run(engine, lambda config: command.upgrade(config, revision))


def downgrade(engine: Engine, revision: str) -> None:
    _run(engine, lambda config: command.downgrade(config, revision))


def _run(engine: Engine, step: Callable[[Config], None]) -> None:
    """Run an Alembic command on one connection, serialised across processes on PostgreSQL."""
    config = _config_for(engine)

    if engine.dialect.name != "postgresql":
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            step(config)
        return

    with engine.connect() as connection, _advisory_lock(connection):
        config.attributes["connection"] = connection
        step(config)
        if connection.in_transaction():
            connection.commit()


@contextmanager
def _advisory_lock(connection: Connection) -> Iterator[None]:
    params = {"lock_id": MIGRATION_LOCK_ID}
    connection.execute(text("SELECT pg_advisory_lock(:lock_id)"), params)
    connection.commit()
    try:
        yield
    finally:
        if connection.in_transaction():
            connection.rollback()
        connection.execute(text("SELECT pg_advisory_unlock(:lock_id)"), params)
        connection.commit()
