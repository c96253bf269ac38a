"""Schema migrations: baseline plus the tracked column/constraint deltas."""

import pytest
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text

from campra.core import migrations
from campra.db.base import Base
from campra.db.session import create_db_engine

HEAD = "20250703_2208"


@pytest.fixture
def file_engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'campra.db'}")
    yield engine
    engine.dispose()


def _columns(engine, table: str) -> set[str]:
    return {column["name"] for column in inspect(engine).get_columns(table)}


def _indexes(engine, table: str) -> set[str]:
    return {index["name"] for index in inspect(engine).get_indexes(table)}


def _foreign_keys(engine, table: str) -> dict[str, dict]:
    return {fk["name"]: fk for fk in inspect(engine).get_foreign_keys(table)}


def test_revision_chain_has_single_head():
    script = ScriptDirectory.from_config(migrations.get_alembic_config("sqlite://"))

    assert script.get_heads() == [HEAD]
    chain = [rev.revision for rev in script.walk_revisions()]
    assert chain[-1] == "0001_baseline"
    assert len(chain) == 9


def test_upgrade_head_applies_all_deltas(file_engine):
    migrations.upgrade(file_engine, "head")

    assert "billingExempt" in _columns(file_engine, "user")
    assert "isTeacher" in _columns(file_engine, "user")
    assert "IDX_user_isTeacher" in _indexes(file_engine, "user")
    assert {"campraFor", "iffyScanResult", "iffyScanUrl"} <= _columns(file_engine, "note")
    assert {"iffyApiUrl", "iffyConfidenceThreshold", "automodAccountId"} <= _columns(file_engine, "meta")
    assert "logoId" in _columns(file_engine, "schools")

    fk = _foreign_keys(file_engine, "meta")["FK_automod_account_id"]
    assert fk["referred_table"] == "user"
    assert fk["constrained_columns"] == ["automodAccountId"]
    assert fk["options"].get("ondelete") == "SET NULL"

    status = migrations.get_migration_status(file_engine)
    assert status.is_up_to_date
    assert status.current_heads == (HEAD,)


def test_confidence_threshold_defaults_to_medium(file_engine):
    migrations.upgrade(file_engine, "head")

    with file_engine.begin() as conn:
        conn.execute(text("INSERT INTO meta (id) VALUES ('x')"))
        threshold = conn.execute(text('SELECT "iffyConfidenceThreshold" FROM meta')).scalar()

    assert threshold == "medium"


def test_deleting_automod_account_nulls_reference(file_engine):
    migrations.upgrade(file_engine, "head")

    with file_engine.begin() as conn:
        conn.execute(text('INSERT INTO "user" (id, username, "usernameLower") VALUES (\'u1\', \'bot\', \'bot\')'))
        conn.execute(text('INSERT INTO meta (id, "automodAccountId") VALUES (\'x\', \'u1\')'))

    with file_engine.begin() as conn:
        conn.execute(text('DELETE FROM "user" WHERE id = \'u1\''))

    with file_engine.connect() as conn:
        assert conn.execute(text('SELECT "automodAccountId" FROM meta')).scalar() is None


def test_downgrade_reverses_deltas_in_order(file_engine):
    migrations.upgrade(file_engine, "head")

    migrations.downgrade(file_engine, "20250703_2053")
    assert "logoId" not in _columns(file_engine, "schools")
    assert "isTeacher" not in _columns(file_engine, "user")
    assert "IDX_user_isTeacher" not in _indexes(file_engine, "user")
    assert "FK_automod_account_id" in _foreign_keys(file_engine, "meta")

    migrations.downgrade(file_engine, "20250703_2041")
    assert "automodAccountId" not in _columns(file_engine, "meta")
    assert "FK_automod_account_id" not in _foreign_keys(file_engine, "meta")

    migrations.downgrade(file_engine, "0001_baseline")
    assert "billingExempt" not in _columns(file_engine, "user")
    assert not {"campraFor", "iffyScanResult", "iffyScanUrl"} & _columns(file_engine, "note")
    assert not {"iffyApiUrl", "iffyConfidenceThreshold"} & _columns(file_engine, "meta")


def test_downgrade_to_base_then_upgrade_again(file_engine):
    migrations.upgrade(file_engine, "head")
    migrations.downgrade(file_engine, "base")

    tables = set(inspect(file_engine).get_table_names())
    assert "user" not in tables
    assert "job" not in tables

    migrations.upgrade(file_engine, "head")
    assert migrations.get_migration_status(file_engine).is_up_to_date


def test_upgrade_skips_objects_that_already_exist(file_engine):
    """A schema created outside Alembic is adopted without errors."""
    Base.metadata.create_all(file_engine)

    migrations.upgrade(file_engine, "head")

    assert migrations.get_migration_status(file_engine).current_heads == (HEAD,)
    assert "FK_automod_account_id" in _foreign_keys(file_engine, "meta")


def test_delta_downgrade_is_safe_when_objects_are_already_gone(file_engine):
    migrations.upgrade(file_engine, "head")
    with file_engine.begin() as conn:
        conn.execute(text('DROP INDEX "IDX_user_isTeacher"'))
        conn.execute(text('ALTER TABLE schools DROP COLUMN "logoId"'))

    migrations.downgrade(file_engine, "20250703_2053")

    assert "isTeacher" not in _columns(file_engine, "user")


def test_ensure_migrations_without_auto_migrate_only_reports(file_engine):
    status = migrations.ensure_migrations(file_engine, auto_migrate=False)

    assert not status.is_up_to_date
    assert status.current_heads == ()
    assert "job" not in inspect(file_engine).get_table_names()


def test_ensure_migrations_with_auto_migrate_reaches_head(file_engine):
    status = migrations.ensure_migrations(file_engine, auto_migrate=True)

    assert status.is_up_to_date
    assert "job" in inspect(file_engine).get_table_names()
