"""CLI tools for running and administering Campra."""

import click

from campra.core.config import settings
from campra.core.structured_logging import configure_logging
from campra.db.models import User
from campra.db.session import create_db_engine, create_session_factory
from campra.utils.ids import generate_token


@click.group()
def cli():
    """Campra CLI tools."""
    pass


@cli.command()
def start():
    """Boot the master process (spawns workers unless DISABLE_CLUSTERING is set)."""
    from campra.boot.master import master_main

    master_main(settings)


@cli.command()
def worker():
    """Run a single worker in-process (HTTP server and job queue)."""
    from campra.boot.worker import worker_main

    worker_main(settings=settings)


@cli.command()
@click.option("--revision", default="head", show_default=True, help="Target revision")
def migrate(revision: str):
    """Apply database migrations."""
    from campra.core.migrations import get_migration_status, upgrade

    configure_logging(settings.LOG_LEVEL)
    engine = create_db_engine(settings.DATABASE_URL)
    try:
        upgrade(engine, revision)
        status = get_migration_status(engine)
        click.echo(f"✓ Database at {','.join(status.current_heads) or 'base'}")
    finally:
        engine.dispose()


@cli.command("migration-status")
def migration_status():
    """Show current vs head migration revisions."""
    from campra.core.migrations import get_migration_status

    engine = create_db_engine(settings.DATABASE_URL)
    try:
        status = get_migration_status(engine)
    finally:
        engine.dispose()

    click.echo(f"Current: {','.join(status.current_heads) or 'none'}")
    click.echo(f"Head:    {','.join(status.head_revisions)}")
    if status.is_up_to_date:
        click.echo("✓ Up to date")
    else:
        click.echo("❌ Pending migrations - run `campra migrate`")
        raise SystemExit(1)


@cli.command("create-user")
@click.option("--username", required=True, help="Local username")
@click.option("--admin/--no-admin", default=False, help="Grant administrator role")
@click.option("--moderator/--no-moderator", default=False, help="Grant moderator role")
@click.option("--teacher", is_flag=True, default=False, help="Mark the account as a teacher")
def create_user(username: str, admin: bool, moderator: bool, teacher: bool):
    """
    Create a local user and print its API token.

    Example:
        campra create-user --username alice --moderator
    """
    engine = create_db_engine(settings.DATABASE_URL)
    db = create_session_factory(engine)()
    try:
        existing = db.query(User).filter(User.username_lower == username.lower()).first()
        if existing:
            click.echo(f"❌ User '{username}' already exists")
            raise SystemExit(1)

        user = User(
            username=username,
            username_lower=username.lower(),
            token=generate_token(),
            is_admin=admin,
            is_moderator=moderator,
            is_teacher=teacher,
        )
        db.add(user)
        db.commit()

        click.echo(f"✓ Created user: {username}")
        click.echo(f"  ID: {user.id}")
        click.echo(f"  Token: {user.token}")
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    cli()
