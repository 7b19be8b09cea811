"""Main CLI entry point."""

import logging

import click
from bizdesk.database.factories import create_sqlite_database

# Import and register all commands at module level
from bizdesk.cli.commands import (
    catalog,
    inventory,
    invoice,
    sample,
    settings,
    staff,
    substitution,
    teacher,
    timetable,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BIZDESK_DB_PATH environment variable)",
    envvar="BIZDESK_DB_PATH",
)
@click.option(
    "--user",
    default="local",
    show_default=True,
    envvar="BIZDESK_USER",
    help="User whose records are read and written (BIZDESK_USER)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, user: str, verbose: bool):
    """bizdesk - small business back office.

    Invoices, products and inventory, staff attendance and salaries, and
    teacher substitution planning for a school timetable.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["user"] = user

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
teacher.register_commands(cli)
timetable.register_commands(cli)
substitution.register_commands(cli)
settings.register_commands(cli)
staff.register_commands(cli)
catalog.register_commands(cli)
inventory.register_commands(cli)
invoice.register_commands(cli)
sample.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
