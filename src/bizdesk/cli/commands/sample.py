"""Commands that write sample CSV files for import."""

import click

from bizdesk.utils.csv_import import sample_teacher_csv, sample_timetable_csv, write_csv


@click.group()
def sample_group():
    """Write sample CSV files showing the import formats."""
    pass


@sample_group.command("teachers")
@click.argument("path", type=click.Path(dir_okay=False), default="sample_teachers.csv")
def sample_teachers(path: str):
    """Write a sample teacher roster."""
    written = write_csv(path, sample_teacher_csv())
    click.echo(f"Wrote {written}")


@sample_group.command("timetable")
@click.argument("path", type=click.Path(dir_okay=False), default="sample_timetable.csv")
def sample_timetable(path: str):
    """Write a sample class timetable."""
    written = write_csv(path, sample_timetable_csv())
    click.echo(f"Wrote {written}")


def register_commands(cli):
    """Register sample commands with main CLI."""
    cli.add_command(sample_group, name="sample")
