"""Teacher management commands."""

from dataclasses import replace
from pathlib import Path

import click

from bizdesk.cli.error_handling import handle_domain_error, user_id
from bizdesk.domain.errors import DomainError
from bizdesk.domain.substitution import SubstitutionService
from bizdesk.utils.csv_import import parse_csv, teachers_from_rows, teachers_to_csv
from bizdesk.utils.resolvers import resolve_teacher


def load_service(ctx) -> SubstitutionService:
    """Substitution service with settings, teachers and classes loaded."""
    service = SubstitutionService(ctx.obj["db"], user_id(ctx))
    try:
        service.load_all()
    except DomainError as e:
        handle_domain_error(ctx, e)
    return service


@click.group()
def teacher_group():
    """Manage teachers."""
    pass


@teacher_group.command("add")
@click.argument("name")
@click.option("--subject", default="", help="Subject taught")
@click.option("--post", default="", help="Post, e.g. 'Senior Teacher'")
@click.option("--contact", "contact_number", default="", help="Contact number")
@click.option("--photo-url", help="Photo URL")
@click.pass_context
def add_teacher(ctx, name: str, subject: str, post: str, contact_number: str, photo_url):
    """Add a teacher.

    The new teacher is free in every period until 'timetable sync' derives
    their schedule from the class timetables.

    Examples:
        bizdesk teacher add "Priya Rathore" --subject English --post "Senior Teacher"
    """
    service = load_service(ctx)
    try:
        created = service.save_teacher(name, subject, post, contact_number, photo_url)
        click.echo(f"Added teacher '{created.name}' (ID: {created.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@teacher_group.command("list")
@click.pass_context
def list_teachers(ctx):
    """List all teachers."""
    service = load_service(ctx)
    teachers = service.state.teachers
    if not teachers:
        click.echo("No teachers found.")
        return

    click.echo("\nTeachers:")
    click.echo("-" * 80)
    for t in teachers:
        click.echo(
            f"ID: {t.id:3d} | {t.name:24s} | {t.subject:14s} | {t.post:18s} | {t.contact_number}"
        )


@teacher_group.command("update")
@click.argument("teacher", metavar="TEACHER")
@click.option("--name", help="New name")
@click.option("--subject", help="New subject")
@click.option("--post", help="New post")
@click.option("--contact", "contact_number", help="New contact number")
@click.pass_context
def update_teacher(ctx, teacher: str, name, subject, post, contact_number):
    """Update a teacher's details.

    TEACHER can be a teacher name or ID.
    """
    service = load_service(ctx)
    try:
        current = resolve_teacher(service.state.teachers, teacher)
        changes = {
            key: value
            for key, value in (
                ("name", name),
                ("subject", subject),
                ("post", post),
                ("contact_number", contact_number),
            )
            if value is not None
        }
        updated = service.update_teacher(replace(current, **changes))
        click.echo(f"Updated teacher '{updated.name}' (ID: {updated.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@teacher_group.command("delete")
@click.argument("teacher", metavar="TEACHER")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_teacher(ctx, teacher: str, yes: bool):
    """Delete a teacher.

    Class timetables and substitution records that mention the teacher are
    left as they are.
    """
    service = load_service(ctx)
    try:
        current = resolve_teacher(service.state.teachers, teacher)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not yes and not click.confirm(f"Delete teacher '{current.name}' (ID: {current.id})?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_teacher(current.id)
        click.echo(f"Deleted teacher '{current.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@teacher_group.command("schedule")
@click.argument("teacher", metavar="TEACHER")
@click.pass_context
def show_schedule(ctx, teacher: str):
    """Show a teacher's weekly schedule, derived from the class timetables."""
    service = load_service(ctx)
    try:
        current = resolve_teacher(service.state.teachers, teacher)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    derived = {t.id: t for t in service.sync_teacher_schedules(persist=False)}[current.id]
    periods = service.state.periods
    click.echo(f"\nSchedule for {derived.name}:")
    click.echo("Day".ljust(10) + "".join(p.ljust(12) for p in periods))
    for day, cells in derived.schedule.items():
        click.echo(day.ljust(10) + "".join(cells.get(p, "").ljust(12) for p in periods))


@teacher_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_teachers(ctx, csv_file: str):
    """Import teachers from a CSV roster (Name, Subject, Post, Contact Number).

    Use 'bizdesk sample teachers' to get a template file.
    """
    service = load_service(ctx)
    rows = parse_csv(Path(csv_file).read_text(encoding="utf-8"))
    imported = 0
    try:
        for fields in teachers_from_rows(rows):
            service.save_teacher(**fields)
            imported += 1
    except DomainError as e:
        click.echo(f"Imported {imported} teachers before the error.", err=True)
        handle_domain_error(ctx, e)
    click.echo(f"Imported {imported} teachers")


@teacher_group.command("export")
@click.argument("csv_file", type=click.Path(dir_okay=False))
@click.pass_context
def export_teachers(ctx, csv_file: str):
    """Export all teachers to a CSV roster."""
    service = load_service(ctx)
    if not service.state.teachers:
        click.echo("No teachers to export.")
        return
    Path(csv_file).write_text(teachers_to_csv(service.state.teachers), encoding="utf-8")
    click.echo(f"Exported {len(service.state.teachers)} teachers to {csv_file}")


def register_commands(cli):
    """Register teacher commands with main CLI."""
    cli.add_command(teacher_group, name="teacher")
