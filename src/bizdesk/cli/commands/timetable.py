"""Class timetable commands."""

from pathlib import Path

import click

from bizdesk.cli.commands.teacher import load_service
from bizdesk.cli.error_handling import handle_domain_error
from bizdesk.domain.entities import COMBINED, SPLIT, AdditionalEntry, ClassSchedule
from bizdesk.domain.errors import DomainError, NotFoundError, class_not_found
from bizdesk.domain.substitution_state import DAYS
from bizdesk.utils.csv_import import classes_from_rows, parse_csv, parse_subject_teacher


def resolve_class(classes, ref: str) -> ClassSchedule:
    """Find a class by ID or (case-insensitive) name."""
    if ref.strip().isdigit():
        for class_schedule in classes:
            if class_schedule.id == int(ref):
                return class_schedule
        raise NotFoundError(class_not_found(int(ref)))
    for class_schedule in classes:
        if class_schedule.class_name.lower() == ref.strip().lower():
            return class_schedule
    raise NotFoundError(class_not_found(ref))


def _day(value: str) -> str:
    for day in DAYS:
        if day.lower() == value.strip().lower() or day[:3].lower() == value.strip().lower():
            return day
    raise click.BadParameter(f"'{value}' is not one of {', '.join(DAYS)}")


@click.group()
def class_group():
    """Manage class timetables."""
    pass


@class_group.command("add")
@click.argument("class_name")
@click.pass_context
def add_class(ctx, class_name: str):
    """Add a class with an empty timetable.

    Every period gets the configured time slot.

    Examples:
        bizdesk class add XI-A
    """
    service = load_service(ctx)
    try:
        created = service.save_class(class_name)
        click.echo(f"Added class '{created.class_name}' (ID: {created.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@class_group.command("list")
@click.pass_context
def list_classes(ctx):
    """List all classes."""
    service = load_service(ctx)
    if not service.state.classes:
        click.echo("No classes found.")
        return
    click.echo("\nClasses:")
    click.echo("-" * 40)
    for c in service.state.classes:
        click.echo(f"ID: {c.id:3d} | {c.class_name}")


@class_group.command("show")
@click.argument("class_ref", metavar="CLASS")
@click.option("--day", help="Only show one day")
@click.pass_context
def show_class(ctx, class_ref: str, day: str | None):
    """Show a class timetable.

    CLASS can be a class name or ID.
    """
    service = load_service(ctx)
    try:
        class_schedule = resolve_class(service.state.classes, class_ref)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    days = [_day(day)] if day else list(DAYS)
    click.echo(f"\nTimetable for {class_schedule.class_name}:")
    for name in days:
        click.echo(f"\n{name}")
        cells = class_schedule.schedule.get(name) or {}
        for period in service.state.periods:
            entry = cells.get(period)
            if entry is None or not (entry.subject or entry.teacher):
                click.echo(f"  {period:>3} {'':12s} -")
                continue
            line = f"  {period:>3} {entry.time:12s} {entry.subject}"
            if entry.teacher:
                line += f" ({entry.teacher})"
            for extra in entry.additional_entries:
                line += f" + {extra.subject} ({extra.teacher}, {extra.type}"
                if extra.type == COMBINED and extra.combined_classes:
                    line += f" with {', '.join(extra.combined_classes)}"
                line += ")"
            click.echo(line)


@class_group.command("set-period")
@click.argument("class_ref", metavar="CLASS")
@click.argument("day")
@click.argument("period")
@click.argument("cell", metavar="SUBJECT(TEACHER)")
@click.option("--split", "splits", multiple=True, metavar="SUBJECT(TEACHER)",
              help="Another teacher taking part of the class (repeatable)")
@click.option("--combined", "combined", metavar="SUBJECT(TEACHER)",
              help="Teacher taking this class together with others")
@click.option("--with", "combined_with", multiple=True, metavar="CLASS",
              help="Classes joined in the combined period (repeatable)")
@click.option("--all-days", is_flag=True, help="Copy the day to every other day afterwards")
@click.pass_context
def set_period(ctx, class_ref, day, period, cell, splits, combined, combined_with, all_days):
    """Set one period of a class timetable.

    Examples:
        bizdesk class set-period XI-A Monday 3 "MATHS(PRIYA)"
        bizdesk class set-period XI-A Mon 4 "GAMES(RAVI)" --combined "GAMES(ANIL)" --with XI-B
    """
    service = load_service(ctx)
    extras = []
    for value in splits:
        parsed = parse_subject_teacher(value)
        extras.append(AdditionalEntry(parsed["subject"], parsed["teacher"], SPLIT))
    if combined:
        parsed = parse_subject_teacher(combined)
        extras.append(
            AdditionalEntry(parsed["subject"], parsed["teacher"], COMBINED, tuple(combined_with))
        )

    parsed = parse_subject_teacher(cell)
    try:
        class_schedule = resolve_class(service.state.classes, class_ref)
        day_name = _day(day)
        updated = service.set_period_entry(
            class_schedule, day_name, period, parsed["subject"], parsed["teacher"], extras
        )
        if all_days:
            updated = service.copy_day_to_all_days(updated, day_name)
        service.update_class(updated)
        service.sync_teacher_schedules()
        click.echo(f"Updated {class_schedule.class_name} {day_name} period {period}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@class_group.command("copy-day")
@click.argument("class_ref", metavar="CLASS")
@click.argument("day")
@click.pass_context
def copy_day(ctx, class_ref: str, day: str):
    """Copy one day's timetable to every day of the week."""
    service = load_service(ctx)
    try:
        class_schedule = resolve_class(service.state.classes, class_ref)
        day_name = _day(day)
        service.update_class(service.copy_day_to_all_days(class_schedule, day_name))
        service.sync_teacher_schedules()
        click.echo(f"Copied {day_name} to every day for {class_schedule.class_name}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@class_group.command("delete")
@click.argument("class_ref", metavar="CLASS")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_class(ctx, class_ref: str, yes: bool):
    """Delete a class timetable."""
    service = load_service(ctx)
    try:
        class_schedule = resolve_class(service.state.classes, class_ref)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not yes and not click.confirm(f"Delete class '{class_schedule.class_name}'?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_class(class_schedule.id)
        service.sync_teacher_schedules()
        click.echo(f"Deleted class '{class_schedule.class_name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@class_group.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_classes(ctx, csv_file: str):
    """Import class timetables from CSV.

    The first column is the class name; each further column is one period
    holding SUBJECT(TEACHER). The row is used for every day of the week.
    Use 'bizdesk sample timetable' to get a template file.
    """
    service = load_service(ctx)
    rows = parse_csv(Path(csv_file).read_text(encoding="utf-8"))
    imported = 0
    try:
        for class_name, schedule in classes_from_rows(
            rows, service.state.periods, service.state.time_slots
        ):
            service.save_class(class_name, schedule)
            imported += 1
        service.sync_teacher_schedules()
    except DomainError as e:
        click.echo(f"Imported {imported} classes before the error.", err=True)
        handle_domain_error(ctx, e)
    click.echo(f"Imported {imported} classes")


@click.group()
def timetable_group():
    """Derived teacher schedules."""
    pass


@timetable_group.command("sync")
@click.pass_context
def sync(ctx):
    """Recompute and store every teacher's schedule from the class timetables."""
    service = load_service(ctx)
    try:
        teachers = service.sync_teacher_schedules()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Synced schedules for {len(teachers)} teachers")


@timetable_group.command("free")
@click.argument("day")
@click.argument("period")
@click.pass_context
def free_teachers(ctx, day: str, period: str):
    """List teachers with no class in a period."""
    service = load_service(ctx)
    service.sync_teacher_schedules(persist=False)
    free = service.available_substitutes(_day(day), period)
    if not free:
        click.echo("No free teachers.")
        return
    for t in free:
        click.echo(f"{t.name} ({t.subject})" if t.subject else t.name)


def register_commands(cli):
    """Register class and timetable commands with main CLI."""
    cli.add_command(class_group, name="class")
    cli.add_command(timetable_group, name="timetable")
