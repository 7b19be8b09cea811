"""Substitution planning commands."""

from datetime import date
from pathlib import Path

import click

from bizdesk.cli.commands.teacher import load_service
from bizdesk.cli.error_handling import handle_domain_error, user_id
from bizdesk.domain.errors import DomainError
from bizdesk.domain.reports import ReportService
from bizdesk.domain.substitution import weekday_name
from bizdesk.utils.csv_import import (
    daily_substitutions_to_csv,
    teacher_stats_to_csv,
    write_csv,
)
from bizdesk.utils.date_parser import parse_date
from bizdesk.utils.resolvers import resolve_teacher


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.group()
def substitution_group():
    """Plan and record substitutions for absent teachers."""
    pass


@substitution_group.command("plan")
@click.argument("on_date", metavar="DATE")
@click.option("--absent", "absent", multiple=True, required=True,
              help="Absent teacher name or ID (repeatable)")
@click.pass_context
def plan(ctx, on_date: str, absent: tuple[str, ...]):
    """Show the periods absent teachers miss and who is free to cover them.

    Examples:
        bizdesk substitution plan today --absent "Priya Rathore"
        bizdesk substitution plan 2024-07-15 --absent 3 --absent POOJA
    """
    service = load_service(ctx)
    day = _parse_date_or_exit(ctx, on_date)
    try:
        day_name = weekday_name(day)
        absent_teachers = [resolve_teacher(service.state.teachers, ref) for ref in absent]
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    service.sync_teacher_schedules(persist=False)
    absent_names = [t.name for t in absent_teachers]
    click.echo(f"\nSubstitution plan for {day_name}, {day.isoformat()}")
    for teacher in absent_teachers:
        current = service.find_teacher(teacher.name)
        busy = service.teacher_busy_periods(current, day_name)
        click.echo(f"\n{teacher.name}:")
        if not busy:
            click.echo("  No classes.")
            continue
        for period, class_info in busy:
            free = service.available_substitutes(day_name, period, absent_names)
            names = ", ".join(t.name for t in free) or "nobody free"
            click.echo(f"  Period {period} ({class_info}): {names}")


@substitution_group.command("save")
@click.argument("on_date", metavar="DATE")
@click.option("--entry", "entries", nargs=3, multiple=True, required=True,
              metavar="ABSENT PERIOD SUBSTITUTE",
              help="One substitution (repeatable)")
@click.option("--remarks", default="", help="Remarks stored on every entry")
@click.pass_context
def save(ctx, on_date: str, entries, remarks: str):
    """Record the substitutions for a date.

    Any substitutions already saved for that date are replaced.

    Examples:
        bizdesk substitution save today --entry "Pooja" 2 "Neha Tiwari"
    """
    service = load_service(ctx)
    day = _parse_date_or_exit(ctx, on_date)
    service.sync_teacher_schedules(persist=False)
    try:
        assignments = []
        for absent, period, substitute in entries:
            assignments.append(
                {
                    "absent_teacher": resolve_teacher(service.state.teachers, absent).name,
                    "period": period,
                    "substitute_teacher": resolve_teacher(service.state.teachers, substitute).name,
                    "remarks": remarks,
                }
            )
        records = service.build_substitution_records(day, assignments)
        stored = service.save_substitutions(records)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Saved {len(stored)} substitutions for {day.isoformat()}")


@substitution_group.command("list")
@click.option("--date", "on_date", help="Only show one date")
@click.pass_context
def list_substitutions(ctx, on_date: str | None):
    """List recorded substitutions, newest first."""
    service = load_service(ctx)
    if on_date:
        records = service.substitutions_on(_parse_date_or_exit(ctx, on_date))
    else:
        records = list(service.state.substitutions)
    if not records:
        click.echo("No substitutions found.")
        return

    click.echo(f"\n{'Date':10s} | {'Period':6s} | {'Absent':20s} | {'Class':10s} | {'Subject':10s} | Substitute")
    click.echo("-" * 90)
    for r in records:
        line = (
            f"{r.date.isoformat():10s} | {r.period:6s} | {r.absent_teacher:20s} | "
            f"{r.original_class:10s} | {r.original_subject:10s} | {r.substitute_teacher}"
        )
        if r.remarks:
            line += f" ({r.remarks})"
        click.echo(line)


@substitution_group.command("report")
@click.option("--month", help="Month to report on, YYYY-MM (default: this month)")
@click.option("--date", "on_date", help="Report on a single day instead")
@click.option("--all", "all_time", is_flag=True, help="Report on every recorded substitution")
@click.option("--stats-csv", type=click.Path(dir_okay=False), help="Write substitute statistics to this CSV file")
@click.option("--daily-csv", type=click.Path(file_okay=False), help="Write one CSV per day into this directory")
@click.pass_context
def report(ctx, month, on_date, all_time, stats_csv, daily_csv):
    """Summarise who covered how many periods.

    Examples:
        bizdesk substitution report
        bizdesk substitution report --month 2024-07 --stats-csv stats.csv
        bizdesk substitution report --date today --daily-csv exports/
    """
    day = _parse_date_or_exit(ctx, on_date) if on_date else None
    if not all_time and day is None and not month:
        month = date.today().strftime("%Y-%m")
    try:
        result = ReportService(ctx.obj["db"], user_id(ctx)).substitution_report(
            month=None if all_time else month, on_date=day
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    scope = day.isoformat() if day else ("all time" if all_time else month)
    click.echo(f"\nSubstitution report: {scope}")
    click.echo(
        f"Total records: {len(result.records)} | Active teachers: {len(result.teacher_stats)}"
    )
    if not result.records:
        click.echo("No substitutions found.")
        return

    click.echo(f"\n{'S.No':>4} | {'Teacher':24s} | {'Periods':>7} | {'Hours':>6} | Days")
    click.echo("-" * 60)
    for number, stat in enumerate(result.teacher_stats, start=1):
        click.echo(
            f"{number:4d} | {stat.teacher:24s} | {stat.periods:7d} | {stat.hours:>6} | {stat.days}"
        )

    for on, records in result.by_date:
        click.echo(f"\n{on.isoformat()} ({len(records)} substitutions)")
        for r in records:
            click.echo(
                f"  Period {r.period} ({r.original_class}, {r.original_subject}): "
                f"{r.absent_teacher} -> {r.substitute_teacher}"
            )

    if stats_csv:
        path = write_csv(stats_csv, teacher_stats_to_csv(result.teacher_stats))
        click.echo(f"\nWrote {path}")
    if daily_csv:
        directory = Path(daily_csv)
        directory.mkdir(parents=True, exist_ok=True)
        for on, records in result.by_date:
            path = write_csv(
                directory / f"substitutions-{on.isoformat()}.csv",
                daily_substitutions_to_csv(records),
            )
            click.echo(f"Wrote {path}")


def register_commands(cli):
    """Register substitution commands with main CLI."""
    cli.add_command(substitution_group, name="substitution")
