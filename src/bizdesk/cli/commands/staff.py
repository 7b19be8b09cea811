"""Staff, attendance and salary commands."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import click

from bizdesk.cli.error_handling import handle_domain_error, user_id
from bizdesk.domain.entities import ATTENDANCE_STATUSES
from bizdesk.domain.errors import DomainError
from bizdesk.domain.salary import attendance_percentage, calculate_monthly_salary, format_currency
from bizdesk.domain.staff import StaffService
from bizdesk.utils.amount_parser import parse_amount
from bizdesk.utils.date_parser import parse_date
from bizdesk.utils.resolvers import resolve_staff


def load_staff_service(ctx) -> StaffService:
    """Staff service with staff and attendance loaded."""
    service = StaffService(ctx.obj["db"], user_id(ctx))
    try:
        service.load_staff()
        service.load_attendance()
    except DomainError as e:
        handle_domain_error(ctx, e)
    return service


@click.group()
def staff_group():
    """Manage staff members and salaries."""
    pass


@staff_group.command("add")
@click.argument("name")
@click.option("--mobile", "mobile_number", required=True, help="Mobile number")
@click.option("--post", required=True, help="Post, e.g. 'Driver'")
@click.option("--workplace", required=True, help="Where the staff member works")
@click.option("--wage", "daily_wage", required=True, help="Daily wage, e.g. '₹500'")
@click.option("--address", help="Address")
@click.option("--photo-url", help="Photo URL")
@click.pass_context
def add_staff(ctx, name, mobile_number, post, workplace, daily_wage, address, photo_url):
    """Add a staff member.

    Examples:
        bizdesk staff add "Ramesh Kumar" --mobile 9876543210 --post Peon --workplace "Main Office" --wage 450
    """
    service = load_staff_service(ctx)
    try:
        member = service.add_staff(
            name=name,
            mobile_number=mobile_number,
            post=post,
            workplace=workplace,
            daily_wage=parse_amount(daily_wage),
            address=address,
            photo_url=photo_url,
        )
        click.echo(f"Added staff member '{member.name}' (ID: {member.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@staff_group.command("list")
@click.pass_context
def list_staff(ctx):
    """List all staff members."""
    service = load_staff_service(ctx)
    if not service.state.staff:
        click.echo("No staff found.")
        return
    click.echo("\nStaff:")
    click.echo("-" * 90)
    for s in service.state.staff:
        click.echo(
            f"ID: {s.id:3d} | {s.name:20s} | {s.post:14s} | {s.workplace:16s} | "
            f"{s.mobile_number:12s} | {format_currency(s.daily_wage)}/day"
        )


@staff_group.command("update")
@click.argument("member", metavar="STAFF")
@click.option("--name", help="New name")
@click.option("--mobile", "mobile_number", help="New mobile number")
@click.option("--post", help="New post")
@click.option("--workplace", help="New workplace")
@click.option("--wage", "daily_wage", help="New daily wage")
@click.option("--address", help="New address")
@click.pass_context
def update_staff(ctx, member, name, mobile_number, post, workplace, daily_wage, address):
    """Update a staff member. STAFF can be a name or ID."""
    service = load_staff_service(ctx)
    try:
        current = resolve_staff(service.state.staff, member)
        changes = {
            key: value
            for key, value in (
                ("name", name),
                ("mobile_number", mobile_number),
                ("post", post),
                ("workplace", workplace),
                ("address", address),
            )
            if value is not None
        }
        if daily_wage is not None:
            changes["daily_wage"] = parse_amount(daily_wage)
        updated = service.update_staff(replace(current, **changes))
        click.echo(f"Updated staff member '{updated.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@staff_group.command("delete")
@click.argument("member", metavar="STAFF")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_staff(ctx, member: str, yes: bool):
    """Delete a staff member and their attendance."""
    service = load_staff_service(ctx)
    try:
        current = resolve_staff(service.state.staff, member)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    if not yes and not click.confirm(f"Delete '{current.name}' and all their attendance?"):
        click.echo("Deletion cancelled.")
        return
    try:
        service.delete_staff(current.id)
        click.echo(f"Deleted staff member '{current.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@staff_group.command("salary")
@click.option("--month", default=lambda: date.today().strftime("%Y-%m"),
              help="Month as YYYY-MM (default: current month)")
@click.option("--staff", "member", help="Only one staff member (name or ID)")
@click.pass_context
def salary(ctx, month: str, member: str | None):
    """Monthly salary report.

    Days without an attendance record count as absent; half days pay half
    the daily wage.
    """
    service = load_staff_service(ctx)
    try:
        members = [resolve_staff(service.state.staff, member)] if member else service.state.staff
        rows = [
            (s, calculate_monthly_salary(s, service.state.attendance, month)) for s in members
        ]
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not rows:
        click.echo("No staff found.")
        return
    click.echo(f"\nSalary report for {month}")
    click.echo("-" * 80)
    total = sum((calc.total_salary for _, calc in rows), Decimal(0))
    for s, calc in rows:
        pct = attendance_percentage(calc.present_days, calc.half_days, calc.total_days)
        click.echo(
            f"{s.name:20s} | P {calc.present_days:2d} | H {calc.half_days:2d} | "
            f"A {calc.absent_days:2d} | {pct:5.1f}% | {format_currency(calc.total_salary):>14s}"
        )
    click.echo("-" * 80)
    click.echo(f"{'Total':>62s} {format_currency(total):>14s}")


@click.group()
def attendance_group():
    """Mark and review staff attendance."""
    pass


@attendance_group.command("mark")
@click.argument("member", metavar="STAFF")
@click.argument("status", type=click.Choice(ATTENDANCE_STATUSES))
@click.option("--date", "on_date", default="today", help="Date (default: today)")
@click.pass_context
def mark(ctx, member: str, status: str, on_date: str):
    """Mark a staff member present, absent or half-day.

    Marking the same day again replaces the earlier mark.

    Examples:
        bizdesk attendance mark "Ramesh Kumar" present
        bizdesk attendance mark 2 half-day --date yesterday
    """
    service = load_staff_service(ctx)
    try:
        current = resolve_staff(service.state.staff, member)
        record = service.mark_attendance(current.id, parse_date(on_date), status)
        click.echo(f"Marked {current.name} {record.status} on {record.date.isoformat()}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@attendance_group.command("list")
@click.option("--staff", "member", help="Only one staff member (name or ID)")
@click.option("--month", help="Only one month, as YYYY-MM")
@click.pass_context
def list_attendance(ctx, member: str | None, month: str | None):
    """List attendance records, newest first."""
    service = load_staff_service(ctx)
    names = {s.id: s.name for s in service.state.staff}
    records = list(service.state.attendance)
    try:
        if member:
            records = service.attendance_for(resolve_staff(service.state.staff, member).id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    if month:
        records = [r for r in records if r.date.strftime("%Y-%m") == month]
    if not records:
        click.echo("No attendance found.")
        return
    for r in records:
        click.echo(f"{r.date.isoformat()} | {names.get(r.staff_id, r.staff_id)!s:20s} | {r.status}")


def register_commands(cli):
    """Register staff and attendance commands with main CLI."""
    cli.add_command(staff_group, name="staff")
    cli.add_command(attendance_group, name="attendance")
