"""School settings commands (periods and time slots)."""

import click

from bizdesk.cli.commands.teacher import load_service
from bizdesk.cli.error_handling import handle_domain_error
from bizdesk.domain.errors import DomainError


@click.group()
def settings_group():
    """Manage school periods and time slots."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show periods and their time slots."""
    service = load_service(ctx)
    slots = service.state.time_slots
    click.echo("\nPeriods:")
    for index, period in enumerate(service.state.periods):
        slot = slots[index] if index < len(slots) else ""
        click.echo(f"  {period:>4}  {slot}")


@settings_group.command("set")
@click.option("--period", "periods", multiple=True, required=True, help="Period label (repeatable)")
@click.option("--slot", "slots", multiple=True, help="Time slot, in period order (repeatable)")
@click.pass_context
def set_settings(ctx, periods: tuple[str, ...], slots: tuple[str, ...]):
    """Replace all periods and time slots.

    Examples:
        bizdesk settings set --period 1 --slot 8:00-8:45 --period 2 --slot 8:45-9:30
    """
    service = load_service(ctx)
    try:
        settings = service.save_settings(list(periods), list(slots))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Saved {len(settings.periods)} periods")


@settings_group.command("add-period")
@click.argument("label")
@click.option("--time", "time_slot", default="", help="Time slot for the new period")
@click.pass_context
def add_period(ctx, label: str, time_slot: str):
    """Append a period."""
    service = load_service(ctx)
    try:
        service.add_period(label, time_slot)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Added period '{label.strip()}'")


@settings_group.command("set-slot")
@click.argument("period")
@click.argument("time_slot")
@click.pass_context
def set_slot(ctx, period: str, time_slot: str):
    """Change the time slot of a period.

    Examples:
        bizdesk settings set-slot 3 9:25-10:05
    """
    service = load_service(ctx)
    if period not in service.state.periods:
        click.echo(f"Error: Unknown period '{period}'", err=True)
        ctx.exit(1)
    try:
        service.update_time_slot(service.state.periods.index(period), time_slot)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Period {period} now runs {time_slot.strip()}")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
