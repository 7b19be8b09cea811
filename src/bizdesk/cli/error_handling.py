"""CLI error handling helpers."""

import logging

import click

from bizdesk.domain.errors import DomainError, FormValidationError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    logger.debug("Command failed: %s", error, exc_info=error)
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, FormValidationError):
        for field, message in error.field_errors.items():
            click.echo(f"  {field}: {message}", err=True)
    ctx.exit(1)


def user_id(ctx: click.Context) -> str:
    """User the command runs as."""
    return ctx.obj["user"]
