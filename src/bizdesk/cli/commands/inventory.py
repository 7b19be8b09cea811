"""Inventory commands."""

import time

import click

from bizdesk.cli.error_handling import handle_domain_error, user_id
from bizdesk.domain.errors import DomainError
from bizdesk.domain.inventory import InventoryService, is_low_stock
from bizdesk.domain.inventory_monitor import InventoryMonitor
from bizdesk.utils.amount_parser import parse_amount


def _print_items(items) -> None:
    click.echo(f"\n{'ID':>4} | {'Product':24s} | {'On hand':>10} | {'Alert at':>8} | Last stocked")
    click.echo("-" * 80)
    for item in items:
        stocked = item.last_stocked_at.strftime("%Y-%m-%d %H:%M") if item.last_stocked_at else "-"
        flag = "  LOW" if is_low_stock(item) else ""
        click.echo(
            f"{item.id:4d} | {item.product.name:24s} | {item.quantity_on_hand or 0:>10g} | "
            f"{item.low_stock_threshold or 0:>8g} | {stocked}{flag}"
        )


@click.group()
def inventory_group():
    """Track stock levels."""
    pass


@inventory_group.command("list")
@click.pass_context
def list_inventory(ctx):
    """List stocked products, newest first."""
    items = InventoryService(ctx.obj["db"], user_id(ctx)).list_inventory()
    if not items:
        click.echo("No inventory found.")
        return
    _print_items(items)


@inventory_group.command("add")
@click.argument("product_id", type=int)
@click.option("--quantity", default="0", help="Quantity on hand")
@click.option("--threshold", default="5", help="Low stock alert threshold")
@click.pass_context
def add_inventory(ctx, product_id: int, quantity: str, threshold: str):
    """Start tracking stock for a product."""
    service = InventoryService(ctx.obj["db"], user_id(ctx))
    try:
        item = service.add_product_to_inventory(
            product_id, parse_amount(quantity), parse_amount(threshold)
        )
        click.echo(f"Tracking '{item.product.name}' (inventory ID: {item.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@inventory_group.command("add-all")
@click.option("--set", "levels", nargs=3, multiple=True, metavar="PRODUCT_ID QUANTITY THRESHOLD",
              help="Starting levels for one product (repeatable)")
@click.pass_context
def add_all(ctx, levels):
    """Track every product that is not stocked yet.

    Products without --set start at quantity 0 with an alert at 5.
    """
    service = InventoryService(ctx.obj["db"], user_id(ctx))
    try:
        products = service.products_without_inventory()
        if not products:
            click.echo("Every product is already in inventory.")
            return
        quantities = {
            int(product_id): (parse_amount(quantity), parse_amount(threshold))
            for product_id, quantity, threshold in levels
        }
        items = service.add_all_products(products, quantities)
        click.echo(f"Added {len(items)} products to inventory")
    except DomainError as e:
        handle_domain_error(ctx, e)


@inventory_group.command("update")
@click.argument("inventory_id", type=int)
@click.option("--quantity", required=True, help="Quantity on hand")
@click.option("--threshold", required=True, help="Low stock alert threshold")
@click.pass_context
def update_inventory(ctx, inventory_id: int, quantity: str, threshold: str):
    """Set stock levels for an inventory row."""
    service = InventoryService(ctx.obj["db"], user_id(ctx))
    try:
        item = service.update_inventory(
            inventory_id, parse_amount(quantity), parse_amount(threshold)
        )
        click.echo(f"Updated '{item.product.name}': {item.quantity_on_hand:g} on hand")
    except DomainError as e:
        handle_domain_error(ctx, e)


@inventory_group.command("remove")
@click.argument("inventory_id", type=int)
@click.pass_context
def remove_inventory(ctx, inventory_id: int):
    """Stop tracking stock for an inventory row."""
    service = InventoryService(ctx.obj["db"], user_id(ctx))
    try:
        service.remove_from_inventory(inventory_id)
        click.echo(f"Removed inventory item {inventory_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@inventory_group.command("low-stock")
@click.pass_context
def low_stock(ctx):
    """List products at or below their alert threshold."""
    items = InventoryService(ctx.obj["db"], user_id(ctx)).low_stock_items()
    if not items:
        click.echo("No products are low on stock.")
        return
    _print_items(items)


@inventory_group.command("watch")
@click.option("--duration", default=30.0, show_default=True, help="Seconds to watch")
@click.option("--interval", default=3.0, show_default=True, help="Seconds between polls")
@click.pass_context
def watch(ctx, duration: float, interval: float):
    """Poll inventory and report low-stock changes until the duration ends."""
    service = InventoryService(ctx.obj["db"], user_id(ctx))
    seen: set[int] = set()
    with InventoryMonitor(service.list_inventory, interval=interval) as monitor:
        monitor.start()
        deadline = time.monotonic() + duration
        while time.monotonic() < deadline:
            low = {item.id: item for item in monitor.low_stock}
            for item_id in sorted(set(low) - seen):
                item = low[item_id]
                click.echo(
                    f"LOW: {item.product.name} ({item.quantity_on_hand or 0:g} on hand, "
                    f"alert at {item.low_stock_threshold or 0:g})"
                )
            seen = set(low)
            time.sleep(min(interval, max(deadline - time.monotonic(), 0)))


def register_commands(cli):
    """Register inventory commands with main CLI."""
    cli.add_command(inventory_group, name="inventory")
