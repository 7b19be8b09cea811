"""Customer and product commands."""

from decimal import Decimal

import click

from bizdesk.cli.error_handling import handle_domain_error, user_id
from bizdesk.domain.catalog import CustomerService, ProductService
from bizdesk.domain.errors import DomainError
from bizdesk.domain.pricing import format_money
from bizdesk.utils.amount_parser import parse_amount


def _amount(value: str | None) -> Decimal | None:
    return parse_amount(value) if value is not None else None


@click.group()
def customer_group():
    """Manage invoice customers."""
    pass


@customer_group.command("add")
@click.argument("name")
@click.option("--email", help="Email address")
@click.option("--contact", "contact_number", help="Contact number")
@click.option("--billing-address", help="Billing address")
@click.option("--shipping-address", help="Shipping address")
@click.pass_context
def add_customer(ctx, name, email, contact_number, billing_address, shipping_address):
    """Add a customer.

    Examples:
        bizdesk customer add "Sharma Traders" --email accounts@sharma.example
    """
    service = CustomerService(ctx.obj["db"], user_id(ctx))
    try:
        customer = service.create_customer(
            name, email, contact_number, billing_address, shipping_address
        )
        click.echo(f"Added customer '{customer.name}' (ID: {customer.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@customer_group.command("list")
@click.pass_context
def list_customers(ctx):
    """List all customers."""
    customers = CustomerService(ctx.obj["db"], user_id(ctx)).list_customers()
    if not customers:
        click.echo("No customers found.")
        return
    click.echo("\nCustomers:")
    click.echo("-" * 70)
    for c in customers:
        click.echo(f"ID: {c.id:3d} | {c.name:24s} | {c.email or '':24s} | {c.contact_number or ''}")


@customer_group.command("update")
@click.argument("customer_id", type=int)
@click.option("--name", help="New name")
@click.option("--email", help="New email")
@click.option("--contact", "contact_number", help="New contact number")
@click.option("--billing-address", help="New billing address")
@click.option("--shipping-address", help="New shipping address")
@click.pass_context
def update_customer(ctx, customer_id, name, email, contact_number, billing_address, shipping_address):
    """Update a customer."""
    service = CustomerService(ctx.obj["db"], user_id(ctx))
    try:
        customer = service.update_customer(
            customer_id,
            name=name,
            email=email,
            contact_number=contact_number,
            billing_address=billing_address,
            shipping_address=shipping_address,
        )
        click.echo(f"Updated customer '{customer.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@customer_group.command("delete")
@click.argument("customer_id", type=int)
@click.pass_context
def delete_customer(ctx, customer_id: int):
    """Delete a customer."""
    service = CustomerService(ctx.obj["db"], user_id(ctx))
    try:
        service.delete_customer(customer_id)
        click.echo(f"Deleted customer {customer_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.group()
def product_group():
    """Manage products."""
    pass


@product_group.command("add")
@click.argument("name")
@click.option("--unit", "unit_type", help="Unit type, e.g. 'kg' or 'pcs'")
@click.option("--rate", default="0", help="Default rate")
@click.option("--tax", default="0", help="Tax percentage (0-100)")
@click.pass_context
def add_product(ctx, name: str, unit_type: str | None, rate: str, tax: str):
    """Add a product.

    Examples:
        bizdesk product add "Basmati Rice" --unit kg --rate 95 --tax 5
    """
    service = ProductService(ctx.obj["db"], user_id(ctx))
    try:
        product = service.create_product(name, unit_type, parse_amount(rate), parse_amount(tax))
        click.echo(f"Added product '{product.name}' (ID: {product.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@product_group.command("list")
@click.pass_context
def list_products(ctx):
    """List all products."""
    products = ProductService(ctx.obj["db"], user_id(ctx)).list_products()
    if not products:
        click.echo("No products found.")
        return
    click.echo("\nProducts:")
    click.echo("-" * 70)
    for p in products:
        click.echo(
            f"ID: {p.id:3d} | {p.name:24s} | {p.unit_type or '':6s} | "
            f"{format_money(p.default_rate):>10s} | tax {p.tax_percentage:g}%"
        )


@product_group.command("update")
@click.argument("product_id", type=int)
@click.option("--name", help="New name")
@click.option("--unit", "unit_type", help="New unit type")
@click.option("--rate", help="New default rate")
@click.option("--tax", help="New tax percentage")
@click.pass_context
def update_product(ctx, product_id: int, name, unit_type, rate, tax):
    """Update a product."""
    service = ProductService(ctx.obj["db"], user_id(ctx))
    try:
        product = service.update_product(
            product_id,
            name=name,
            unit_type=unit_type,
            default_rate=_amount(rate),
            tax_percentage=_amount(tax),
        )
        click.echo(f"Updated product '{product.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@product_group.command("delete")
@click.argument("product_id", type=int)
@click.pass_context
def delete_product(ctx, product_id: int):
    """Delete a product and stop tracking its stock."""
    service = ProductService(ctx.obj["db"], user_id(ctx))
    try:
        service.delete_product(product_id)
        click.echo(f"Deleted product {product_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register customer and product commands with main CLI."""
    cli.add_command(customer_group, name="customer")
    cli.add_command(product_group, name="product")
