"""Invoice and invoice template commands."""

import click

from bizdesk.cli.error_handling import handle_domain_error, user_id
from bizdesk.domain.catalog import CustomerService, ProductService
from bizdesk.domain.company import CompanySettingsService
from bizdesk.domain.errors import DomainError, NotFoundError, invoice_not_found, product_not_found
from bizdesk.domain.inventory import InventoryService
from bizdesk.domain.invoice import PAYMENT_METHODS, InvoiceService
from bizdesk.domain.pricing import format_money
from bizdesk.domain.reports import ReportService
from bizdesk.domain.templates import DEFAULT_TEMPLATE, TEMPLATES, render_invoice
from bizdesk.utils.amount_parser import parse_amount
from bizdesk.utils.date_parser import parse_date


@click.group()
def invoice_group():
    """Create and view invoices."""
    pass


@invoice_group.command("create")
@click.option("--customer", "customer_id", type=int, required=True, help="Customer ID")
@click.option("--date", "invoice_date", default="today", help="Invoice date (default: today)")
@click.option("--due", "due_date", help="Due date")
@click.option("--product", "products", nargs=2, multiple=True, metavar="PRODUCT_ID QUANTITY",
              help="Line item pre-filled from a product (repeatable)")
@click.option("--item", "items", nargs=4, multiple=True,
              metavar="DESCRIPTION QUANTITY RATE TAX",
              help="Free-form line item (repeatable)")
@click.option("--notes", help="Notes printed on the invoice")
@click.option("--terms", help="Terms and conditions")
@click.pass_context
def create_invoice(ctx, customer_id, invoice_date, due_date, products, items, notes, terms):
    """Create an invoice, record it as paid and take the items out of stock.

    Examples:
        bizdesk invoice create --customer 1 --product 2 10
        bizdesk invoice create --customer 1 --item "Delivery" 1 200 18 --due "next week"
    """
    db = ctx.obj["db"]
    uid = user_id(ctx)
    product_service = ProductService(db, uid)
    try:
        lines = []
        for product_id, quantity in products:
            product = product_service.get_product(int(product_id))
            if product is None:
                raise NotFoundError(product_not_found(int(product_id)))
            lines.append(InvoiceService.item_from_product(product, parse_amount(quantity)))
        for description, quantity, rate, tax in items:
            lines.append(
                {
                    "item_description": description,
                    "quantity": parse_amount(quantity),
                    "rate": parse_amount(rate),
                    "tax_percentage": parse_amount(tax),
                }
            )
        data = {
            "customer_id": customer_id,
            "invoice_date": parse_date(invoice_date),
            "due_date": parse_date(due_date) if due_date else None,
            "items": lines,
            "notes": notes,
            "terms_and_conditions": terms,
        }
        invoice = InvoiceService(db, uid).create_invoice(data)
        low = InventoryService(db, uid).low_stock_items()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"Created {invoice.invoice_number} for {format_money(invoice.grand_total)} (paid)"
    )
    for item in low:
        click.echo(
            f"Warning: {item.product.name} is low on stock "
            f"({item.quantity_on_hand or 0:g} left)"
        )


@invoice_group.command("list")
@click.pass_context
def list_invoices(ctx):
    """List invoices, newest first."""
    invoices = InvoiceService(ctx.obj["db"], user_id(ctx)).list_invoices()
    if not invoices:
        click.echo("No invoices found.")
        return
    customers = {c.id: c.name for c in CustomerService(ctx.obj["db"], user_id(ctx)).list_customers()}
    click.echo(f"\n{'ID':>4} | {'Number':10s} | {'Date':10s} | {'Customer':24s} | {'Total':>12} | Status")
    click.echo("-" * 84)
    for inv in invoices:
        customer = customers.get(inv.customer_id, str(inv.customer_id))
        click.echo(
            f"{inv.id:4d} | {inv.invoice_number:10s} | {inv.invoice_date.isoformat()} | "
            f"{customer:24s} | {format_money(inv.grand_total):>12s} | {inv.status}"
        )


@invoice_group.command("show")
@click.argument("invoice_id", type=int)
@click.option("--template", default=DEFAULT_TEMPLATE, show_default=True,
              help="Template to render with")
@click.pass_context
def show_invoice(ctx, invoice_id: int, template: str):
    """Print an invoice."""
    db = ctx.obj["db"]
    try:
        invoice = InvoiceService(db, user_id(ctx)).get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        customer = CustomerService(db, user_id(ctx)).get_customer(invoice.customer_id)
        company = CompanySettingsService(db, user_id(ctx)).load()
        click.echo(render_invoice(invoice, customer, template, company))
    except DomainError as e:
        handle_domain_error(ctx, e)


@invoice_group.command("payments")
@click.option("--invoice", "invoice_id", type=int, help="Only payments for one invoice")
@click.pass_context
def list_payments(ctx, invoice_id: int | None):
    """List recorded payments."""
    payments = InvoiceService(ctx.obj["db"], user_id(ctx)).list_payments(invoice_id)
    if not payments:
        click.echo("No payments found.")
        return
    for p in payments:
        click.echo(
            f"{p.payment_date.isoformat()} | invoice {p.invoice_id:4d} | "
            f"{format_money(p.amount_paid):>12s} | {p.notes or ''}"
        )


@invoice_group.command("pay")
@click.argument("invoice_id", type=int)
@click.option("--amount", required=True, help="Amount paid")
@click.option("--method", required=True, type=click.Choice(PAYMENT_METHODS, case_sensitive=False),
              help="How the invoice was paid")
@click.option("--date", "payment_date", default="today", help="Payment date (default: today)")
@click.option("--notes", help="Notes stored with the payment")
@click.pass_context
def record_payment(ctx, invoice_id: int, amount: str, method: str, payment_date: str, notes):
    """Record a payment against an invoice.

    Examples:
        bizdesk invoice pay 3 --amount 500 --method UPI
        bizdesk invoice pay 3 --amount "₹1,200" --method cash --date yesterday
    """
    service = InvoiceService(ctx.obj["db"], user_id(ctx))
    try:
        payment = service.record_payment(
            {
                "invoice_id": invoice_id,
                "amount_paid": parse_amount(amount),
                "payment_method": method,
                "payment_date": parse_date(payment_date),
                "notes": notes,
            }
        )
        paid = service.amount_paid(invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(
        f"Recorded {format_money(payment.amount_paid)} by {payment.payment_method} "
        f"on invoice {invoice_id} (total paid {format_money(paid)})"
    )


@invoice_group.command("report")
@click.option("--days", default=30, show_default=True, type=click.IntRange(min=1),
              help="Days of daily sales to show")
@click.pass_context
def sales_report(ctx, days: int):
    """Show total sales, tax, invoice count and daily sales."""
    try:
        result = ReportService(ctx.obj["db"], user_id(ctx)).sales_report(days=days)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nTotal sales:      {format_money(result.total_sales):>14s}")
    click.echo(f"Total tax:        {format_money(result.total_tax):>14s}")
    click.echo(f"Invoices:         {result.invoice_count:>14d}")
    click.echo(f"Unique customers: {result.unique_customers:>14d}")
    click.echo(f"\nSales over the last {days} days:")
    for day, amount in result.daily_sales:
        if amount:
            click.echo(f"  {day.strftime('%b %d')}  {format_money(amount):>14s}")


@click.group()
def company_group():
    """Company details shown on invoices."""
    pass


@company_group.command("show")
@click.pass_context
def show_company(ctx):
    """Show the stored company details."""
    settings = CompanySettingsService(ctx.obj["db"], user_id(ctx)).load()
    if not settings.company_name:
        click.echo("No company details set.")
        return
    click.echo(settings.company_name)
    if settings.company_address:
        click.echo(settings.company_address)


@company_group.command("set")
@click.option("--name", required=True, help="Company name")
@click.option("--address", help="Company address")
@click.pass_context
def set_company(ctx, name: str, address):
    """Store the company name and address."""
    try:
        settings = CompanySettingsService(ctx.obj["db"], user_id(ctx)).save(
            {"company_name": name, "company_address": address}
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Saved company details for {settings.company_name}")


@click.group()
def template_group():
    """Invoice templates."""
    pass


@template_group.command("list")
def list_templates():
    """List available invoice templates."""
    for key, style in TEMPLATES.items():
        marker = " (default)" if key == DEFAULT_TEMPLATE else ""
        click.echo(f"{key:14s} {style.name}{marker}")


def register_commands(cli):
    """Register invoice, template and company commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
    cli.add_command(template_group, name="template")
    cli.add_command(company_group, name="company")
