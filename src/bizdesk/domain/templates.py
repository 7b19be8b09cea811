"""Invoice template selection and plain-text rendering."""

from dataclasses import dataclass
from typing import Optional

from bizdesk.domain.entities import CompanySettings, Customer, Invoice
from bizdesk.domain.errors import ValidationError
from bizdesk.domain.pricing import format_money

DEFAULT_TEMPLATE = "classic"


@dataclass(frozen=True)
class TemplateStyle:
    """Labels and rule character used when rendering one template."""

    name: str
    title: str
    bill_to: str
    rule: str
    number_label: str = "Invoice #"


TEMPLATES: dict[str, TemplateStyle] = {
    "classic": TemplateStyle("Classic", "INVOICE", "Bill To:", "="),
    "modern": TemplateStyle("Modern", "INVOICE", "Bill To:", "-"),
    "minimalist": TemplateStyle("Minimalist", "Invoice", "To", " "),
    "corporate": TemplateStyle("Corporate", "INVOICE", "BILLED TO", "#"),
    "professional": TemplateStyle("Professional", "INVOICE", "Bill To:", "_"),
    "blue": TemplateStyle("Blue", "INVOICE", "Bill To", "~"),
    "green": TemplateStyle("Green", "INVOICE", "Invoice To", "*"),
    "consultation": TemplateStyle(
        "Consultation", "INVOICE", "Client", "=", number_label="INVOICE NUMBER"
    ),
}


class TemplateSelection:
    """Currently selected invoice template, ``classic`` unless changed."""

    def __init__(self, template_id: Optional[str] = DEFAULT_TEMPLATE):
        self._template_id = DEFAULT_TEMPLATE
        self.select(template_id or DEFAULT_TEMPLATE)

    @property
    def template_id(self) -> str:
        return self._template_id

    @property
    def style(self) -> TemplateStyle:
        return TEMPLATES[self._template_id]

    def select(self, template_id: str) -> None:
        """Select a template by id.

        Raises:
            ValidationError: If the template is unknown
        """
        key = template_id.strip().lower()
        if key not in TEMPLATES:
            raise ValidationError(
                f"Unknown template '{template_id}'. Available: {', '.join(TEMPLATES)}"
            )
        self._template_id = key


def render_invoice(
    invoice: Invoice,
    customer: Optional[Customer],
    template: TemplateSelection | str,
    company: Optional[CompanySettings] = None,
) -> str:
    """Render an invoice as plain text in the given template.

    Company details, when given, head the invoice above the invoice number.
    """
    if isinstance(template, str):
        template = TemplateSelection(template)
    style = template.style
    width = 64
    rule = style.rule * width if style.rule.strip() else ""

    lines = [style.title.center(width).rstrip()]
    if company is not None and company.company_name:
        lines.append(company.company_name)
        if company.company_address:
            lines.extend(company.company_address.splitlines())
    if rule:
        lines.append(rule)
    lines.append(f"{style.number_label}: {invoice.invoice_number}")
    lines.append(f"Date: {invoice.invoice_date.isoformat()}")
    if invoice.due_date is not None:
        lines.append(f"Due: {invoice.due_date.isoformat()}")
    lines.append(f"Status: {invoice.status}")
    lines.append("")

    lines.append(style.bill_to)
    if customer is not None:
        lines.append(f"  {customer.name}")
        for value in (customer.billing_address, customer.email, customer.contact_number):
            if value:
                lines.append(f"  {value}")
    else:
        lines.append(f"  Customer {invoice.customer_id}")
    lines.append("")

    lines.append(f"{'Description':<24} {'Qty':>8} {'Rate':>10} {'Tax %':>6} {'Amount':>12}")
    if rule:
        lines.append(rule)
    for item in invoice.items:
        quantity = f"{item.quantity:g}"
        if item.unit_type:
            quantity = f"{quantity} {item.unit_type}"
        lines.append(
            f"{item.item_description[:24]:<24} {quantity:>8} {format_money(item.rate):>10} "
            f"{item.tax_percentage:>6g} {format_money(item.line_total):>12}"
        )
    if rule:
        lines.append(rule)

    lines.append(f"{'Subtotal:':>50} {format_money(invoice.subtotal):>13}")
    lines.append(f"{'Tax:':>50} {format_money(invoice.total_tax_amount):>13}")
    lines.append(f"{'Total:':>50} {format_money(invoice.grand_total):>13}")

    if invoice.notes:
        lines.extend(["", "Notes:", invoice.notes])
    if invoice.terms_and_conditions:
        lines.extend(["", "Terms & Conditions:", invoice.terms_and_conditions])
    return "\n".join(lines)
