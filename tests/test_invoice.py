"""Tests for invoice pricing, validation, creation and rendering."""

from datetime import date
from decimal import Decimal

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from bizdesk.database.sqlalchemy_db import AUTO_PAYMENT_NOTE
from bizdesk.domain.errors import AuthenticationError, FormValidationError, NotFoundError, ValidationError
from bizdesk.domain.inventory_monitor import InventoryMonitor
from bizdesk.domain.company import CompanySettingsService
from bizdesk.domain.entities import CompanySettings
from bizdesk.domain.invoice import InvoiceInput, InvoiceService, validate_invoice, validate_payment
from bizdesk.domain.pricing import calculate_totals, format_money, line_total
from bizdesk.domain.templates import DEFAULT_TEMPLATE, TEMPLATES, TemplateSelection, render_invoice


def invoice_data(customer_id, **overrides):
    data = {
        "customer_id": customer_id,
        "invoice_date": date(2024, 7, 15),
        "items": [
            {
                "item_description": "Consulting",
                "quantity": Decimal(2),
                "rate": Decimal(100),
                "tax_percentage": Decimal(10),
            }
        ],
        "notes": "Thank you",
    }
    data.update(overrides)
    return data


class TestPricing:
    """Tests for line and invoice totals."""

    def test_calculate_totals(self):
        totals = calculate_totals([{"quantity": 2, "rate": 100, "tax_percentage": 10}])
        assert totals.subtotal == Decimal(200)
        assert totals.tax == Decimal(20)
        assert totals.grand_total == Decimal(220)

    def test_missing_values_count_as_zero(self):
        totals = calculate_totals([{"quantity": 3, "rate": "", "tax_percentage": None}, {}])
        assert totals.grand_total == Decimal(0)

    def test_multiple_lines(self):
        items = [
            {"quantity": Decimal("1.5"), "rate": Decimal(40), "tax_percentage": Decimal(5)},
            {"quantity": Decimal(1), "rate": Decimal(100), "tax_percentage": Decimal(0)},
        ]
        totals = calculate_totals(items)
        assert totals.subtotal == Decimal(160)
        assert totals.tax == Decimal(3)
        assert line_total(items[0]) == Decimal(63)

    def test_empty_invoice(self):
        assert calculate_totals([]).grand_total == Decimal(0)

    def test_format_money(self):
        assert format_money(Decimal("1234.5")) == "1,234.50"


class TestValidation:
    """Tests for invoice form validation."""

    def test_valid_form(self):
        validated = validate_invoice(invoice_data(1))
        assert isinstance(validated, InvoiceInput)
        assert validated.items[0].tax_percentage == Decimal(10)

    def test_blank_tax_is_zero(self):
        data = invoice_data(1)
        data["items"][0]["tax_percentage"] = ""
        assert validate_invoice(data).items[0].tax_percentage == Decimal(0)

    def test_errors_are_keyed_by_field(self):
        data = invoice_data(1)
        data["items"][0]["quantity"] = Decimal(0)
        data["items"][0]["tax_percentage"] = Decimal(150)
        with pytest.raises(FormValidationError) as exc_info:
            validate_invoice(data)
        assert set(exc_info.value.field_errors) == {"items.0.quantity", "items.0.tax_percentage"}

    def test_blank_description(self):
        data = invoice_data(1)
        data["items"][0]["item_description"] = "   "
        with pytest.raises(FormValidationError) as exc_info:
            validate_invoice(data)
        assert "items.0.item_description" in exc_info.value.field_errors

    def test_items_required(self):
        with pytest.raises(FormValidationError) as exc_info:
            validate_invoice(invoice_data(1, items=[]))
        assert "items" in exc_info.value.field_errors

    def test_form_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            validate_invoice({})


class TestInvoiceService:
    """Tests for InvoiceService."""

    def test_create_invoice(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        assert invoice.invoice_number == "INV-00001"
        assert invoice.status == "paid"
        assert invoice.subtotal == Decimal(200)
        assert invoice.total_tax_amount == Decimal(20)
        assert invoice.grand_total == Decimal(220)
        assert len(invoice.items) == 1
        assert invoice.items[0].line_total == Decimal(220)

    def test_invoice_numbers_increase(self, invoice_service, sample_customer):
        invoice_service.create_invoice(invoice_data(sample_customer.id))
        second = invoice_service.create_invoice(invoice_data(sample_customer.id))
        assert second.invoice_number == "INV-00002"
        assert len(invoice_service.list_invoices()) == 2

    def test_payment_recorded(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        (payment,) = invoice_service.list_payments(invoice.id)
        assert payment.amount_paid == Decimal(220)
        assert payment.payment_date == date(2024, 7, 15)
        assert payment.notes == AUTO_PAYMENT_NOTE

    def test_stock_is_decremented(
        self, invoice_service, inventory_service, sample_customer, sample_product
    ):
        inventory_service.add_product_to_inventory(sample_product.id, Decimal(10))
        item = InvoiceService.item_from_product(sample_product, Decimal(4))
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id, items=[item]))
        assert invoice.grand_total == Decimal(440)

        (stock,) = inventory_service.list_inventory()
        assert stock.quantity_on_hand == Decimal(6)

    def test_stock_may_go_negative(
        self, invoice_service, inventory_service, sample_customer, sample_product
    ):
        inventory_service.add_product_to_inventory(sample_product.id, Decimal(1))
        item = InvoiceService.item_from_product(sample_product, Decimal(3))
        invoice_service.create_invoice(invoice_data(sample_customer.id, items=[item]))
        (stock,) = inventory_service.list_inventory()
        assert stock.quantity_on_hand == Decimal(-2)

    def test_invalid_form_stores_nothing(self, invoice_service, sample_customer):
        data = invoice_data(sample_customer.id)
        data["items"][0]["rate"] = Decimal(-1)
        with pytest.raises(FormValidationError):
            invoice_service.create_invoice(data)
        assert invoice_service.list_invoices() == []

    def test_unknown_customer(self, invoice_service):
        with pytest.raises(NotFoundError):
            invoice_service.create_invoice(invoice_data(999))
        assert invoice_service.list_invoices() == []

    def test_unknown_product_rolls_back(self, invoice_service, sample_customer):
        data = invoice_data(sample_customer.id)
        data["items"][0]["product_id"] = 999
        with pytest.raises(NotFoundError):
            invoice_service.create_invoice(data)
        assert invoice_service.list_invoices() == []
        assert invoice_service.list_payments() == []

    def test_no_user(self, temp_db, sample_customer):
        service = InvoiceService(temp_db, None)
        with pytest.raises(AuthenticationError):
            service.create_invoice(invoice_data(sample_customer.id))
        assert service.list_invoices() == []

    def test_monitor_refreshes_after_invoice(
        self, temp_db, user_id, inventory_service, sample_customer, sample_product
    ):
        inventory_service.add_product_to_inventory(sample_product.id, Decimal(6))
        with InventoryMonitor(
            inventory_service.list_inventory, scheduler=BackgroundScheduler()
        ) as monitor:
            service = InvoiceService(temp_db, user_id, monitor=monitor)
            item = InvoiceService.item_from_product(sample_product, Decimal(2))
            service.create_invoice(invoice_data(sample_customer.id, items=[item]))
            assert [i.quantity_on_hand for i in monitor.low_stock] == [Decimal(4)]
            assert len(monitor.pending_jobs()) == 2

    def test_totals(self):
        assert InvoiceService.totals(invoice_data(1)).grand_total == Decimal(220)


class TestTemplates:
    """Tests for template selection and rendering."""

    def test_default_selection(self):
        selection = TemplateSelection()
        assert selection.template_id == DEFAULT_TEMPLATE == "classic"
        assert selection.style is TEMPLATES["classic"]

    def test_select(self):
        selection = TemplateSelection()
        selection.select("Modern")
        assert selection.template_id == "modern"

    def test_unknown_template(self):
        selection = TemplateSelection()
        with pytest.raises(ValidationError):
            selection.select("fancy")
        assert selection.template_id == "classic"

    def test_eight_templates(self):
        assert len(TEMPLATES) == 8

    def test_render_invoice(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        text = render_invoice(invoice, sample_customer, "classic")
        assert "INVOICE" in text
        assert "Invoice #: INV-00001" in text
        assert "Sharma Traders" in text
        assert "Consulting" in text
        assert "220.00" in text
        assert "Thank you" in text

    def test_render_consultation_label(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        text = render_invoice(invoice, None, TemplateSelection("consultation"))
        assert "INVOICE NUMBER: INV-00001" in text
        assert f"Customer {sample_customer.id}" in text

    def test_render_with_company_details(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        company = CompanySettings("Gupta Wholesale", "4 Station Road\nLucknow")
        lines = render_invoice(invoice, sample_customer, "modern", company).splitlines()
        assert lines[1:4] == ["Gupta Wholesale", "4 Station Road", "Lucknow"]
        assert lines.index("Gupta Wholesale") < lines.index("Invoice #: INV-00001")

    def test_render_without_company_name(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        text = render_invoice(invoice, sample_customer, "classic", CompanySettings())
        assert text == render_invoice(invoice, sample_customer, "classic")


class TestPayments:
    """Tests for payments recorded by hand."""

    def test_record_payment(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        payment = invoice_service.record_payment(
            {
                "invoice_id": invoice.id,
                "amount_paid": Decimal("50.50"),
                "payment_date": date(2024, 7, 20),
                "payment_method": "bank transfer",
                "notes": "  ",
            }
        )
        assert payment.payment_method == "Bank Transfer"
        assert payment.notes is None
        assert len(invoice_service.list_payments(invoice.id)) == 2
        assert invoice_service.amount_paid(invoice.id) == Decimal("270.50")

    def test_newest_payment_listed_first(self, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        invoice_service.record_payment(
            {
                "invoice_id": invoice.id,
                "amount_paid": Decimal(10),
                "payment_date": date(2024, 8, 1),
                "payment_method": "Cash",
            }
        )
        assert [p.payment_date for p in invoice_service.list_payments()] == [
            date(2024, 8, 1),
            date(2024, 7, 15),
        ]

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"amount_paid": Decimal(0)}, "amount_paid"),
            ({"amount_paid": Decimal(-5)}, "amount_paid"),
            ({"payment_method": "Barter"}, "payment_method"),
            ({"payment_date": "not a date"}, "payment_date"),
        ],
    )
    def test_invalid_payment(self, overrides, field):
        data = {
            "invoice_id": 1,
            "amount_paid": Decimal(10),
            "payment_date": date(2024, 7, 20),
            "payment_method": "UPI",
        }
        data.update(overrides)
        with pytest.raises(FormValidationError) as excinfo:
            validate_payment(data)
        assert field in excinfo.value.field_errors

    def test_unknown_invoice(self, invoice_service):
        with pytest.raises(NotFoundError):
            invoice_service.record_payment(
                {
                    "invoice_id": 99,
                    "amount_paid": Decimal(10),
                    "payment_date": date(2024, 7, 20),
                    "payment_method": "UPI",
                }
            )

    def test_other_users_invoice(self, temp_db, invoice_service, sample_customer):
        invoice = invoice_service.create_invoice(invoice_data(sample_customer.id))
        with pytest.raises(NotFoundError):
            InvoiceService(temp_db, "someone-else").record_payment(
                {
                    "invoice_id": invoice.id,
                    "amount_paid": Decimal(10),
                    "payment_date": date(2024, 7, 20),
                    "payment_method": "UPI",
                }
            )

    def test_no_user(self, temp_db):
        service = InvoiceService(temp_db, None)
        with pytest.raises(AuthenticationError):
            service.record_payment(
                {
                    "invoice_id": 1,
                    "amount_paid": Decimal(10),
                    "payment_date": date(2024, 7, 20),
                    "payment_method": "UPI",
                }
            )


class TestCompanySettings:
    """Tests for CompanySettingsService."""

    def test_empty_by_default(self, temp_db, user_id):
        assert CompanySettingsService(temp_db, user_id).load() == CompanySettings()

    def test_save_and_update(self, temp_db, user_id):
        service = CompanySettingsService(temp_db, user_id)
        service.save({"company_name": " Gupta Wholesale ", "company_address": ""})
        assert service.load() == CompanySettings("Gupta Wholesale", None)

        service.save({"company_name": "Gupta & Sons", "company_address": "4 Station Road"})
        assert service.load() == CompanySettings("Gupta & Sons", "4 Station Road")
        assert CompanySettingsService(temp_db, "someone-else").load() == CompanySettings()

    @pytest.mark.parametrize(
        "data,field",
        [
            ({"company_name": "  "}, "company_name"),
            ({"company_name": "x" * 101}, "company_name"),
            ({"company_name": "Gupta", "company_address": "x" * 256}, "company_address"),
        ],
    )
    def test_invalid_settings(self, temp_db, user_id, data, field):
        with pytest.raises(FormValidationError) as excinfo:
            CompanySettingsService(temp_db, user_id).save(data)
        assert field in excinfo.value.field_errors

    def test_no_user(self, temp_db):
        service = CompanySettingsService(temp_db, None)
        assert service.load() == CompanySettings()
        with pytest.raises(AuthenticationError):
            service.save({"company_name": "Gupta"})
