"""Shared pytest fixtures for bizdesk tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from bizdesk.database.factories import create_sqlite_database
from bizdesk.domain.catalog import CustomerService, ProductService
from bizdesk.domain.inventory import InventoryService
from bizdesk.domain.invoice import InvoiceService
from bizdesk.domain.staff import StaffService
from bizdesk.domain.substitution import SubstitutionService

USER = "user-1"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    """User that owns the test records."""
    return USER


@pytest.fixture
def substitution_service(temp_db, user_id):
    """Create a SubstitutionService with settings loaded."""
    service = SubstitutionService(temp_db, user_id)
    service.load_settings()
    return service


@pytest.fixture
def staff_service(temp_db, user_id):
    """Create a StaffService with a temporary database."""
    return StaffService(temp_db, user_id)


@pytest.fixture
def customer_service(temp_db, user_id):
    """Create a CustomerService with a temporary database."""
    return CustomerService(temp_db, user_id)


@pytest.fixture
def product_service(temp_db, user_id):
    """Create a ProductService with a temporary database."""
    return ProductService(temp_db, user_id)


@pytest.fixture
def inventory_service(temp_db, user_id):
    """Create an InventoryService with a temporary database."""
    return InventoryService(temp_db, user_id)


@pytest.fixture
def invoice_service(temp_db, user_id):
    """Create an InvoiceService with a temporary database."""
    return InvoiceService(temp_db, user_id)


@pytest.fixture
def sample_customer(customer_service):
    """Create a sample customer for testing."""
    return customer_service.create_customer(
        "Sharma Traders", email="accounts@sharma.example", billing_address="12 Mall Road"
    )


@pytest.fixture
def sample_product(product_service):
    """Create a sample product for testing."""
    return product_service.create_product(
        "Basmati Rice", unit_type="kg", default_rate=Decimal("100"), tax_percentage=Decimal("10")
    )


@pytest.fixture
def school(substitution_service):
    """Two teachers and one class where Priya teaches period 1 on Monday."""
    priya = substitution_service.save_teacher("Priya Rathore", subject="English")
    neha = substitution_service.save_teacher("Neha Tiwari", subject="Maths")
    class_a = substitution_service.save_class("XI-A")
    edited = substitution_service.set_period_entry(class_a, "Monday", "1", "English", "priya  rathore")
    edited = substitution_service.set_period_entry(edited, "Monday", "2", "Maths", "Neha Tiwari")
    substitution_service.update_class(edited)
    substitution_service.sync_teacher_schedules()
    return {"priya": priya, "neha": neha, "class": edited}


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
