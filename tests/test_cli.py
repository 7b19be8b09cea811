"""End-to-end tests for the command line interface."""

import pytest

from bizdesk.cli.main import cli


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def invoke(*args, input=None):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], input=input)

    return invoke


def test_help_does_not_open_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "substitution" in result.output
    assert "invoice" in result.output


class TestSubstitutionWorkflow:
    """Teacher, class, timetable and substitution commands."""

    def test_full_workflow(self, run):
        assert run("teacher", "add", "Priya Rathore", "--subject", "English").exit_code == 0
        assert run("teacher", "add", "Neha Tiwari", "--subject", "Maths").exit_code == 0
        assert run("class", "add", "XI-A").exit_code == 0

        result = run("class", "set-period", "XI-A", "monday", "1", "ENGLISH(PRIYA RATHORE)")
        assert result.exit_code == 0, result.output

        result = run("teacher", "schedule", "Priya Rathore")
        assert result.exit_code == 0
        assert "XI-A" in result.output

        result = run("substitution", "plan", "2024-07-15", "--absent", "priya rathore")
        assert result.exit_code == 0, result.output
        assert "Period 1 (XI-A): Neha Tiwari" in result.output

        result = run("substitution", "save", "2024-07-15", "--entry", "Priya Rathore", "1", "Neha Tiwari")
        assert result.exit_code == 0, result.output
        assert "Saved 1 substitutions" in result.output

        result = run("substitution", "list")
        assert "2024-07-15" in result.output
        assert "English" in result.output or "ENGLISH" in result.output

    def test_substitution_report(self, run, tmp_path):
        run("teacher", "add", "Priya Rathore")
        run("teacher", "add", "Neha Tiwari")
        run("class", "add", "XI-A")
        run("class", "set-period", "XI-A", "monday", "1", "ENGLISH(PRIYA RATHORE)")
        run("substitution", "save", "2024-07-15", "--entry", "Priya Rathore", "1", "Neha Tiwari")

        stats = tmp_path / "stats.csv"
        daily = tmp_path / "daily"
        result = run(
            "substitution", "report", "--month", "2024-07",
            "--stats-csv", str(stats), "--daily-csv", str(daily),
        )
        assert result.exit_code == 0, result.output
        assert "Total records: 1 | Active teachers: 1" in result.output
        assert "Priya Rathore -> Neha Tiwari" in result.output
        assert stats.read_text(encoding="utf-8").splitlines()[1] == '1,"Neha Tiwari",1,0.75,1'
        assert (daily / "substitutions-2024-07-15.csv").exists()

        assert "No substitutions found" in run("substitution", "report", "--month", "2024-08").output
        assert "Total records: 1" in run("substitution", "report", "--all").output

    def test_report_month_and_date_conflict(self, run):
        result = run("substitution", "report", "--month", "2024-07", "--date", "2024-07-15")
        assert result.exit_code == 1
        assert "not both" in result.output

    def test_sunday_is_rejected(self, run):
        run("teacher", "add", "Priya")
        result = run("substitution", "plan", "2024-07-21", "--absent", "Priya")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_unknown_teacher(self, run):
        result = run("teacher", "schedule", "Nobody")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete_teacher_needs_confirmation(self, run):
        run("teacher", "add", "Priya")
        result = run("teacher", "delete", "Priya", input="n\n")
        assert "Deletion cancelled" in result.output
        result = run("teacher", "delete", "Priya", "--yes")
        assert result.exit_code == 0
        assert "No teachers found" in run("teacher", "list").output

    def test_import_teachers_and_timetable(self, run, tmp_path):
        teachers = tmp_path / "teachers.csv"
        timetable = tmp_path / "timetable.csv"
        assert run("sample", "teachers", str(teachers)).exit_code == 0
        assert run("sample", "timetable", str(timetable)).exit_code == 0

        result = run("teacher", "import", str(teachers))
        assert result.exit_code == 0, result.output
        assert "Imported 3 teachers" in result.output

        result = run("class", "import", str(timetable))
        assert result.exit_code == 0, result.output
        assert "XII-A" in run("class", "list").output

    def test_export_teachers(self, run, tmp_path):
        run("teacher", "add", "Priya", "--subject", "English")
        target = tmp_path / "out.csv"
        result = run("teacher", "export", str(target))
        assert result.exit_code == 0
        assert '"Priya","English"' in target.read_text(encoding="utf-8")

    def test_settings(self, run):
        result = run("settings", "set", "--period", "1", "--slot", "8:00", "--period", "2")
        assert result.exit_code == 0, result.output
        assert run("settings", "add-period", "3", "--time", "10:00").exit_code == 0
        assert run("settings", "set-slot", "2", "9:00").exit_code == 0

        output = run("settings", "show").output
        assert "9:00" in output
        assert "10:00" in output

    def test_duplicate_period(self, run):
        result = run("settings", "set", "--period", "1", "--period", "1")
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestStaffCommands:
    """Staff and attendance commands."""

    def test_salary_report(self, run):
        result = run(
            "staff", "add", "Ramesh Kumar",
            "--mobile", "9876543210", "--post", "Peon", "--workplace", "Office", "--wage", "₹500",
        )
        assert result.exit_code == 0, result.output
        assert run("attendance", "mark", "Ramesh Kumar", "present", "--date", "2024-02-01").exit_code == 0
        assert run("attendance", "mark", "Ramesh Kumar", "half-day", "--date", "2024-02-02").exit_code == 0

        result = run("staff", "salary", "--month", "2024-02")
        assert result.exit_code == 0, result.output
        assert "₹750.00" in result.output

        result = run("attendance", "list", "--month", "2024-02")
        assert "half-day" in result.output

    def test_invalid_status(self, run):
        run("staff", "add", "Ramesh", "--mobile", "1", "--post", "P", "--workplace", "W", "--wage", "1")
        result = run("attendance", "mark", "Ramesh", "holiday")
        assert result.exit_code == 2


class TestInvoiceCommands:
    """Customer, product, inventory and invoice commands."""

    def test_invoice_decrements_stock(self, run):
        assert run("customer", "add", "Sharma Traders").exit_code == 0
        assert run("product", "add", "Basmati Rice", "--unit", "kg", "--rate", "100", "--tax", "10").exit_code == 0
        result = run("inventory", "add", "1", "--quantity", "10")
        assert result.exit_code == 0, result.output

        result = run("invoice", "create", "--customer", "1", "--product", "1", "6", "--date", "2024-07-15")
        assert result.exit_code == 0, result.output
        assert "INV-00001" in result.output
        assert "660.00" in result.output
        assert "low on stock" in result.output

        assert "Basmati Rice" in run("inventory", "low-stock").output

        result = run("invoice", "show", "1", "--template", "modern")
        assert result.exit_code == 0
        assert "Sharma Traders" in result.output

        result = run("invoice", "payments")
        assert "660.00" in result.output

    def test_invalid_invoice_lists_fields(self, run):
        run("customer", "add", "Sharma Traders")
        result = run("invoice", "create", "--customer", "1", "--item", "Thing", "0", "10", "5")
        assert result.exit_code == 1
        assert "items.0.quantity" in result.output

    def test_unknown_template(self, run):
        run("customer", "add", "Sharma Traders")
        run("invoice", "create", "--customer", "1", "--item", "Thing", "1", "10", "0")
        result = run("invoice", "show", "1", "--template", "fancy")
        assert result.exit_code == 1
        assert "Unknown template" in result.output

    def test_template_list(self, run):
        output = run("template", "list").output
        assert "classic" in output
        assert "consultation" in output

    def test_add_all_to_inventory(self, run):
        run("product", "add", "Rice")
        run("product", "add", "Sugar")
        result = run("inventory", "add-all", "--set", "2", "40", "10")
        assert result.exit_code == 0, result.output
        assert "Added 2 products" in result.output
        assert "Every product is already in inventory" in run("inventory", "add-all").output

    def test_record_payment(self, run):
        run("customer", "add", "Sharma Traders")
        run("invoice", "create", "--customer", "1", "--item", "Thing", "1", "100", "0", "--date", "2024-07-15")
        result = run("invoice", "pay", "1", "--amount", "₹50", "--method", "upi", "--date", "2024-07-20")
        assert result.exit_code == 0, result.output
        assert "Recorded 50.00 by UPI on invoice 1 (total paid 150.00)" in result.output
        assert "2024-07-20" in run("invoice", "payments", "--invoice", "1").output

    def test_payment_errors(self, run):
        result = run("invoice", "pay", "7", "--amount", "10", "--method", "Cash")
        assert result.exit_code == 1
        assert "not found" in result.output
        assert run("invoice", "pay", "7", "--amount", "10", "--method", "Barter").exit_code == 2

    def test_sales_report(self, run):
        run("customer", "add", "Sharma Traders")
        run("invoice", "create", "--customer", "1", "--item", "Thing", "2", "100", "10")
        result = run("invoice", "report", "--days", "7")
        assert result.exit_code == 0, result.output
        assert "Total sales:" in result.output
        assert "220.00" in result.output
        assert "Sales over the last 7 days:" in result.output

    def test_company_details_on_invoice(self, run):
        assert "No company details set" in run("company", "show").output
        result = run("company", "set", "--name", "Gupta Wholesale", "--address", "4 Station Road")
        assert result.exit_code == 0, result.output
        assert "4 Station Road" in run("company", "show").output

        run("customer", "add", "Sharma Traders")
        run("invoice", "create", "--customer", "1", "--item", "Thing", "1", "10", "0")
        assert "Gupta Wholesale" in run("invoice", "show", "1").output

    def test_blank_company_name(self, run):
        result = run("company", "set", "--name", " ")
        assert result.exit_code == 1
        assert "company_name" in result.output
