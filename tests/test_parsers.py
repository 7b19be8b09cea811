"""Tests for date, amount and name/ID parsing."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from bizdesk.domain.entities import Staff, Teacher
from bizdesk.domain.errors import NotFoundError, ValidationError
from bizdesk.utils import parse_amount, parse_date, resolve_staff, resolve_teacher


class TestParseDate:
    """Tests for parse_date."""

    def test_relative_dates(self):
        today = date.today()
        assert parse_date("today") == today
        assert parse_date(" Yesterday ") == today - timedelta(days=1)
        assert parse_date("tomorrow") == today + timedelta(days=1)

    def test_iso_date(self):
        assert parse_date("2024-07-15") == date(2024, 7, 15)

    def test_day_first(self):
        assert parse_date("05/07/2024") == date(2024, 7, 5)

    def test_month_name(self):
        assert parse_date("January 15, 2024") == date(2024, 1, 15)

    def test_bare_weekday_is_today_or_later(self):
        result = parse_date("friday")
        assert result.weekday() == 4
        assert 0 <= (result - date.today()).days < 7

    def test_last_and_next_weekday(self):
        last = parse_date("last monday")
        upcoming = parse_date("next monday")
        assert last.weekday() == upcoming.weekday() == 0
        assert 1 <= (date.today() - last).days <= 7
        assert 1 <= (upcoming - date.today()).days <= 7

    def test_month_boundaries(self):
        assert parse_date("last month").day == 1
        assert parse_date("next month").day == 1

    def test_week_boundaries(self):
        assert parse_date("last week").weekday() == 0
        assert parse_date("next week").weekday() == 0

    def test_invalid(self):
        with pytest.raises(ValidationError):
            parse_date("not a date")


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("123.45", Decimal("123.45")),
            ("₹1,23,456.50", Decimal("123456.50")),
            ("$1,234.56", Decimal("1234.56")),
            ("-20", Decimal("-20")),
            ("(15.00)", Decimal("-15.00")),
            (" 500 ", Decimal("500")),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_amount(text)


def make_teacher(teacher_id, name):
    return Teacher(id=teacher_id, name=name, subject="", post="", contact_number="")


def make_staff(staff_id, name):
    return Staff(
        id=staff_id,
        name=name,
        mobile_number="1",
        post="Peon",
        workplace="Office",
        daily_wage=Decimal(100),
        created_at=datetime(2024, 1, 1),
    )


class TestResolvers:
    """Tests for resolving names or IDs."""

    teachers = [make_teacher(1, "Priya Rathore"), make_teacher(2, "Neha Tiwari")]
    staff = [make_staff(1, "Ramesh Kumar")]

    def test_teacher_by_id(self):
        assert resolve_teacher(self.teachers, "2").name == "Neha Tiwari"
        assert resolve_teacher(self.teachers, 1).name == "Priya Rathore"

    def test_teacher_by_name_ignores_case(self):
        assert resolve_teacher(self.teachers, "  neha   TIWARI").id == 2

    def test_teacher_not_found(self):
        with pytest.raises(NotFoundError):
            resolve_teacher(self.teachers, "Pooja")
        with pytest.raises(NotFoundError):
            resolve_teacher(self.teachers, "99")

    def test_staff_by_exact_name(self):
        assert resolve_staff(self.staff, "Ramesh Kumar ").id == 1
        with pytest.raises(NotFoundError):
            resolve_staff(self.staff, "ramesh kumar")
