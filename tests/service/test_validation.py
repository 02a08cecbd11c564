from datetime import date, datetime
from decimal import Decimal

import pytest

from busroster.service import LedgerValidationError
from busroster.service.validation import Validator


@pytest.mark.parametrize("value, expected", [
    ("2026-01-10", date(2026, 1, 10)),
    ("10 January 2026", date(2026, 1, 10)),
    (date(2026, 1, 10), date(2026, 1, 10)),
    (datetime(2026, 1, 10, 12, 30), date(2026, 1, 10)),
])
def test_date(value, expected):
    validator = Validator()
    assert validator.date("date", value) == expected
    assert not validator.errors


@pytest.mark.parametrize("value", ["soon", "January", 12])
def test_bad_date(value):
    validator = Validator()
    assert validator.date("date", value) is None
    assert "date" in validator.errors


def test_optional_date():
    validator = Validator()
    assert validator.date("end_date", None, required=False) is None
    assert not validator.errors


@pytest.mark.parametrize("value, expected", [
    ("100", Decimal("100.00")),
    (12.5, Decimal("12.50")),
    ("19.999", Decimal("20.00")),
    (0, Decimal("0.00")),
])
def test_amount(value, expected):
    validator = Validator()
    assert validator.amount("amount", value) == expected
    assert not validator.errors


@pytest.mark.parametrize("value, positive", [
    ("-1", False),
    ("0", True),
    ("NaN", False),
    ("Infinity", False),
    ("1e20", False),
    ("9999999999.995", False),
    (True, False),
    (None, False),
    ("ten", False),
])
def test_bad_amount(value, positive):
    validator = Validator()
    assert validator.amount("amount", value, positive=positive) is None
    assert "amount" in validator.errors


@pytest.mark.parametrize("value, expected", [(1, 1), ("4", 4), (3.0, 3)])
def test_seats(value, expected):
    assert Validator().seats("seats", value) == expected


@pytest.mark.parametrize("value", [0, -2, 1.5, "two", None, False])
def test_bad_seats(value):
    validator = Validator()
    assert validator.seats("seats", value) is None
    assert "seats" in validator.errors


def test_text_is_stripped():
    assert Validator().text("name", "  Alex ") == "Alex"


def test_email():
    validator = Validator()
    assert validator.email("email", "alex@example.com") == "alex@example.com"
    validator.email("other", "alex@")
    assert list(validator.errors) == ["other"]


def test_raise_for_errors():
    """Assert that every failed check is reported together."""
    validator = Validator()
    validator.text("name", "")
    validator.seats("seats", 0)

    with pytest.raises(LedgerValidationError) as error:
        validator.raise_for_errors()

    assert set(error.value.errors) == {"name", "seats"}


def test_check_keeps_first_error():
    validator = Validator()
    validator.seats("seats", 0)
    validator.check("seats", False, "Another problem.")
    assert validator.errors["seats"] == "Must be at least 1."


def test_largest_amount():
    validator = Validator()
    assert validator.amount("amount", "9999999999.99") == Decimal("9999999999.99")
    assert validator.amount("total", "10000000000") is None
    assert validator.errors == {"total": "Must be less than 10,000,000,000."}
