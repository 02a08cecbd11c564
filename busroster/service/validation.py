"""
Validation
----------

Input checks shared by the managers. The managers validate
everything before they open a transaction, so a
:class:`~busroster.service.exceptions.LedgerValidationError`
always means nothing was written.

.. code-block:: python

    validator = Validator()
    name = validator.text("name", data.get("name"))
    seats = validator.seats("seats", data.get("seats"))
    validator.raise_for_errors()
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Any

import dateparser

from busroster.service.exceptions import LedgerValidationError

EMAIL_REGEX = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
CENT = Decimal("0.01")
MAX_AMOUNT = Decimal(10) ** 10
"""Money columns hold twelve digits, two of them after the point."""


class Validator:

    def __init__(self):
        self.errors: Dict[str, str] = {}

    def text(self, field: str, value: Any, *, required=True) -> Optional[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                self.errors[field] = "Must not be empty."
            return None if value is None else ""
        if not isinstance(value, str):
            self.errors[field] = "Must be a string."
            return None
        return value.strip()

    def email(self, field: str, value: Any) -> Optional[str]:
        value = self.text(field, value, required=False)
        if value and not EMAIL_REGEX.fullmatch(value):
            self.errors[field] = "Not a valid email address."
        return value

    def date(self, field: str, value: Any, *, required=True) -> Optional[date]:
        if value is None or value == "":
            if required:
                self.errors[field] = "Must not be empty."
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            parsed = dateparser.parse(value, languages=["en"], settings={"STRICT_PARSING": True})
            if parsed is not None:
                return parsed.date()
        self.errors[field] = f"Could not parse {value!r} as a date."
        return None

    def amount(self, field: str, value: Any, *, positive=False) -> Optional[Decimal]:
        """
        Parses a monetary amount. Amounts may never be negative, and if ``positive``
        also not zero. They must fit the money columns, below :data:`MAX_AMOUNT`.
        """
        if isinstance(value, bool) or value is None:
            self.errors[field] = "Must be a number."
            return None
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            self.errors[field] = "Must be a number."
            return None

        if not amount.is_finite():
            self.errors[field] = "Must be a number."
        elif positive and amount <= 0:
            self.errors[field] = "Must be greater than zero."
        elif amount < 0:
            self.errors[field] = "Must not be negative."
        elif amount >= MAX_AMOUNT or amount.quantize(CENT) >= MAX_AMOUNT:
            self.errors[field] = "Must be less than 10,000,000,000."
        else:
            return amount.quantize(CENT)
        return None

    def seats(self, field: str, value: Any) -> Optional[int]:
        if isinstance(value, bool):
            self.errors[field] = "Must be a whole number."
            return None
        try:
            seats = int(value)
        except (TypeError, ValueError):
            self.errors[field] = "Must be a whole number."
            return None
        if isinstance(value, float) and not value.is_integer():
            self.errors[field] = "Must be a whole number."
            return None
        if seats < 1:
            self.errors[field] = "Must be at least 1."
            return None
        return seats

    def check(self, field: str, condition: bool, message: str):
        if not condition and field not in self.errors:
            self.errors[field] = message

    def raise_for_errors(self):
        """
        :raises LedgerValidationError: If any check has failed.
        """
        if self.errors:
            raise LedgerValidationError(self.errors)
