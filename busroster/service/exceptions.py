"""
Exceptions
----------

The errors raised by the service layer. Views catch these and
turn them into responses; anything else is a bug.
"""

from typing import Dict, Optional


class LedgerError(Exception):
    """The base class for all ledger errors."""

    message = "The operation could not be completed."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class LedgerValidationError(LedgerError):
    """Raised when the supplied input is invalid. Nothing has been written."""

    message = "The supplied data is invalid."

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class NotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, **params):
        super().__init__(f"Could not find {entity} with the given params.")
        self.entity = entity
        self.params = params


class NoActiveTripError(LedgerError):
    """
    Raised when an operation needs the active trip and none is set.

    :attr:`trips_exist` lets the caller decide whether to send the
    user off to create a trip or to pick one.
    """

    message = "There is no active trip. Please select a trip first."

    def __init__(self, trips_exist: bool):
        super().__init__()
        self.trips_exist = trips_exist


class ConflictError(LedgerError):
    """Raised when the operation would break a uniqueness or deletion rule."""


class DatabaseError(LedgerError):
    """Raised when the storage layer fails part way through an operation."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.step = step


class NotifierError(LedgerError):
    """Raised by a notifier that failed to deliver. Never fatal to the caller."""
