"""
.. autoclasstree:: busroster.service

The service layer for the system. Acts as the internal API.
Each interface (the REST API, scripts) should use the service
layer to implement their logic.

The service layer implements the use cases for the system, such
that they may be reused by any program that needs to access it.
It is designed to represent the business logic.
"""

from .balance import BalanceCalculator, DashboardView, RiderBalance, TripTotals
from .exceptions import LedgerError, LedgerValidationError, NotFoundError, NoActiveTripError, ConflictError, \
    DatabaseError, NotifierError
from .manager.payment_manager import PaymentManager
from .manager.rider_manager import RiderManager
from .manager.trip_manager import TripManager, RosterView, AddRidersResult
from .store import LedgerStore
