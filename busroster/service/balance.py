"""
Balance Calculator
------------------

Derives what each rider has paid and still owes on a trip, and how
far the trip as a whole is from covering its rental. Nothing here is
stored: the figures are recomputed from the trip riders and payments
on every read, so they can never drift from the records they come from.

.. code-block:: text

    collected         = sum(payments for the rider on the trip)
    remaining_balance = trip_rider.balance - collected
    total_collected   = sum(collected)
    remaining_funds   = trip.cost_of_rental - total_collected
    reserved_seats    = sum(trip_rider.seats)
    remaining_seats   = trip.total_seats - reserved_seats
"""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Dict, Any, Union

from busroster.models import Trip, Rider, Payment, TripRider
from busroster.service.access.trips import get_trip_riders, get_trip_rider, resolve_id
from busroster.service.store import LedgerStore

ZERO = Decimal("0.00")


def total(amounts: Iterable[Union[Decimal, int]]) -> Decimal:
    """Sums the given amounts. An empty set of amounts sums to zero."""
    return sum((Decimal(amount) for amount in amounts), ZERO)


@dataclass
class RiderBalance:
    rider: Rider
    seats: int
    balance: Decimal
    instructions_sent: bool
    collected: Decimal = ZERO

    @property
    def remaining_balance(self) -> Decimal:
        return Decimal(self.balance) - self.collected

    def serialize(self, router=None) -> Dict[str, Any]:
        data = self.rider.serialize(router)
        data.update({
            "seats": self.seats,
            "balance": self.balance,
            "instructions_sent": self.instructions_sent,
            "collected": self.collected,
            "remaining_balance": self.remaining_balance,
        })
        return data


@dataclass
class TripTotals:
    cost_of_rental: Decimal
    total_seats: int
    total_collected: Decimal
    reserved_seats: int

    @property
    def remaining_funds(self) -> Decimal:
        return Decimal(self.cost_of_rental) - self.total_collected

    @property
    def remaining_seats(self) -> int:
        return self.total_seats - self.reserved_seats

    def serialize(self) -> Dict[str, Any]:
        return {
            "cost_of_rental": self.cost_of_rental,
            "total_collected": self.total_collected,
            "remaining_funds": self.remaining_funds,
            "total_seats": self.total_seats,
            "reserved_seats": self.reserved_seats,
            "remaining_seats": self.remaining_seats,
        }


@dataclass
class DashboardView:
    trip: Trip
    riders: List[RiderBalance] = field(default_factory=list)
    totals: TripTotals = None


class BalanceCalculator:
    """
    Computes the balances for a trip.

    Reads happen inside a store snapshot so a payment or roster
    change that is still being written is never half visible.
    """

    def __init__(self, store: LedgerStore):
        self._store = store

    async def dashboard(self, trip: Trip) -> DashboardView:
        """Gets the balance of every rider on the trip along with the trip totals."""
        async with self._store.snapshot():
            trip_riders = await get_trip_riders(trip)
            payments = await Payment.filter(trip_id=trip.id).values_list("rider_id", "amount")

        amounts = defaultdict(list)
        for rider_id, amount in payments:
            amounts[rider_id].append(amount)

        riders = [
            self._rider_balance(trip_rider, amounts.get(trip_rider.rider_id, ()))
            for trip_rider in trip_riders
        ]

        totals = TripTotals(
            cost_of_rental=trip.cost_of_rental,
            total_seats=trip.total_seats,
            total_collected=total(rider.collected for rider in riders),
            reserved_seats=sum(rider.seats for rider in riders),
        )

        return DashboardView(trip, riders, totals)

    async def rider_balance(self, trip: Trip, rider: Union[Rider, int]) -> RiderBalance:
        """
        Gets the balance of a single rider on the trip.

        :raises NotFoundError: When the rider is not on the trip.
        """
        async with self._store.snapshot():
            trip_rider = await get_trip_rider(trip, rider)
            await trip_rider.fetch_related("rider")
            amounts = await Payment.filter(trip_id=trip.id, rider_id=trip_rider.rider_id).values_list(
                "amount", flat=True
            )

        return self._rider_balance(trip_rider, amounts)

    async def collected(self, trip: Union[Trip, int], rider: Union[Rider, int]) -> Decimal:
        """The total the rider has paid towards the trip so far."""
        async with self._store.snapshot():
            amounts = await Payment.filter(trip_id=resolve_id(trip), rider_id=resolve_id(rider)).values_list(
                "amount", flat=True
            )
        return total(amounts)

    @staticmethod
    def _rider_balance(trip_rider: TripRider, amounts: Iterable[Decimal]) -> RiderBalance:
        return RiderBalance(
            rider=trip_rider.rider,
            seats=trip_rider.seats,
            balance=trip_rider.balance,
            instructions_sent=trip_rider.instructions_sent,
            collected=total(amounts),
        )
