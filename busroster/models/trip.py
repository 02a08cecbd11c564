"""
Trip
---------------------------

A trip is a single bus charter. It has its own costs and seat
count, and riders join it through a :class:`TripRider`, which
records how many seats they reserved and what they owe.

Only one trip is open for rider and payment operations at a time.
Which one is recorded on the :class:`ActiveTrip` singleton rather
than on the trips themselves, so that switching trips is a single
row update.
"""

from decimal import Decimal
from typing import Dict, Any

from tortoise import Model, fields


class Trip(Model):
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    start_date = fields.DateField()
    end_date = fields.DateField(null=True)

    cost_of_rental = fields.DecimalField(max_digits=12, decimal_places=2)
    """The total cost of chartering the bus."""

    cost_per_seat = fields.DecimalField(max_digits=12, decimal_places=2)
    total_seats = fields.IntField()
    created_at = fields.DatetimeField(auto_now_add=True)

    def seat_cost(self, seats: int) -> Decimal:
        """The balance owed for the given number of seats."""
        return Decimal(seats) * Decimal(self.cost_per_seat)

    def serialize(self, trip_manager, router=None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "cost_of_rental": self.cost_of_rental,
            "cost_per_seat": self.cost_per_seat,
            "total_seats": self.total_seats,
            "created_at": self.created_at,
            "is_active": trip_manager.is_active(self),
        }

        if router is not None:
            data["url"] = router["trip"].url_for(id=str(self.id)).path
            data["roster_url"] = router["trip_roster"].url_for(id=str(self.id)).path

        return data

    def __str__(self):
        return f"[{self.id}] {self.name}"


class TripRider(Model):
    """
    Associates a rider with a trip.

    The balance is set to ``seats * trip.cost_per_seat`` when the
    rider joins, and may be edited by hand afterwards.
    """

    id = fields.IntField(pk=True)
    trip = fields.ForeignKeyField("models.Trip", related_name="trip_riders", on_delete=fields.RESTRICT)
    rider = fields.ForeignKeyField("models.Rider", related_name="trip_riders", on_delete=fields.RESTRICT)
    seats = fields.IntField(default=1)
    balance = fields.DecimalField(max_digits=12, decimal_places=2)
    instructions_sent = fields.BooleanField(default=False)

    class Meta:
        unique_together = (("trip", "rider"),)

    def serialize(self) -> Dict[str, Any]:
        return {
            "trip_id": self.trip_id,
            "rider_id": self.rider_id,
            "seats": self.seats,
            "balance": self.balance,
            "instructions_sent": self.instructions_sent,
        }


class ActiveTrip(Model):
    """
    Points at the trip that is currently open.

    There is only ever one row, with id 1. The pointer is empty
    until a trip is first activated.
    """

    id = fields.IntField(pk=True)
    trip = fields.ForeignKeyField("models.Trip", related_name=False, null=True, on_delete=fields.SET_NULL)

    SINGLETON_ID = 1
