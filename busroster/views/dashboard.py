"""
Dashboard View
--------------

The overview of the active trip: every rider with what they have paid
and still owe, and how far the trip is from covering its rental.
"""
from aiohttp_apispec import docs

from busroster.permissions import requires, ValidToken
from busroster.serializer import JSendSchema, JSendStatus, returns, Many
from busroster.serializer.models import TripSchema, RiderBalanceSchema, TripTotalsSchema
from busroster.views.base import BaseView


class ActiveTripDashboardView(BaseView):
    url = "/dashboard"
    name = "dashboard"

    @docs(summary="Get The Active Trip Dashboard")
    @requires(ValidToken())
    @returns(JSendSchema.of(trip=TripSchema(), riders=Many(RiderBalanceSchema()), totals=TripTotalsSchema()))
    async def get(self):
        """When there is no active trip, responds with a 409 pointing at the trips."""
        trip = await self.trip_manager.require_active_trip()
        dashboard = await self.balance_calculator.dashboard(trip)

        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "trip": trip.serialize(self.trip_manager, self.router),
                "riders": [rider.serialize(self.router) for rider in dashboard.riders],
                "totals": dashboard.totals.serialize(),
            }
        }
