"""
Trip Related Views
------------------

Handles all the trip CRUD, and the trip's roster.

- Admin can create, edit and delete trips
- Admin can make a trip the active trip
- Admin can add existing riders to a trip, or take them off it
- Admin can export the roster with contacts and medical notes
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs
from marshmallow.fields import Integer

from busroster.models import Trip
from busroster.permissions import requires, ValidToken
from busroster.serializer import JSendSchema, JSendStatus, expects, returns, Many
from busroster.serializer.models import TripSchema, TripRiderSchema, RosterEntrySchema, AddRidersSchema, \
    RosterFailureSchema, RiderSchema, RiderBalanceSchema, TripTotalsSchema
from busroster.service.access.trips import get_trip, get_available_riders
from busroster.views.base import BaseView
from busroster.views.decorators import match_getter


class TripsView(BaseView):
    """
    Gets or adds to the list of all trips.
    """
    url = "/trips"
    name = "trips"

    @docs(summary="Get All Trips")
    @requires(ValidToken())
    @returns(JSendSchema.of(trips=Many(TripSchema()), active_trip_id=Integer(allow_none=True)))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "trips": [trip.serialize(self.trip_manager, self.router) for trip in await self.trip_manager.get_trips()],
                "active_trip_id": self.trip_manager.active_trip_id,
            }
        }

    @docs(summary="Create A Trip")
    @requires(ValidToken())
    @expects(TripSchema())
    @returns(JSendSchema.of(trip=TripSchema()), HTTPStatus.CREATED)
    async def post(self):
        trip = await self.trip_manager.create_trip(
            name=self.request["data"]["name"],
            start_date=self.request["data"]["start_date"],
            end_date=self.request["data"].get("end_date"),
            cost_of_rental=self.request["data"]["cost_of_rental"],
            cost_per_seat=self.request["data"]["cost_per_seat"],
            total_seats=self.request["data"]["total_seats"],
        )

        return {
            "status": JSendStatus.SUCCESS,
            "data": {"trip": trip.serialize(self.trip_manager, self.router)}
        }


class TripView(BaseView):
    """
    Gets, updates or deletes a single trip.
    """
    url = "/trips/{id:[0-9]+}"
    name = "trip"
    with_trip = match_getter(get_trip, "trip", trip_id="id")

    @docs(summary="Get A Trip")
    @requires(ValidToken())
    @with_trip
    @returns(JSendSchema.of(trip=TripSchema(), riders=Many(RiderBalanceSchema()), totals=TripTotalsSchema()))
    async def get(self, trip: Trip):
        dashboard = await self.balance_calculator.dashboard(trip)
        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "trip": trip.serialize(self.trip_manager, self.router),
                "riders": [rider.serialize(self.router) for rider in dashboard.riders],
                "totals": dashboard.totals.serialize(),
            }
        }

    @docs(summary="Update A Trip")
    @requires(ValidToken())
    @with_trip
    @expects(TripSchema(partial=True))
    @returns(JSendSchema.of(trip=TripSchema()))
    async def patch(self, trip: Trip):
        """Changing the cost per seat recalculates the balance of every rider on the trip."""
        trip = await self.trip_manager.update_trip(trip.id, **self.request["data"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"trip": trip.serialize(self.trip_manager, self.router)}
        }

    @docs(summary="Delete A Trip")
    @requires(ValidToken())
    @with_trip
    async def delete(self, trip: Trip):
        """Deletes the trip with its roster and payments. The riders are kept."""
        await self.trip_manager.delete_trip(trip.id)
        raise web.HTTPNoContent


class TripActivateView(BaseView):
    """
    Makes a trip the active trip.
    """
    url = "/trips/{id:[0-9]+}/activate"
    name = "trip_activate"

    @docs(summary="Activate A Trip")
    @requires(ValidToken())
    @returns(JSendSchema.of(trip=TripSchema()))
    async def post(self):
        trip = await self.trip_manager.activate_trip(int(self.request.match_info["id"]))
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"trip": trip.serialize(self.trip_manager, self.router)}
        }


class TripRosterView(BaseView):
    """
    Gets the trip's roster, with each rider's emergency contacts and medical note.
    """
    url = "/trips/{id:[0-9]+}/roster"
    name = "trip_roster"

    @docs(summary="Get A Trip Roster")
    @requires(ValidToken())
    @returns(JSendSchema.of(trip=TripSchema(), roster=Many(RosterEntrySchema())))
    async def get(self):
        roster = await self.trip_manager.get_roster(int(self.request.match_info["id"]))
        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "trip": roster.trip.serialize(self.trip_manager, self.router),
                "roster": [entry.serialize(self.router) for entry in roster.entries],
            }
        }


class TripRidersView(BaseView):
    """
    Gets the riders that could still be added to a trip, or adds some of them.
    """
    url = "/trips/{id:[0-9]+}/riders"
    name = "trip_riders"
    with_trip = match_getter(get_trip, "trip", trip_id="id")

    @docs(summary="Get Riders Available For A Trip")
    @requires(ValidToken())
    @with_trip
    @returns(JSendSchema.of(riders=Many(RiderSchema())))
    async def get(self, trip: Trip):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"riders": [rider.serialize(self.router) for rider in await get_available_riders(trip)]}
        }

    @docs(summary="Add Riders To A Trip")
    @requires(ValidToken())
    @with_trip
    @expects(AddRidersSchema())
    @returns(JSendSchema.of(added=Many(TripRiderSchema()), failures=Many(RosterFailureSchema())))
    async def post(self, trip: Trip):
        """
        Riders that cannot be added (because they are already on the
        trip, or do not exist) are listed under ``failures`` and do not
        stop the rest from being added.
        """
        result = await self.trip_manager.add_riders_to_trip(trip.id, self.request["data"]["riders"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "added": [trip_rider.serialize() for trip_rider in result.added],
                "failures": [failure.serialize() for failure in result.failures],
            }
        }


class TripRiderView(BaseView):
    """
    Takes a rider off a trip.
    """
    url = "/trips/{id:[0-9]+}/riders/{rider_id:[0-9]+}"
    name = "trip_rider"

    @docs(summary="Remove A Rider From A Trip")
    @requires(ValidToken())
    async def delete(self):
        await self.rider_manager.remove_rider_from_trip(
            int(self.request.match_info["rider_id"]), int(self.request.match_info["id"])
        )
        raise web.HTTPNoContent
