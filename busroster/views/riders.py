"""
Rider Related Views
-------------------

Handles all the rider CRUD, along with their emergency contacts,
medical notes and payments.

- Admin can add a rider to the active trip
- Admin can edit a rider, and their seats or balance on the active trip
- Admin can delete a rider who never paid, or delete a rider completely
- Admin can record a payment from a rider and see their payment history
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs
from marshmallow.fields import Nested

from busroster.models import Rider
from busroster.permissions import requires, ValidToken
from busroster.serializer import JSendSchema, JSendStatus, expects, returns, Many
from busroster.serializer.models import RiderSchema, NewRiderSchema, EditRiderSchema, TripRiderSchema, \
    RiderDetailSchema, EmergencyContactSchema, MedicalNoteSchema, PaymentSchema, RiderBalanceSchema
from busroster.service.access.riders import get_rider, get_riders, get_rider_trips, get_emergency_contacts, \
    get_medical_note
from busroster.service.access.trips import get_trip
from busroster.service.exceptions import NotFoundError
from busroster.views.base import BaseView
from busroster.views.decorators import match_getter

RIDER_URL = "/riders/{id:[0-9]+}"


class RidersView(BaseView):
    """
    Gets or adds to the list of all riders.
    """
    url = "/riders"
    name = "riders"

    @docs(summary="Get All Riders")
    @requires(ValidToken())
    @returns(JSendSchema.of(riders=Many(RiderSchema())))
    async def get(self):
        """Riders can be filtered by passing part of their name as ``?name=``."""
        riders = await get_riders(name=self.request.query.get("name"))
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"riders": [rider.serialize(self.router) for rider in riders]}
        }

    @docs(summary="Add A Rider To The Active Trip")
    @requires(ValidToken())
    @expects(NewRiderSchema())
    @returns(JSendSchema.of(rider=RiderSchema(), trip_rider=TripRiderSchema()), HTTPStatus.CREATED)
    async def post(self):
        rider_info = dict(self.request["data"])
        seats = rider_info.pop("seats")
        rider, trip_rider = await self.rider_manager.add_rider(rider_info, seats)

        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "rider": rider.serialize(self.router),
                "trip_rider": trip_rider.serialize(),
            }
        }


class RiderView(BaseView):
    """
    Gets, updates or deletes a single rider.
    """
    url = RIDER_URL
    name = "rider"
    with_rider = match_getter(get_rider, "rider", rider_id="id")

    @docs(summary="Get A Rider")
    @requires(ValidToken())
    @with_rider
    @returns(JSendSchema.of(rider=RiderDetailSchema()))
    async def get(self, rider: Rider):
        trip_riders = await get_rider_trips(rider.id)
        active_trip = await self.trip_manager.active_trip()

        data = rider.serialize(self.router)
        data["emergency_contacts"] = [contact.serialize() for contact in await get_emergency_contacts(rider.id)]
        medical_note = await get_medical_note(rider.id)
        data["medical_note"] = medical_note.serialize() if medical_note is not None else None
        data["trips"] = [
            {
                "trip": trip_rider.trip.serialize(self.trip_manager, self.router),
                "seats": trip_rider.seats,
                "balance": trip_rider.balance,
                "instructions_sent": trip_rider.instructions_sent,
            }
            for trip_rider in trip_riders
        ]

        if active_trip is not None and any(trip_rider.trip_id == active_trip.id for trip_rider in trip_riders):
            balance = await self.balance_calculator.rider_balance(active_trip, rider)
            data["current_balance"] = balance.serialize(self.router)
        else:
            data["current_balance"] = None

        return {
            "status": JSendStatus.SUCCESS,
            "data": {"rider": data}
        }

    @docs(summary="Update A Rider")
    @requires(ValidToken())
    @with_rider
    @expects(EditRiderSchema(partial=True))
    @returns(JSendSchema.of(rider=RiderSchema(), trip_rider=Nested(TripRiderSchema(), allow_none=True)))
    async def patch(self, rider: Rider):
        """
        Sending ``seats``, ``balance`` or ``instructions_sent`` also updates the
        rider's place on the active trip. Changing the seats without a balance
        recalculates the balance from the trip's cost per seat.
        """
        rider, trip_rider = await self.rider_manager.edit_rider(rider.id, self.request["data"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "rider": rider.serialize(self.router),
                "trip_rider": trip_rider.serialize() if trip_rider is not None else None,
            }
        }

    @docs(summary="Delete A Rider")
    @requires(ValidToken())
    @with_rider
    async def delete(self, rider: Rider):
        """Riders that have made a payment cannot be deleted this way."""
        await self.rider_manager.delete_rider(rider.id)
        raise web.HTTPNoContent


class RiderCompleteDeletionView(BaseView):
    """
    Deletes a rider along with their payments, contacts, medical note and trip places.
    """
    url = RIDER_URL + "/complete"
    name = "rider_complete"

    @docs(summary="Delete A Rider Completely")
    @requires(ValidToken())
    async def delete(self):
        await self.rider_manager.delete_rider_completely(int(self.request.match_info["id"]))
        raise web.HTTPNoContent


class RiderContactView(BaseView):
    """
    Sets or removes one of a rider's two emergency contacts.
    """
    url = RIDER_URL + "/contacts/{order:[12]}"
    name = "rider_contact"

    @docs(summary="Set An Emergency Contact")
    @requires(ValidToken())
    @expects(EmergencyContactSchema(exclude=("contact_order",)))
    @returns(JSendSchema.of(contact=EmergencyContactSchema()))
    async def put(self):
        contact = await self.rider_manager.set_emergency_contact(
            int(self.request.match_info["id"]), int(self.request.match_info["order"]), **self.request["data"]
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"contact": contact.serialize()}
        }

    @docs(summary="Remove An Emergency Contact")
    @requires(ValidToken())
    async def delete(self):
        await self.rider_manager.remove_emergency_contact(
            int(self.request.match_info["id"]), int(self.request.match_info["order"])
        )
        raise web.HTTPNoContent


class RiderMedicalView(BaseView):
    """
    Sets or removes a rider's medical note.
    """
    url = RIDER_URL + "/medical"
    name = "rider_medical"

    @docs(summary="Set A Medical Note")
    @requires(ValidToken())
    @expects(MedicalNoteSchema())
    @returns(JSendSchema.of(medical_note=MedicalNoteSchema()))
    async def put(self):
        note = await self.rider_manager.set_medical_note(int(self.request.match_info["id"]), **self.request["data"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"medical_note": note.serialize()}
        }

    @docs(summary="Remove A Medical Note")
    @requires(ValidToken())
    async def delete(self):
        await self.rider_manager.remove_medical_note(int(self.request.match_info["id"]))
        raise web.HTTPNoContent


class RiderPaymentsView(BaseView):
    """
    Gets a rider's payment history, or records a new payment towards the active trip.
    """
    url = RIDER_URL + "/payments"
    name = "rider_payments"
    with_rider = match_getter(get_rider, "rider", rider_id="id")

    @docs(summary="Get A Rider's Payments")
    @requires(ValidToken())
    @with_rider
    @returns(JSendSchema.of(payments=Many(PaymentSchema())))
    async def get(self, rider: Rider):
        """
        Only the payments towards the active trip are included,
        unless another trip is picked with ``?trip_id=``.
        """
        trip_id = self.request.query.get("trip_id")
        if trip_id is not None and not trip_id.isdigit():
            raise web.HTTPBadRequest(text=JSendSchema().dumps({
                "status": JSendStatus.FAIL,
                "data": {"message": "The trip_id must be a whole number."}
            }), content_type="application/json")

        payments = await self.payment_manager.get_payments(rider.id, int(trip_id) if trip_id is not None else None)
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"payments": [payment.serialize(self.router) for payment in payments]}
        }

    @docs(summary="Record A Payment")
    @requires(ValidToken())
    @with_rider
    @expects(PaymentSchema())
    @returns(JSendSchema.of(payment=PaymentSchema(), balance=Nested(RiderBalanceSchema(), allow_none=True)),
             HTTPStatus.CREATED)
    async def post(self, rider: Rider):
        """
        The payment is taken against the active trip. A receipt is sent
        to the rider afterwards; if it cannot be sent the payment stands.
        """
        payment = await self.payment_manager.add_payment(
            rider.id, self.request["data"]["amount"], self.request["data"]["date"]
        )
        try:
            balance = await self.balance_calculator.rider_balance(await get_trip(payment.trip_id), rider)
        except NotFoundError:
            balance = None

        return {
            "status": JSendStatus.SUCCESS,
            "data": {
                "payment": payment.serialize(self.router),
                "balance": balance.serialize(self.router) if balance is not None else None,
            }
        }
