"""
Model Serializers
-----------------

Defines serializers for the various models in the system.
"""

from marshmallow import Schema, validates_schema, ValidationError
from marshmallow.fields import Integer, Boolean, String, Nested, DateTime, Date, Url, Raw, List
from marshmallow.validate import OneOf, Range, Length

from .fields import Money

class UserSchema(Schema):
    """The schema corresponding to the :class:`~busroster.models.user.User` model."""

    id = Integer(dump_only=True)
    username = String(required=True, validate=Length(min=1, max=64))
    password = String(load_only=True, required=True, validate=Length(min=8))


class LoginSchema(Schema):
    username = String(required=True)
    password = String(required=True)


class PasswordSchema(Schema):
    password = String(required=True, validate=Length(min=8))


class TripSchema(Schema):
    """The schema corresponding to the :class:`~busroster.models.trip.Trip` model."""

    id = Integer(dump_only=True)
    name = String(required=True)
    start_date = Date(required=True)
    end_date = Date(allow_none=True)
    cost_of_rental = Money(required=True)
    cost_per_seat = Money(required=True)
    total_seats = Integer(required=True, strict=True)
    created_at = DateTime(dump_only=True)
    is_active = Boolean(dump_only=True)
    url = Url(relative=True, dump_only=True)
    roster_url = Url(relative=True, dump_only=True)

    @validates_schema
    def assert_dates_in_order(self, data, **kwargs):
        """Asserts that a trip does not end before it starts."""
        if data.get("end_date") is not None and data.get("start_date") is not None:
            if data["end_date"] < data["start_date"]:
                raise ValidationError("The trip cannot end before it starts.", "end_date")


class RiderSchema(Schema):
    """The schema corresponding to the :class:`~busroster.models.rider.Rider` model."""

    id = Integer(dump_only=True)
    name = String(required=True)
    email = String()
    phone = String()
    other_phone = String()
    street = String()
    city = String()
    state = String()
    zip = String()
    url = Url(relative=True, dump_only=True)
    payments_url = Url(relative=True, dump_only=True)


class EmergencyContactSchema(Schema):
    contact_order = Integer(validate=OneOf((1, 2)))
    name = String(required=True)
    relationship = String()
    phone = String()
    other_phone = String()


class MedicalNoteSchema(Schema):
    conditions = String()
    medications = String()
    allergies = String()
    notes = String()


class NewRiderSchema(RiderSchema):
    seats = Integer(load_default=1, strict=True)
    emergency_contacts = List(Nested(EmergencyContactSchema()), validate=Length(max=2))
    medical_note = Nested(MedicalNoteSchema())

    @validates_schema
    def assert_contacts_ordered(self, data, **kwargs):
        """Asserts that every contact given with a new rider says whether it is the first or second."""
        for contact in data.get("emergency_contacts", []):
            if "contact_order" not in contact:
                raise ValidationError("Each contact needs a contact_order of 1 or 2.", "emergency_contacts")


class EditRiderSchema(RiderSchema):
    seats = Integer(strict=True)
    balance = Money()
    instructions_sent = Boolean()


class TripRiderSchema(Schema):
    trip_id = Integer(required=True)
    rider_id = Integer(required=True)
    seats = Integer(required=True)
    balance = Money(required=True)
    instructions_sent = Boolean()


class RiderBalanceSchema(RiderSchema):
    """A rider along with what they owe on a trip."""

    seats = Integer(required=True)
    balance = Money(required=True)
    instructions_sent = Boolean()
    collected = Money(required=True)
    remaining_balance = Money(required=True)


class TripTotalsSchema(Schema):
    cost_of_rental = Money(required=True)
    total_collected = Money(required=True)
    remaining_funds = Money(required=True)
    total_seats = Integer(required=True)
    reserved_seats = Integer(required=True)
    remaining_seats = Integer(required=True)


class RosterEntrySchema(RiderSchema):
    seats = Integer(required=True)
    contact1 = Nested(EmergencyContactSchema(), allow_none=True)
    contact2 = Nested(EmergencyContactSchema(), allow_none=True)
    medical_note = Nested(MedicalNoteSchema(), allow_none=True)


class RosterAdditionSchema(Schema):
    rider_id = Integer(required=True, strict=True)
    seats = Integer(strict=True, validate=Range(min=1))


class AddRidersSchema(Schema):
    riders = List(Nested(RosterAdditionSchema()), required=True, validate=Length(min=1))


class RosterFailureSchema(Schema):
    rider_id = Raw()
    reason = String(required=True)


class PaymentSchema(Schema):
    """The schema corresponding to the :class:`~busroster.models.payment.Payment` model."""

    id = Integer(dump_only=True)
    rider_id = Integer(dump_only=True)
    trip_id = Integer(dump_only=True)
    date = Date(required=True)
    amount = Money(required=True)
    url = Url(relative=True, dump_only=True)
    rider_url = Url(relative=True, dump_only=True)


class EditPaymentSchema(Schema):
    date = Date()
    amount = Money()

    @validates_schema
    def assert_something_changed(self, data, **kwargs):
        if not data:
            raise ValidationError("Supply a new date, amount, or both.")


class RiderTripSchema(Schema):
    """A trip the rider is on, as seen from the rider."""

    trip = Nested(TripSchema(), required=True)
    seats = Integer(required=True)
    balance = Money(required=True)
    instructions_sent = Boolean()


class RiderDetailSchema(RiderSchema):
    """A rider with their contacts, medical note and trips."""

    emergency_contacts = List(Nested(EmergencyContactSchema()))
    medical_note = Nested(MedicalNoteSchema(), allow_none=True)
    trips = List(Nested(RiderTripSchema()))
    current_balance = Nested(RiderBalanceSchema(), allow_none=True)
