"""
Rider Manager
-------------

Handles the riders and the records that hang off them.

Responsibilities
================

- adding a new rider to the active trip
- editing riders and their seats on the active trip
- emergency contacts and medical notes
- removing a rider from a trip
- deleting riders

There are two ways to delete a rider. :meth:`RiderManager.delete_rider`
refuses to touch a rider who has paid anything, so payment history is
never lost by accident. :meth:`RiderManager.delete_rider_completely`
removes the rider and everything that refers to them, one table at a
time in :attr:`RiderManager.deletion_steps` order.
"""

from typing import Dict, Any, Optional, Tuple, Callable, Awaitable, Sequence

from tortoise.exceptions import BaseORMException

from busroster import logger
from busroster.models import Rider, TripRider, Payment, EmergencyContact, MedicalNote
from busroster.service.access.payments import has_payments
from busroster.service.access.riders import get_rider
from busroster.service.access.trips import get_trip_rider
from busroster.service.exceptions import ConflictError, DatabaseError, NotFoundError
from busroster.service.manager.trip_manager import TripManager
from busroster.service.store import LedgerStore
from busroster.service.validation import Validator

TRIP_RIDER_FIELDS = ("seats", "balance", "instructions_sent")
CONTACT_FIELDS = ("name", "relationship", "phone", "other_phone")
MEDICAL_FIELDS = ("conditions", "medications", "allergies", "notes")

DeletionStep = Tuple[str, Callable[[int], Awaitable]]


def validate_rider(data: Dict[str, Any], *, partial=False) -> Dict[str, Any]:
    """
    Validates the rider columns in the given data, ignoring any other keys.

    :param partial: Only validate the fields that are present.
    :raises LedgerValidationError: If any of the fields is invalid.
    """
    validator = Validator()
    cleaned = {}

    for key in Rider.EDITABLE_FIELDS:
        if partial and key not in data:
            continue
        if key == "name":
            cleaned[key] = validator.text(key, data.get(key))
        elif key == "email":
            cleaned[key] = validator.email(key, data.get(key)) or ""
        else:
            cleaned[key] = validator.text(key, data.get(key), required=False) or ""

    validator.raise_for_errors()
    return cleaned


def validate_contact(order: int, data: Dict[str, Any]) -> Dict[str, Any]:
    validator = Validator()
    validator.check("contact_order", order in EmergencyContact.ORDERS, "Must be 1 or 2.")
    cleaned = {
        "name": validator.text("name", data.get("name")),
        "relationship": validator.text("relationship", data.get("relationship"), required=False) or "",
        "phone": validator.text("phone", data.get("phone"), required=False) or "",
        "other_phone": validator.text("other_phone", data.get("other_phone"), required=False) or "",
    }
    validator.raise_for_errors()
    return cleaned


class RiderManager:
    """
    Handles the lifecycle of riders in the system.
    """

    deletion_steps: Sequence[DeletionStep] = (
        ("emergency contacts", lambda rider_id: EmergencyContact.filter(rider_id=rider_id).delete()),
        ("medical note", lambda rider_id: MedicalNote.filter(rider_id=rider_id).delete()),
        ("payments", lambda rider_id: Payment.filter(rider_id=rider_id).delete()),
        ("trip riders", lambda rider_id: TripRider.filter(rider_id=rider_id).delete()),
        ("rider", lambda rider_id: Rider.filter(id=rider_id).delete()),
    )
    """
    The tables a complete deletion clears, in order. Each step removes
    rows the later steps' foreign keys would otherwise trip over.
    """

    def __init__(self, store: LedgerStore, trip_manager: TripManager):
        self._store = store
        self._trip_manager = trip_manager

    async def add_rider(self, rider_info: Dict[str, Any], seats=1) -> Tuple[Rider, TripRider]:
        """
        Creates a new rider and adds them to the active trip.

        ``rider_info`` holds the rider columns, and optionally a list of
        ``emergency_contacts`` (each with a ``contact_order``) and a
        ``medical_note``. Everything is written in one transaction.

        :raises NoActiveTripError: When there is no active trip. Nothing is written.
        :raises LedgerValidationError: When the rider details or seats are invalid.
        """
        trip = await self._trip_manager.require_active_trip()

        cleaned = validate_rider(rider_info)
        validator = Validator()
        seats = validator.seats("seats", seats)
        validator.raise_for_errors()

        contacts = [
            (contact.get("contact_order"), validate_contact(contact.get("contact_order"), contact))
            for contact in rider_info.get("emergency_contacts") or []
        ]
        validator.check(
            "emergency_contacts", len({order for order, _ in contacts}) == len(contacts),
            "Each contact order may only be used once."
        )
        validator.raise_for_errors()
        medical = rider_info.get("medical_note")

        async with self._store.transaction("add rider"):
            rider = await Rider.create(**cleaned)
            trip_rider = await TripRider.create(trip=trip, rider=rider, seats=seats, balance=trip.seat_cost(seats))

            for order, contact in contacts:
                await EmergencyContact.create(rider=rider, contact_order=order, **contact)

            if medical:
                await MedicalNote.create(rider=rider, **{key: medical.get(key) or "" for key in MEDICAL_FIELDS})

        logger.info("Added rider %s to trip %s with %d seats", rider, trip, seats)
        return rider, trip_rider

    async def edit_rider(self, rider_id: int, fields: Dict[str, Any]) -> Tuple[Rider, Optional[TripRider]]:
        """
        Updates a rider.

        When any of ``seats``, ``balance`` or ``instructions_sent`` are
        given, the rider's entry on the active trip is updated too, or
        created if they are not on it yet. Changing the seats without
        giving a balance recalculates the balance from the trip's cost
        per seat.

        :raises NotFoundError: When the rider does not exist.
        :raises NoActiveTripError: When trip fields are given and there is no active trip.
        :raises LedgerValidationError: When any of the fields is invalid.
        """
        rider = await get_rider(rider_id)
        cleaned = validate_rider(fields, partial=True)

        trip_fields = {key: fields[key] for key in TRIP_RIDER_FIELDS if fields.get(key) is not None}
        validator = Validator()
        if "seats" in trip_fields:
            trip_fields["seats"] = validator.seats("seats", trip_fields["seats"])
        if "balance" in trip_fields:
            trip_fields["balance"] = validator.amount("balance", trip_fields["balance"])
        validator.raise_for_errors()

        trip = await self._trip_manager.require_active_trip() if trip_fields else None
        trip_rider = None

        async with self._store.transaction("edit rider"):
            if cleaned:
                for key, value in cleaned.items():
                    setattr(rider, key, value)
                await rider.save()

            if trip is not None:
                trip_rider = await TripRider.filter(trip_id=trip.id, rider_id=rider.id).first()
                if trip_rider is None:
                    trip_rider = TripRider(trip=trip, rider=rider, seats=1, balance=trip.seat_cost(1))

                if "seats" in trip_fields:
                    trip_rider.seats = trip_fields["seats"]
                    trip_rider.balance = trip.seat_cost(trip_rider.seats)
                if "balance" in trip_fields:
                    trip_rider.balance = trip_fields["balance"]
                if "instructions_sent" in trip_fields:
                    trip_rider.instructions_sent = bool(trip_fields["instructions_sent"])

                await trip_rider.save()

        logger.info("Updated rider %s", rider)
        return rider, trip_rider

    async def set_emergency_contact(self, rider_id: int, contact_order: int, **contact) -> EmergencyContact:
        """
        Creates or replaces one of the rider's two emergency contacts.

        :raises NotFoundError: When the rider does not exist.
        """
        cleaned = validate_contact(contact_order, contact)

        async with self._store.transaction("set emergency contact"):
            rider = await get_rider(rider_id)
            existing = await EmergencyContact.filter(rider_id=rider.id, contact_order=contact_order).first()
            if existing is None:
                existing = EmergencyContact(rider=rider, contact_order=contact_order)
            for key, value in cleaned.items():
                setattr(existing, key, value)
            await existing.save()

        return existing

    async def remove_emergency_contact(self, rider_id: int, contact_order: int):
        """
        :raises NotFoundError: When the rider has no contact in that position.
        """
        async with self._store.transaction("remove emergency contact"):
            deleted = await EmergencyContact.filter(rider_id=rider_id, contact_order=contact_order).delete()

        if not deleted:
            raise NotFoundError("emergency contact", rider_id=rider_id, contact_order=contact_order)

    async def set_medical_note(self, rider_id: int, **note) -> MedicalNote:
        """
        Creates or replaces the rider's medical note.

        :raises NotFoundError: When the rider does not exist.
        """
        async with self._store.transaction("set medical note"):
            rider = await get_rider(rider_id)
            existing = await MedicalNote.filter(rider_id=rider.id).first()
            if existing is None:
                existing = MedicalNote(rider=rider)
            for key in MEDICAL_FIELDS:
                if key in note:
                    setattr(existing, key, note[key] or "")
            await existing.save()

        return existing

    async def remove_medical_note(self, rider_id: int):
        """
        :raises NotFoundError: When the rider has no medical note.
        """
        async with self._store.transaction("remove medical note"):
            deleted = await MedicalNote.filter(rider_id=rider_id).delete()

        if not deleted:
            raise NotFoundError("medical note", rider_id=rider_id)

    async def remove_rider_from_trip(self, rider_id: int, trip_id: int):
        """
        Takes a rider off a trip. The rider, and their place on any other trip, is kept.

        :raises NotFoundError: When the rider is not on the trip.
        """
        async with self._store.transaction("remove rider from trip"):
            trip_rider = await get_trip_rider(trip_id, rider_id)
            await trip_rider.delete()

        logger.info("Removed rider %s from trip %s", rider_id, trip_id)

    async def delete_rider(self, rider_id: int):
        """
        Deletes a rider who has never made a payment.

        :raises NotFoundError: When the rider does not exist.
        :raises ConflictError: When the rider has made a payment. Use
            :meth:`delete_rider_completely` to delete them anyway.
        """
        async with self._store.transaction("delete rider"):
            rider = await get_rider(rider_id)
            if await has_payments(rider.id):
                raise ConflictError(f"Rider {rider.name} has payments and cannot be deleted.")

            await EmergencyContact.filter(rider_id=rider.id).delete()
            await MedicalNote.filter(rider_id=rider.id).delete()
            await TripRider.filter(rider_id=rider.id).delete()
            await rider.delete()

        logger.info("Deleted rider %s", rider)

    async def delete_rider_completely(self, rider_id: int):
        """
        Deletes a rider along with their contacts, medical note,
        payments and trip places, in :attr:`deletion_steps` order.

        The steps run in a single transaction. If one fails, the ones
        after it are not attempted and the ones before it are rolled back.

        :raises NotFoundError: When the rider does not exist.
        :raises DatabaseError: When one of the steps fails.
        """
        rider = await get_rider(rider_id)

        async with self._store.transaction("delete rider completely"):
            for name, step in self.deletion_steps:
                try:
                    await step(rider.id)
                except BaseORMException as error:
                    logger.error("Could not delete %s of rider %s: %s", name, rider, error)
                    raise DatabaseError("Database error occurred", name) from error

        logger.info("Deleted rider %s and all of their records", rider)
