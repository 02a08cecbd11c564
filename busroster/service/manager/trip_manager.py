"""
Trip Manager
------------

This module is what handles all the trips in the system.

Responsibilities
================

- creating and updating trips
- keeping track of the single active trip
- adding existing riders to a trip
- building the trip roster

The active trip is a pointer, not a flag on each trip. It lives
in the :class:`~busroster.models.ActiveTrip` row, is cached here,
and only changes inside the :meth:`TripManager.activate_trip`
(or :meth:`TripManager.delete_trip`) transaction.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union, Any, Iterable

from busroster import logger
from busroster.models import Trip, TripRider, ActiveTrip, Payment, Rider, EmergencyContact, MedicalNote
from busroster.models.rider import serialize_optional
from busroster.service.access.trips import get_trip, get_trips, trips_exist, get_trip_riders, resolve_id
from busroster.service.exceptions import NoActiveTripError
from busroster.service.store import LedgerStore, Rebuildable
from busroster.service.validation import Validator

TRIP_FIELDS = ("name", "start_date", "end_date", "cost_of_rental", "cost_per_seat", "total_seats")


@dataclass
class RosterFailure:
    rider_id: Any
    reason: str

    def serialize(self):
        return {"rider_id": self.rider_id, "reason": self.reason}


@dataclass
class AddRidersResult:
    added: List[TripRider] = field(default_factory=list)
    failures: List[RosterFailure] = field(default_factory=list)


@dataclass
class RosterEntry:
    rider: Rider
    seats: int
    contacts: Dict[int, EmergencyContact] = field(default_factory=dict)
    medical_note: Optional[MedicalNote] = None

    def serialize(self, router=None) -> Dict[str, Any]:
        data = self.rider.serialize(router)
        data.update({
            "seats": self.seats,
            "contact1": serialize_optional(self.contacts.get(1)),
            "contact2": serialize_optional(self.contacts.get(2)),
            "medical_note": serialize_optional(self.medical_note),
        })
        return data


@dataclass
class RosterView:
    trip: Trip
    entries: List[RosterEntry] = field(default_factory=list)


def validate_trip(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validates a full set of trip fields.

    :returns: The cleaned values.
    :raises LedgerValidationError: If any of the fields is invalid.
    """
    validator = Validator()
    cleaned = {
        "name": validator.text("name", data.get("name")),
        "start_date": validator.date("start_date", data.get("start_date")),
        "end_date": validator.date("end_date", data.get("end_date"), required=False),
        "cost_of_rental": validator.amount("cost_of_rental", data.get("cost_of_rental")),
        "cost_per_seat": validator.amount("cost_per_seat", data.get("cost_per_seat")),
        "total_seats": validator.seats("total_seats", data.get("total_seats")),
    }

    if cleaned["start_date"] is not None and cleaned["end_date"] is not None:
        validator.check("end_date", cleaned["end_date"] >= cleaned["start_date"], "Must not be before the start date.")

    validator.raise_for_errors()
    return cleaned


class TripManager(Rebuildable):
    """
    Handles the lifecycle of the trips in the system.
    """

    def __init__(self, store: LedgerStore):
        self._store = store
        self._active_trip_id: Optional[int] = None

    async def _rebuild(self):
        """Loads the active trip pointer from the database."""
        pointer = await ActiveTrip.filter(id=ActiveTrip.SINGLETON_ID).first()
        self._active_trip_id = pointer.trip_id if pointer is not None else None

    @property
    def active_trip_id(self) -> Optional[int]:
        return self._active_trip_id

    def is_active(self, trip: Union[Trip, int]) -> bool:
        """Checks if the given trip is the active trip."""
        return self._active_trip_id is not None and resolve_id(trip) == self._active_trip_id

    async def active_trip(self) -> Optional[Trip]:
        """Gets the active trip, or None if no trip has been activated."""
        if self._active_trip_id is None:
            return None
        return await Trip.filter(id=self._active_trip_id).first()

    async def require_active_trip(self) -> Trip:
        """
        Gets the active trip.

        :raises NoActiveTripError: When there is no active trip.
        """
        trip = await self.active_trip()
        if trip is None:
            raise NoActiveTripError(await trips_exist())
        return trip

    async def get_trips(self) -> List[Trip]:
        return await get_trips()

    async def create_trip(self, name, start_date, end_date, cost_of_rental, cost_per_seat, total_seats) -> Trip:
        """
        Creates a new, inactive, trip.

        :raises LedgerValidationError: If any of the fields are invalid.
        """
        cleaned = validate_trip({
            "name": name, "start_date": start_date, "end_date": end_date,
            "cost_of_rental": cost_of_rental, "cost_per_seat": cost_per_seat, "total_seats": total_seats,
        })

        async with self._store.transaction("create trip"):
            trip = await Trip.create(**cleaned)

        logger.info("Created trip %s", trip)
        return trip

    async def update_trip(self, trip_id: int, **changes) -> Trip:
        """
        Updates the given fields on a trip. When the cost per seat changes
        the balance of every rider on the trip is recalculated to match.

        :raises NotFoundError: When the trip does not exist.
        :raises LedgerValidationError: If any of the resulting fields are invalid.
        """
        unknown = set(changes) - set(TRIP_FIELDS)
        if unknown:
            raise TypeError(f"Unknown trip fields: {', '.join(sorted(unknown))}")

        trip = await get_trip(trip_id)
        current = {key: getattr(trip, key) for key in TRIP_FIELDS}
        cleaned = validate_trip({**current, **changes})
        reprice = cleaned["cost_per_seat"] != trip.cost_per_seat

        async with self._store.transaction("update trip"):
            for key, value in cleaned.items():
                setattr(trip, key, value)
            await trip.save()

            if reprice:
                for trip_rider in await TripRider.filter(trip_id=trip.id):
                    trip_rider.balance = trip.seat_cost(trip_rider.seats)
                    await trip_rider.save(update_fields=["balance"])

        logger.info("Updated trip %s%s", trip, " and recalculated balances" if reprice else "")
        return trip

    async def activate_trip(self, trip_id: int) -> Trip:
        """
        Makes the given trip the active trip, deactivating every other trip.

        The pointer is cleared and then set inside a single transaction,
        so no reader ever sees two active trips or a half-finished switch.

        :raises NotFoundError: When the trip does not exist. The active trip is left unchanged.
        """
        async with self._store.transaction("activate trip"):
            trip = await get_trip(trip_id)
            await ActiveTrip.filter(id=ActiveTrip.SINGLETON_ID).update(trip_id=None)
            updated = await ActiveTrip.filter(id=ActiveTrip.SINGLETON_ID).update(trip_id=trip.id)
            if not updated:
                await ActiveTrip.create(id=ActiveTrip.SINGLETON_ID, trip=trip)

        self._active_trip_id = trip.id
        logger.info("Activated trip %s", trip)
        return trip

    async def delete_trip(self, trip_id: int):
        """
        Deletes a trip along with its payments and roster. The riders themselves are kept.

        :raises NotFoundError: When the trip does not exist.
        """
        async with self._store.transaction("delete trip"):
            trip = await get_trip(trip_id)
            await Payment.filter(trip_id=trip.id).delete()
            await TripRider.filter(trip_id=trip.id).delete()
            await ActiveTrip.filter(id=ActiveTrip.SINGLETON_ID, trip_id=trip.id).update(trip_id=None)
            await trip.delete()

        if self._active_trip_id == trip.id:
            self._active_trip_id = None
        logger.info("Deleted trip %s", trip)

    async def add_riders_to_trip(self, trip_id: int, entries: Iterable[Dict[str, Any]]) -> AddRidersResult:
        """
        Adds existing riders to a trip.

        Each entry is a dict with a ``rider_id`` and an optional number of
        ``seats`` (defaulting to one). An entry that fails is skipped and
        reported in the result; it does not stop the rest of the batch.

        :raises NotFoundError: When the trip itself does not exist.
        """
        result = AddRidersResult()

        async with self._store.transaction("add riders to trip"):
            trip = await get_trip(trip_id)

            for entry in entries:
                rider_id = entry.get("rider_id")
                validator = Validator()
                seats = entry.get("seats")
                seats = validator.seats("seats", 1 if seats is None else seats)

                if validator.errors:
                    result.failures.append(RosterFailure(rider_id, f"Invalid seats: {validator.errors['seats']}"))
                elif isinstance(rider_id, bool) or not isinstance(rider_id, int) \
                        or not await Rider.filter(id=rider_id).exists():
                    result.failures.append(RosterFailure(rider_id, "Rider does not exist."))
                elif await TripRider.filter(trip_id=trip.id, rider_id=rider_id).exists():
                    result.failures.append(RosterFailure(rider_id, "Rider is already on this trip."))
                else:
                    result.added.append(await TripRider.create(
                        trip=trip, rider_id=rider_id, seats=seats, balance=trip.seat_cost(seats)
                    ))

        for failure in result.failures:
            logger.warning("Could not add rider %s to trip %s: %s", failure.rider_id, trip, failure.reason)
        logger.info("Added %d riders to trip %s", len(result.added), trip)
        return result

    async def get_roster(self, trip_id: int) -> RosterView:
        """
        Gets every rider on the trip along with their emergency contacts
        and medical notes, ordered by name.

        :raises NotFoundError: When the trip does not exist.
        """
        async with self._store.snapshot():
            trip = await get_trip(trip_id)
            trip_riders = await get_trip_riders(trip)
            rider_ids = [trip_rider.rider_id for trip_rider in trip_riders]
            contacts = await EmergencyContact.filter(rider_id__in=rider_ids) if rider_ids else []
            notes = await MedicalNote.filter(rider_id__in=rider_ids) if rider_ids else []

        entries = {
            trip_rider.rider_id: RosterEntry(trip_rider.rider, trip_rider.seats)
            for trip_rider in trip_riders
        }

        for contact in contacts:
            entries[contact.rider_id].contacts[contact.contact_order] = contact

        for note in notes:
            entries[note.rider_id].medical_note = note

        return RosterView(trip, list(entries.values()))
