"""
Riders
------
"""
from typing import List, Optional

from busroster.models import Rider, EmergencyContact, MedicalNote, TripRider
from busroster.service.exceptions import NotFoundError


async def get_riders(*, name: str = None) -> List[Rider]:
    """
    Gets all the riders in the system.

    :param name: An optional name to filter by.
    """
    query = Rider.all()

    if name is not None:
        query = query.filter(name__icontains=name)

    return await query.order_by("name")


async def get_rider(rider_id: int) -> Rider:
    """
    :raises NotFoundError: When there is no rider with that id.
    """
    rider = await Rider.filter(id=rider_id).first()
    if rider is None:
        raise NotFoundError("rider", rider_id=rider_id)
    return rider


async def get_rider_trips(rider_id: int) -> List[TripRider]:
    return await TripRider.filter(rider_id=rider_id).prefetch_related("trip")


async def get_emergency_contacts(rider_id: int) -> List[EmergencyContact]:
    return await EmergencyContact.filter(rider_id=rider_id).order_by("contact_order")


async def get_medical_note(rider_id: int) -> Optional[MedicalNote]:
    return await MedicalNote.filter(rider_id=rider_id).first()
