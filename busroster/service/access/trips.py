"""
Trips
-----
"""
from typing import List, Union

from busroster.models import Trip, TripRider, Rider
from busroster.service.exceptions import NotFoundError


def resolve_id(target: Union[Trip, Rider, int]) -> int:
    if isinstance(target, (Trip, Rider)):
        return target.id
    elif isinstance(target, int):
        return target
    else:
        raise TypeError(f"Target {target} is neither a Model or an int.")


async def get_trips() -> List[Trip]:
    """Gets all the trips, newest first."""
    return await Trip.all().order_by("-created_at", "-id")


async def get_trip(trip_id: int) -> Trip:
    """
    :raises NotFoundError: When there is no trip with that id.
    """
    trip = await Trip.filter(id=trip_id).first()
    if trip is None:
        raise NotFoundError("trip", trip_id=trip_id)
    return trip


async def trips_exist() -> bool:
    return await Trip.all().exists()


async def get_trip_riders(trip: Union[Trip, int]) -> List[TripRider]:
    """Gets the riders on a trip along with their rider records, ordered by name."""
    return await TripRider.filter(trip_id=resolve_id(trip)).prefetch_related("rider").order_by("rider__name")


async def get_trip_rider(trip: Union[Trip, int], rider: Union[Rider, int]) -> TripRider:
    """
    :raises NotFoundError: When the rider is not on the trip.
    """
    trip_id, rider_id = resolve_id(trip), resolve_id(rider)
    trip_rider = await TripRider.filter(trip_id=trip_id, rider_id=rider_id).first()
    if trip_rider is None:
        raise NotFoundError("trip rider", trip_id=trip_id, rider_id=rider_id)
    return trip_rider


async def get_available_riders(trip: Union[Trip, int]) -> List[Rider]:
    """Gets the riders that are not yet on the given trip."""
    taken = await TripRider.filter(trip_id=resolve_id(trip)).values_list("rider_id", flat=True)
    query = Rider.all()
    if taken:
        query = query.exclude(id__in=taken)
    return await query.order_by("name")
