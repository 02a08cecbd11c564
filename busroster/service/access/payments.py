"""
Payments
--------
"""
from typing import List, Optional

from busroster.models import Payment
from busroster.service.exceptions import NotFoundError


async def get_payment(payment_id: int) -> Payment:
    """
    :raises NotFoundError: When there is no payment with that id.
    """
    payment = await Payment.filter(id=payment_id).first()
    if payment is None:
        raise NotFoundError("payment", payment_id=payment_id)
    return payment


async def get_payments(*, rider_id: Optional[int] = None, trip_id: Optional[int] = None) -> List[Payment]:
    """Gets the payments matching the given filters, oldest first."""
    kwargs = {}
    if rider_id is not None:
        kwargs["rider_id"] = rider_id
    if trip_id is not None:
        kwargs["trip_id"] = trip_id

    return await Payment.filter(**kwargs).order_by("date", "id")


async def has_payments(rider_id: int) -> bool:
    return await Payment.filter(rider_id=rider_id).exists()
