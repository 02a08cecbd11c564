"""
Payment Manager
---------------

Records, edits and removes payments. A payment is always taken
against the active trip. Once it is committed a receipt is sent in
the background; the caller does not wait for it, and a receipt that
fails to send is logged and otherwise ignored.
"""

import asyncio
from typing import Optional, Set, List

from busroster import logger
from busroster.models import Payment, Rider, Trip
from busroster.service.access.payments import get_payment, get_payments
from busroster.service.access.riders import get_rider
from busroster.service.balance import total
from busroster.service.exceptions import NotifierError
from busroster.service.manager.trip_manager import TripManager
from busroster.service.notifier import Notifier, Receipt
from busroster.service.store import LedgerStore
from busroster.service.validation import Validator


class PaymentManager:

    def __init__(self, store: LedgerStore, trip_manager: TripManager, notifier: Notifier):
        self._store = store
        self._trip_manager = trip_manager
        self._notifier = notifier
        self._pending_receipts: Set[asyncio.Task] = set()

    async def add_payment(self, rider_id: int, amount, date) -> Payment:
        """
        Records a payment from a rider towards the active trip and sends them a receipt.

        :raises NoActiveTripError: When there is no active trip.
        :raises LedgerValidationError: When the amount or date is invalid.
        :raises NotFoundError: When the rider does not exist.
        """
        trip = await self._trip_manager.require_active_trip()

        validator = Validator()
        amount = validator.amount("amount", amount, positive=True)
        date = validator.date("date", date)
        validator.raise_for_errors()

        async with self._store.transaction("add payment"):
            rider = await get_rider(rider_id)
            payment = await Payment.create(rider=rider, trip=trip, date=date, amount=amount)

        logger.info("Recorded payment of %s from rider %s for trip %s", amount, rider, trip)

        task = asyncio.ensure_future(self._send_receipt(rider, trip, payment))
        self._pending_receipts.add(task)
        task.add_done_callback(self._pending_receipts.discard)

        return payment

    async def edit_payment(self, payment_id: int, *, amount=None, date=None) -> Payment:
        """
        Changes the amount or date of a payment.

        :raises NotFoundError: When the payment does not exist.
        :raises LedgerValidationError: When the amount or date is invalid.
        """
        validator = Validator()
        if amount is not None:
            amount = validator.amount("amount", amount, positive=True)
        if date is not None:
            date = validator.date("date", date)
        validator.raise_for_errors()

        async with self._store.transaction("edit payment"):
            payment = await get_payment(payment_id)
            if amount is not None:
                payment.amount = amount
            if date is not None:
                payment.date = date
            await payment.save()

        logger.info("Updated payment %s", payment.id)
        return payment

    async def delete_payment(self, payment_id: int) -> Payment:
        """
        Deletes a payment. Confirming the deletion is up to the caller.

        :raises NotFoundError: When the payment does not exist.
        """
        async with self._store.transaction("delete payment"):
            payment = await get_payment(payment_id)
            await payment.delete()

        logger.info("Deleted payment %s from rider %s", payment.id, payment.rider_id)
        return payment

    async def get_payments(self, rider_id: int, trip_id: Optional[int] = None) -> List[Payment]:
        """
        Gets the payment history of a rider. Unless a trip is given,
        only payments towards the active trip are included (or all of
        them, if there is no active trip).

        :raises NotFoundError: When the rider does not exist.
        """
        await get_rider(rider_id)
        if trip_id is None:
            trip_id = self._trip_manager.active_trip_id
        return await get_payments(rider_id=rider_id, trip_id=trip_id)

    async def wait_for_notifications(self):
        """Waits for any receipts that are still being sent."""
        if self._pending_receipts:
            await asyncio.gather(*self._pending_receipts)

    async def _send_receipt(self, rider: Rider, trip: Trip, payment: Payment):
        try:
            async with self._store.snapshot():
                history = await get_payments(rider_id=rider.id, trip_id=trip.id)

            receipt = Receipt(
                rider=rider,
                trip=trip,
                date=payment.date,
                amount=payment.amount,
                running_total=total(p.amount for p in history),
                history=history,
            )
            await self._notifier.send_receipt(receipt)
        except NotifierError as error:
            logger.warning("Payment %s was recorded but the receipt was not sent: %s", payment.id, error)
        except Exception:
            logger.exception("Payment %s was recorded but sending the receipt failed unexpectedly", payment.id)
        else:
            logger.debug("Sent receipt for payment %s to rider %s", payment.id, rider)
