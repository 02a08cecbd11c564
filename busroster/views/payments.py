"""
Payment Related Views
---------------------

Handles correcting and removing single payments. New payments
are recorded against a rider, see :class:`~busroster.views.riders.RiderPaymentsView`.
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs

from busroster.models import Payment
from busroster.permissions import requires, ValidToken
from busroster.serializer import JSendSchema, JSendStatus, expects, returns
from busroster.serializer.models import PaymentSchema, EditPaymentSchema
from busroster.service.access.payments import get_payment
from busroster.views.base import BaseView
from busroster.views.decorators import match_getter


class PaymentView(BaseView):
    """
    Gets, corrects or deletes a single payment.
    """
    url = "/payments/{id:[0-9]+}"
    name = "payment"
    with_payment = match_getter(get_payment, "payment", payment_id="id")

    @docs(summary="Get A Payment")
    @requires(ValidToken())
    @with_payment
    @returns(JSendSchema.of(payment=PaymentSchema()))
    async def get(self, payment: Payment):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"payment": payment.serialize(self.router)}
        }

    @docs(summary="Correct A Payment")
    @requires(ValidToken())
    @with_payment
    @expects(EditPaymentSchema())
    @returns(JSendSchema.of(payment=PaymentSchema()))
    async def patch(self, payment: Payment):
        payment = await self.payment_manager.edit_payment(
            payment.id, amount=self.request["data"].get("amount"), date=self.request["data"].get("date")
        )
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"payment": payment.serialize(self.router)}
        }

    @docs(summary="Delete A Payment")
    @requires(ValidToken())
    @with_payment
    async def delete(self, payment: Payment):
        """Payments are only deleted when the request is sent with ``?confirm=true``."""
        if self.request.query.get("confirm") != "true":
            return web.json_response(JSendSchema().dump({
                "status": JSendStatus.FAIL,
                "data": {
                    "message": "Deleting a payment cannot be undone. Repeat the request with ?confirm=true.",
                    "payment": payment.id,
                }
            }), status=HTTPStatus.BAD_REQUEST)

        await self.payment_manager.delete_payment(payment.id)
        raise web.HTTPNoContent
