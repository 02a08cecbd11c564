"""
.. autoclasstree:: busroster.views

The HTTP API for the roster: trips, the riders on them, their seats,
and the payments they make.

Routes are grouped by resource (``/trips``, ``/riders``, ``/payments``)
and nested where one belongs to another (``/riders/{id}/payments``).
Lists can be filtered through the query string, e.g. ``/riders?name=sam``.

Bodies are JSON with snake_case keys, and every answer apart from a
DELETE comes back as a JSend envelope; a DELETE answers 204. Money is
always sent as a string with two decimal places. Every route apart
from ``/login`` needs an ``Authorization: Bearer $TOKEN`` header.
"""

import aiohttp_cors
from aiohttp.abc import Application

from busroster import logger
from .dashboard import ActiveTripDashboardView
from .payments import PaymentView
from .riders import RidersView, RiderView, RiderCompleteDeletionView, RiderContactView, RiderMedicalView, \
    RiderPaymentsView
from .trips import TripsView, TripView, TripActivateView, TripRosterView, TripRidersView, TripRiderView
from .users import LoginView, MeView, UsersView, MyPasswordView

views = [
    LoginView, MeView, UsersView, MyPasswordView,
    ActiveTripDashboardView,
    TripsView, TripView, TripActivateView, TripRosterView, TripRidersView, TripRiderView,
    RidersView, RiderView, RiderCompleteDeletionView, RiderContactView, RiderMedicalView, RiderPaymentsView,
    PaymentView,
]


def register_views(app: Application, base: str):
    """
    Registers all the API views onto the given router at a specific root url.

    :param app: The app to register the views to.
    :param base: The base URL.
    """
    cors = aiohttp_cors.setup(app)

    for view in views:
        logger.debug("Registered %s at %s", view.__name__, base + view.url)
        view.register_route(app, base)
        view.enable_cors(cors)
