"""
Base
----

Every view extends :class:`BaseView`. Registering a view adds its route
and hands it the services it works with, so handlers reach them as
``self.trip_manager`` and so on.
"""

from typing import Optional

from aiohttp.abc import Application
from aiohttp.web import View, AbstractRoute
from aiohttp_cors import CorsConfig, CorsViewMixin, ResourceOptions

from busroster.service.balance import BalanceCalculator
from busroster.service.credentials import CredentialChecker, TokenVerifier
from busroster.service.manager.payment_manager import PaymentManager
from busroster.service.manager.rider_manager import RiderManager
from busroster.service.manager.trip_manager import TripManager

SERVICES = (
    "trip_manager", "rider_manager", "payment_manager",
    "balance_calculator", "credential_checker", "token_verifier",
)


class ViewConfigurationError(Exception):
    pass


class BaseView(View, CorsViewMixin):

    url: str
    name: Optional[str] = None
    route: AbstractRoute

    trip_manager: TripManager
    rider_manager: RiderManager
    payment_manager: PaymentManager
    balance_calculator: BalanceCalculator
    credential_checker: CredentialChecker
    token_verifier: TokenVerifier

    cors_config = {
        "*": ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        )
    }

    @classmethod
    def register_route(cls, app: Application, base: str = ""):
        """
        Adds the view to the app's router under ``base``.

        :raises ViewConfigurationError: If the view has no url.
        """
        if not hasattr(cls, "url"):
            raise ViewConfigurationError(f"{cls.__name__} has no url.")

        cls.route = app.router.add_view(base + cls.url, cls, name=cls.name)
        for service in SERVICES:
            setattr(cls, service, app[service])

    @classmethod
    def enable_cors(cls, cors: CorsConfig):
        if not hasattr(cls, "route"):
            raise ViewConfigurationError(f"{cls.__name__} must be registered before enabling CORS.")
        cors.add(cls.route, webview=True)

    @property
    def router(self):
        return self.request.app.router
