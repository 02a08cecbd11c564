"""
App
-----
"""

from datetime import timedelta

import sentry_sdk
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from busroster import logger
from busroster.config import api_root, server_mode, database_url, session_secret, session_ttl_hours, email_host, \
    email_port, email_user, email_pass, sentry_dsn, default_admin_password
from busroster.middleware import validate_token_middleware, ledger_error_middleware
from busroster.service.balance import BalanceCalculator
from busroster.service.credentials import CredentialChecker, SessionTokenVerifier
from busroster.service.manager.payment_manager import PaymentManager
from busroster.service.manager.rider_manager import RiderManager
from busroster.service.manager.trip_manager import TripManager
from busroster.service.notifier import DummyNotifier, SmtpNotifier
from busroster.service.store import LedgerStore
from busroster.signals import register_signals
from busroster.version import __version__, name
from busroster.views import register_views


def build_app(db_uri=None, notifier=None, init_database=True):
    """
    Sets up the app.

    :param db_uri: The tortoise connection string, defaults to the configured database.
    :param notifier: The notifier for payment receipts, picked from the config when not given.
    :param init_database: Whether the app should initialize (and close) the database itself.
    """
    app = web.Application(middlewares=[validate_token_middleware, ledger_error_middleware])

    store = LedgerStore()
    if notifier is None:
        if server_mode == "development" or not email_host:
            notifier = DummyNotifier()
        else:
            notifier = SmtpNotifier(email_host, email_port, email_user, email_pass)

    app['store'] = store
    app['trip_manager'] = TripManager(store)
    app['rider_manager'] = RiderManager(store, app['trip_manager'])
    app['balance_calculator'] = BalanceCalculator(store)
    app['payment_manager'] = PaymentManager(store, app['trip_manager'], notifier)
    app['notifier'] = notifier
    app['credential_checker'] = CredentialChecker()
    app['token_verifier'] = SessionTokenVerifier(session_secret, timedelta(hours=session_ttl_hours))
    app['database_uri'] = db_uri if db_uri is not None else database_url
    app['default_admin_password'] = default_admin_password

    register_signals(app, init_database, debug=server_mode in ("development", "testing"))
    register_views(app, api_root)

    setup_aiohttp_apispec(
        app=app, title=name, version=__version__, url=f"{api_root}/docs",
        components={
            "securitySchemes": {
                "SessionToken": {
                    "type": "http",
                    "description": "The session token returned from the login route",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                }
            }
        },
    )

    # set up sentry exception tracking
    if server_mode != "development" and sentry_dsn:
        logger.info("Starting Sentry Logging")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=server_mode,
            release=f"{name}@{__version__}",
            integrations=[AioHttpIntegration()],
        )

    return app
