"""
Signals
-------

Startup and shutdown hooks. Startup brings the database up, makes
sure an admin can log in, and reloads the active trip; shutdown lets
the last receipts go out before the connections close.
"""

import asyncio

from aiohttp.abc import Application
from tortoise import Tortoise

from busroster import logger
from busroster.service.access.users import create_default_admin
from busroster.service.store import Rebuildable


async def enable_loop_debug(app: Application):
    asyncio.get_running_loop().set_debug(True)


async def initialize_database(app: Application):
    """Initializes and generates the schema for our database."""
    await Tortoise.init(
        db_url=app['database_uri'],
        modules={'models': ['busroster.models']}
    )
    await Tortoise.generate_schemas(safe=True)


async def create_admin_account(app: Application):
    """Creates the default admin account on the first start."""
    if await create_default_admin(app['default_admin_password']) is not None:
        logger.warning("Created the default admin account, change its password as soon as possible")


async def rebuild_state(app: Application):
    """Rebuilds the in-memory state (such as the active trip) from the database."""
    for rebuildable in (x for x in app.values() if isinstance(x, Rebuildable)):
        await rebuildable._rebuild()


async def wait_for_receipts(app: Application):
    """Lets any receipts that are still being sent finish."""
    await app['payment_manager'].wait_for_notifications()


async def close_database_connections(app: Application):
    """Closes the open database connections."""
    await Tortoise.close_connections()


def register_signals(app, init_database=True, debug=False):
    """Registers all the signals at the appropriate hooks."""
    if debug:
        app.on_startup.append(enable_loop_debug)

    if init_database:
        app.on_startup.append(initialize_database)

    app.on_startup.append(create_admin_account)
    app.on_startup.append(rebuild_state)

    app.on_shutdown.append(wait_for_receipts)

    if init_database:
        app.on_cleanup.append(close_database_connections)
