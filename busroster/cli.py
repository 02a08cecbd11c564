"""
The entry point for the CLI tool
"""

import uvloop
from aiohttp import web

from busroster import logger
from busroster.app import build_app
from busroster.config import database_url
from busroster.version import __version__, name


def run():
    """Builds the app on the configured database and runs it."""
    logger.info(f'Starting {name} %s!', __version__)
    uvloop.install()
    web.run_app(build_app(database_url))


if __name__ == '__main__':
    run()
