"""
Ledger Store
------------

Every write to the ledger goes through :meth:`LedgerStore.transaction`.
The store holds a single write lock, so multi-step operations run one
at a time and inside a database transaction: either all of their
statements commit or none do, and readers never see the middle of one.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Optional

from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from busroster import logger
from busroster.service.exceptions import DatabaseError


class Rebuildable(ABC):
    """
    Implemented by services that keep state in memory. Anything
    on the app that is rebuildable is rebuilt from the database on
    startup.
    """

    @abstractmethod
    async def _rebuild(self):
        pass


class LedgerStore:

    def __init__(self):
        self._write_lock = asyncio.Lock()

    @property
    def locked(self) -> bool:
        return self._write_lock.locked()

    @asynccontextmanager
    async def snapshot(self):
        """
        Runs the enclosed reads while no write is in flight.

        SQLite shares one connection between the transaction and
        everything else, so reads take the write lock as well.
        """
        async with self._write_lock:
            yield

    @asynccontextmanager
    async def transaction(self, operation: Optional[str] = None):
        """
        Runs the enclosed block as one atomic write.

        :param operation: A name for the operation, used in errors.
        :raises DatabaseError: When the database rejects any statement in the block.
        """
        async with self._write_lock:
            try:
                async with in_transaction() as connection:
                    yield connection
            except BaseORMException as error:
                logger.error("Rolled back %s: %s", operation or "transaction", error)
                raise DatabaseError(f"Database error occurred during {operation or 'the operation'}.",
                                    operation) from error
