"""
Permission
----------
"""

from abc import ABC, abstractmethod
from typing import Tuple

from aiohttp.web_urldispatcher import View


class RoutePermissionError(Exception):
    """Raised by a permission the request does not meet, with the reasons why."""

    def __init__(self, *messages: str):
        super().__init__(*messages)
        self.messages: Tuple[str, ...] = messages

    def __str__(self):
        return " and ".join(message.rstrip(".").lower() for message in self.messages)

    def serialize(self):
        return list(self.messages)


class Permission(ABC):

    @abstractmethod
    async def __call__(self, view: View, **kwargs) -> None:
        """:raises RoutePermissionError: If the request does not have the permission."""
