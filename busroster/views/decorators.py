"""
Decorators
----------
"""
from enum import Enum
from functools import wraps
from http import HTTPStatus
from inspect import isawaitable
from typing import Union, Any, Dict

from aiohttp.web_request import Request
from aiohttp.web_urldispatcher import View

from busroster.serializer.decorators import fail_response


class GetFrom(Enum):
    SESSION = "user_id"
    """The id of the logged in user, as stored by the token middleware."""


class UnresolvedMatch(Exception):
    pass


def resolve_match_map(request: Request, match_map: Dict[str, Union[str, GetFrom]]) -> Dict[str, Any]:
    """
    Turns a match map into the keyword arguments for a getter. A string
    names an integer url parameter, :attr:`GetFrom.SESSION` the logged in user.

    :raises UnresolvedMatch: With every value that could not be resolved.
    """
    resolved, problems = {}, []

    for key, source in match_map.items():
        if source is GetFrom.SESSION:
            if source.value in request:
                resolved[key] = request[source.value]
            else:
                problems.append("You must be logged in.")
        elif isinstance(source, str):
            raw = request.match_info.get(source)
            try:
                resolved[key] = int(raw)
            except (TypeError, ValueError):
                problems.append(f'Url parameter "{source}" must be a whole number, not {raw!r}.')
        else:
            raise TypeError(f"Can't resolve {key} from {source!r}")

    if problems:
        raise UnresolvedMatch(*problems)
    return resolved


def match_getter(getter, injected_as: str, **match_map: Union[str, GetFrom]):
    """
    Fetches an item with ``getter`` before the handler runs, and passes
    it in as the ``injected_as`` keyword argument.

    .. code-block:: python

        @match_getter(get_trip, "trip", trip_id="id")
        async def get(self, trip: Trip):
            ...

    Getters from :mod:`busroster.service.access` raise
    :class:`~busroster.service.exceptions.NotFoundError` for a missing
    item, which the error middleware turns into a 404; a getter that
    returns ``None`` gets the same 404 here.
    """

    def decorator(handler):

        @wraps(handler)
        async def fetch_then_handle(self: View, **kwargs):
            try:
                params = resolve_match_map(self.request, match_map)
            except UnresolvedMatch as error:
                return fail_response("Errors with your request.", errors=list(error.args))

            item = getter(**params)
            if isawaitable(item):
                item = await item

            if item is None:
                return fail_response(
                    f"Could not find {injected_as} with the given params.",
                    HTTPStatus.NOT_FOUND, params=params
                )

            return await handler(self, **kwargs, **{injected_as: item})

        return fetch_then_handle

    return decorator
