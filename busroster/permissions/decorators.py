"""
Decorators
----------
"""

from functools import wraps
from http import HTTPStatus

from aiohttp import web
from aiohttp.web_urldispatcher import View

from busroster.permissions.permission import RoutePermissionError, Permission
from busroster.serializer import JSendSchema, JSendStatus


def requires(*permissions: Permission):
    """
    Guards a route with one or more permissions. Every permission is
    checked, and the request is refused with all the reasons it failed.
    """
    for permission in permissions:
        if not isinstance(permission, Permission):
            raise TypeError(f"{permission!r} is not a Permission")

    def decorator(handler):

        @wraps(handler)
        async def check_then_handle(self: View, **kwargs):
            refused = RoutePermissionError()
            for permission in permissions:
                try:
                    await permission(self, **kwargs)
                except RoutePermissionError as error:
                    refused.messages += error.messages

            if refused.messages:
                return web.json_response(JSendSchema().dump({
                    "status": JSendStatus.FAIL,
                    "data": {
                        "message": f"You cannot do that because {refused}.",
                        "reasons": refused.serialize(),
                    }
                }), status=HTTPStatus.UNAUTHORIZED)

            return await handler(self, **kwargs)

        return check_then_handle

    return decorator
