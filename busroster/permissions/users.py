from aiohttp.web_urldispatcher import View

from busroster.permissions.permission import RoutePermissionError, Permission


class ValidToken(Permission):
    """
    Asserts that the request carried a valid session token. The token
    itself is checked by the middleware, which stores the user id it
    belongs to on the request.
    """

    async def __call__(self, view: View, **kwargs):
        if "user_id" not in view.request:
            raise RoutePermissionError("You must log in first.")
