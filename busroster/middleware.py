"""
Middleware
----------

The token middleware checks any session token sent with a request.
The ledger error middleware turns the errors raised by the service
layer into JSend responses, so the views only handle the happy path.
"""

from http import HTTPStatus

from aiohttp import web
from aiohttp.abc import Request
from aiohttp.web_middlewares import middleware

from busroster import logger
from busroster.serializer import JSendStatus, JSendSchema
from busroster.service.credentials import verify_token, TokenVerificationError
from busroster.service.exceptions import LedgerError, LedgerValidationError, NotFoundError, NoActiveTripError, \
    ConflictError, DatabaseError

response_schema = JSendSchema()


def fail(status: HTTPStatus, **data) -> web.Response:
    return web.json_response(response_schema.dump({
        "status": JSendStatus.FAIL,
        "data": data
    }), status=status)


@middleware
async def validate_token_middleware(request: Request, handler):
    """
    Ensures that any Authorization header given to the application is valid,
    and stores the id of the user it belongs to on the request as "user_id".
    """

    if "Authorization" in request.headers:
        try:
            request["user_id"] = verify_token(request)
        except TokenVerificationError as error:
            return fail(
                HTTPStatus.UNAUTHORIZED,
                message="Supplied authorization token is invalid.",
                errors=list(error.args)
            )

    return await handler(request)


@middleware
async def ledger_error_middleware(request: Request, handler):
    """Converts the errors raised by the service layer into JSend responses."""

    try:
        return await handler(request)
    except LedgerValidationError as error:
        return fail(HTTPStatus.BAD_REQUEST, message=error.message, errors=error.errors)
    except NotFoundError as error:
        return fail(
            HTTPStatus.NOT_FOUND,
            message=f"Could not find {error.entity} with the given params.",
            params=error.params
        )
    except NoActiveTripError as error:
        return fail(
            HTTPStatus.CONFLICT,
            message=error.message,
            resolve="activate_trip" if error.trips_exist else "create_trip",
            resolve_url=request.app.router["trips"].url_for().path,
        )
    except ConflictError as error:
        return fail(HTTPStatus.CONFLICT, message=error.message)
    except DatabaseError as error:
        logger.error("Request %s %s failed at step %s", request.method, request.rel_url, error.step)
        return web.json_response(response_schema.dump({
            "status": JSendStatus.ERROR,
            "message": error.message,
            "data": {"step": error.step},
        }), status=HTTPStatus.INTERNAL_SERVER_ERROR)
    except LedgerError as error:
        logger.exception("Unhandled ledger error")
        return web.json_response(response_schema.dump({
            "status": JSendStatus.ERROR,
            "message": error.message,
        }), status=HTTPStatus.INTERNAL_SERVER_ERROR)
