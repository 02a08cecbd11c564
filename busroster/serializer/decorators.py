"""
Decorators
----------

The views never touch raw JSON. :func:`expects` loads and validates
the request body before the handler runs, and :func:`returns` dumps
whatever dict the handler gives back through a response schema.

.. code:: python

    @expects(TripSchema())
    @returns(JSendSchema.of(trip=TripSchema()), HTTPStatus.CREATED)
    async def post(self):
        trip = await self.trip_manager.create_trip(**self.request["data"])
        return {"status": JSendStatus.SUCCESS, "data": {"trip": trip.serialize(self.trip_manager)}}
"""

from functools import wraps
from http import HTTPStatus
from json import JSONDecodeError
from typing import Optional, Tuple, Union, Dict

from aiohttp import web
from aiohttp.web_urldispatcher import View
from marshmallow import Schema, ValidationError
from marshmallow_jsonschema import JSONSchema

from busroster.serializer.jsend import JSendSchema, JSendStatus

envelope = JSendSchema()


def fail_response(message: str, status: HTTPStatus = HTTPStatus.BAD_REQUEST, **data) -> web.Response:
    return web.json_response(envelope.dump({
        "status": JSendStatus.FAIL,
        "data": {"message": message, **data}
    }), status=status)


def describe(schema: Schema) -> dict:
    """The JSON schema of the given marshmallow schema, sent back to clients that get the body wrong."""
    return JSONSchema().dump(schema)["definitions"][type(schema).__name__]


def expects(schema: Optional[Schema], into="data"):
    """
    Validates the JSON body against ``schema`` and stores the
    loaded result on the request under ``into``.

    A body that is missing, not JSON, or invalid gets a 400 back with
    the errors and a description of what was expected; the handler is
    not called.
    """
    if schema is None:
        return lambda handler: handler

    if not isinstance(schema, Schema):
        raise TypeError(f"expects takes a schema instance, not {schema!r}")

    expected = describe(schema)

    def decorator(handler):

        @wraps(handler)
        async def load_then_handle(self: View, **kwargs):
            request = self.request

            if not request.body_exists or request.content_type != "application/json":
                return fail_response(
                    f"{request.method} {request.rel_url} only accepts a JSON body.", schema=expected
                )

            try:
                body = await request.json()
            except JSONDecodeError as error:
                return fail_response("Could not parse supplied JSON.", errors=[error.msg])

            try:
                request[into] = schema.load(body)
            except ValidationError as error:
                return fail_response("The request did not validate properly.", errors=error.messages,
                                     schema=expected)

            return await handler(self, **kwargs)

        return load_then_handle

    return decorator


def returns(
    schema: Optional[Schema] = None, return_code: HTTPStatus = HTTPStatus.OK,
    **named_schemas: Union[Schema, Tuple[Schema, HTTPStatus]]
):
    """
    Dumps the dict returned by the handler through ``schema`` with
    the given status code.

    A handler that can answer in more than one way names each answer
    instead, and returns a ``(name, data)`` tuple:

    .. code:: python

        @returns(failed=(JSendSchema(), HTTPStatus.UNAUTHORIZED), success=JSendSchema.of(user=UserSchema()))
        async def post(self):
            return "failed", {...}

    A response that does not fit its schema becomes a 500.
    """
    if schema is None and not named_schemas:
        return lambda handler: handler

    responses: Dict[Optional[str], Tuple[Schema, HTTPStatus]] = {
        name: value if isinstance(value, tuple) else (value, return_code)
        for name, value in named_schemas.items()
    }
    if schema is not None:
        responses[None] = (schema, return_code)

    def decorator(handler):

        @wraps(handler)
        async def handle_then_dump(self: View, **kwargs):
            result = await handler(self, **kwargs)
            name, data = (None, result) if schema is not None else result

            try:
                response_schema, status = responses[name]
                body = response_schema.dump(data)
            except KeyError as error:
                return _server_error({"errors": [f"No response named {error.args[0]!r}."]})
            except ValidationError as error:
                return _server_error(error.messages)

            return web.json_response(body, status=status)

        return handle_then_dump

    return decorator


def _server_error(data) -> web.Response:
    return web.json_response(envelope.dump({
        "status": JSendStatus.ERROR,
        "data": data,
        "message": "We tried to send you data back, but it came out wrong.",
    }), status=HTTPStatus.INTERNAL_SERVER_ERROR)
