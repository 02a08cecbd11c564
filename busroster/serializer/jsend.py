"""
JSend Schema
------------

Every response body the API sends is a JSend envelope::

    {"status": "success", "data": {"trip": {...}}}
    {"status": "fail", "data": {"message": "...", "errors": {...}}}
    {"status": "error", "message": "..."}

See https://github.com/omniti-labs/jsend for the format.
"""

from enum import Enum
from typing import Union

from marshmallow import Schema, fields, validates_schema, ValidationError
from marshmallow.fields import Field


class JSendStatus(str, Enum):
    SUCCESS = "success"
    """The request did what was asked of it."""

    FAIL = "fail"
    """The request was refused because of what the client sent."""

    ERROR = "error"
    """The server could not complete the request."""


class JSendSchema(Schema):
    """
    The envelope itself. The ``data`` of a plain JSendSchema is any
    dict; use :meth:`of` to describe what it must contain.
    """

    status = fields.Enum(JSendStatus, by_value=True, required=True)
    data = fields.Dict()
    message = fields.String()

    @validates_schema
    def assert_envelope(self, envelope, **kwargs):
        """A success or fail carries ``data``, a fail explains itself in it, an error carries a ``message``."""
        status = envelope["status"]

        if status is JSendStatus.ERROR:
            if "message" not in envelope:
                raise ValidationError("An error response needs a message.", "message")
            return

        if "data" not in envelope:
            raise ValidationError(f"A {status.value} response needs data.", "data")
        if status is JSendStatus.FAIL and "message" not in envelope["data"]:
            raise ValidationError("A failed response must tell the user what went wrong.", "data")

    @staticmethod
    def of(**data_fields: Union[Schema, Field]) -> "JSendSchema":
        """
        Creates an envelope whose ``data`` holds the given fields. Schemas
        are nested, anything else is used as the field itself.

        >>> JSendSchema.of(trip=TripSchema(), active_trip_id=Integer(allow_none=True))
        """
        data_schema = Schema.from_dict(
            {name: _as_field(value) for name, value in data_fields.items()},
            name="JSendData",
        )

        class TypedJSendSchema(JSendSchema):
            data = fields.Nested(data_schema)

        return TypedJSendSchema()


def _as_field(value: Union[Schema, Field]) -> Field:
    return value if isinstance(value, Field) else fields.Nested(value)
