"""
Fields
-------

Defines some additional fields so that the Schemas can
serialize to and from additional native python data types.
"""

from decimal import Decimal, InvalidOperation

from marshmallow import fields, ValidationError


class Money(fields.Field):
    """
    A field that serializes a :class:`~decimal.Decimal` amount to a
    string with two decimal places and de-serializes numbers or
    numeric strings back to :class:`~decimal.Decimal`.
    """

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return str(Decimal(value).quantize(Decimal("0.01")))

    def _deserialize(self, value, attr, data, **kwargs) -> Decimal:
        if isinstance(value, bool):
            raise ValidationError("Not a valid amount.")
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"{value!r} is not a valid amount.")
        if not amount.is_finite():
            raise ValidationError("Not a valid amount.")
        return amount

    def _jsonschema_type_mapping(self):
        """Defines the jsonschema type for the object."""
        return {
            'type': ['number', 'string'],
        }


def Many(schema):
    return fields.List(fields.Nested(schema))
