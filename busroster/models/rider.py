"""
Rider
---------------------------

A rider is a person, independent of any trip. Their
emergency contacts and medical note hang off the rider
and are removed along with it.
"""

from typing import Dict, Any, Optional

from tortoise import Model, fields


class Rider(Model):
    """
    Represents a rider in the system.
    """

    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, default="")
    phone = fields.CharField(max_length=64, default="")
    other_phone = fields.CharField(max_length=64, default="")

    street = fields.CharField(max_length=255, default="")
    city = fields.CharField(max_length=255, default="")
    state = fields.CharField(max_length=64, default="")
    zip = fields.CharField(max_length=16, default="")

    EDITABLE_FIELDS = ("name", "email", "phone", "other_phone", "street", "city", "state", "zip")

    def serialize(self, router=None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "other_phone": self.other_phone,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
        }

        if router is not None:
            data["url"] = router["rider"].url_for(id=str(self.id)).path
            data["payments_url"] = router["rider_payments"].url_for(id=str(self.id)).path

        return data

    def __str__(self):
        return f"[{self.id}] {self.name}"


class EmergencyContact(Model):
    id = fields.IntField(pk=True)
    rider = fields.ForeignKeyField("models.Rider", related_name="emergency_contacts", on_delete=fields.RESTRICT)
    contact_order = fields.SmallIntField()
    """Either 1 (the primary contact) or 2."""

    name = fields.CharField(max_length=255)
    relationship = fields.CharField(max_length=64, default="")
    phone = fields.CharField(max_length=64, default="")
    other_phone = fields.CharField(max_length=64, default="")

    ORDERS = (1, 2)

    class Meta:
        unique_together = (("rider", "contact_order"),)

    def serialize(self) -> Dict[str, Any]:
        return {
            "contact_order": self.contact_order,
            "name": self.name,
            "relationship": self.relationship,
            "phone": self.phone,
            "other_phone": self.other_phone,
        }


class MedicalNote(Model):
    id = fields.IntField(pk=True)
    rider = fields.OneToOneField("models.Rider", related_name="medical_note", on_delete=fields.RESTRICT)
    conditions = fields.TextField(default="")
    medications = fields.TextField(default="")
    allergies = fields.TextField(default="")
    notes = fields.TextField(default="")

    def serialize(self) -> Dict[str, Any]:
        return {
            "conditions": self.conditions,
            "medications": self.medications,
            "allergies": self.allergies,
            "notes": self.notes,
        }


def serialize_optional(item: Optional[Model]) -> Optional[Dict[str, Any]]:
    return item.serialize() if item is not None else None
