"""
User
---------------------------
"""

from tortoise import Model, fields


class User(Model):
    """
    Represents an administrator of the roster. Riders do not log in.
    """

    id = fields.IntField(pk=True)
    username = fields.CharField(max_length=64, unique=True)
    password_hash = fields.CharField(max_length=255)
    created_at = fields.DatetimeField(auto_now_add=True)

    def serialize(self):
        return {
            "id": self.id,
            "username": self.username,
        }

    def __str__(self):
        return f"[{self.id}] {self.username}"
