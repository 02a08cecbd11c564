"""
Payment
---------------------------
"""

from typing import Dict, Any

from tortoise import Model, fields


class Payment(Model):
    """
    A single payment made by a rider towards a trip. The trip
    is always the one that was active when the payment was taken.
    """

    id = fields.IntField(pk=True)
    rider = fields.ForeignKeyField("models.Rider", related_name="payments", on_delete=fields.RESTRICT)
    trip = fields.ForeignKeyField("models.Trip", related_name="payments", on_delete=fields.RESTRICT)
    date = fields.DateField()
    amount = fields.DecimalField(max_digits=12, decimal_places=2)

    def serialize(self, router=None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "rider_id": self.rider_id,
            "trip_id": self.trip_id,
            "date": self.date,
            "amount": self.amount,
        }

        if router is not None:
            data["url"] = router["payment"].url_for(id=str(self.id)).path
            data["rider_url"] = router["rider"].url_for(id=str(self.rider_id)).path

        return data
