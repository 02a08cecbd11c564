from datetime import date

import pytest
from aiohttp.test_utils import TestClient

from busroster.models import Payment
from busroster.serializer import JSendSchema


@pytest.fixture
async def api_payment(client, api_rider) -> Payment:
    payment_manager = client.app["payment_manager"]
    payment = await payment_manager.add_payment(api_rider.id, "150", date(2026, 2, 1))
    await payment_manager.wait_for_notifications()
    return payment


class TestPaymentView:

    async def test_get_payment(self, client: TestClient, auth_headers, api_rider, api_payment):
        response = await client.get(f'/api/v1/payments/{api_payment.id}', headers=auth_headers)
        response_data = await response.json()
        assert response_data["data"]["payment"] == {
            "id": api_payment.id,
            "rider_id": api_rider.id,
            "trip_id": api_payment.trip_id,
            "date": "2026-02-01",
            "amount": "150.00",
            "url": f"/api/v1/payments/{api_payment.id}",
            "rider_url": f"/api/v1/riders/{api_rider.id}",
        }

    async def test_get_missing_payment(self, client: TestClient, auth_headers):
        response = await client.get('/api/v1/payments/31', headers=auth_headers)
        response_data = JSendSchema().load(await response.json())
        assert response.status == 404
        assert response_data["data"]["params"] == {"payment_id": 31}

    async def test_correct_payment(self, client: TestClient, auth_headers, api_payment):
        response = await client.patch(f'/api/v1/payments/{api_payment.id}', headers=auth_headers, json={
            "amount": "120.25"
        })
        response_data = await response.json()
        assert response_data["data"]["payment"]["amount"] == "120.25"
        assert response_data["data"]["payment"]["date"] == "2026-02-01"

    async def test_correct_payment_needs_a_change(self, client: TestClient, auth_headers, api_payment):
        response = await client.patch(f'/api/v1/payments/{api_payment.id}', headers=auth_headers, json={})
        assert response.status == 400

    async def test_delete_payment_unconfirmed(self, client: TestClient, auth_headers, api_payment):
        """Assert that a payment is kept unless the deletion is confirmed."""
        response = await client.delete(f'/api/v1/payments/{api_payment.id}', headers=auth_headers)
        response_data = JSendSchema().load(await response.json())
        assert response.status == 400
        assert "confirm" in response_data["data"]["message"]
        assert await Payment.filter(id=api_payment.id).exists()

    async def test_delete_payment(self, client: TestClient, auth_headers, api_payment):
        response = await client.delete(
            f'/api/v1/payments/{api_payment.id}', headers=auth_headers, params={"confirm": "true"}
        )
        assert response.status == 204
        assert not await Payment.filter(id=api_payment.id).exists()
