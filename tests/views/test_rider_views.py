from datetime import date
from decimal import Decimal

from aiohttp.test_utils import TestClient

from busroster.models import Rider, TripRider, Payment, EmergencyContact, MedicalNote
from busroster.serializer import JSendSchema, JSendStatus


class TestRidersView:

    async def test_create_rider(self, client: TestClient, auth_headers, api_trip, rider_info):
        """Assert that a new rider joins the active trip with a balance for their seats."""
        response = await client.post('/api/v1/riders', headers=auth_headers, json={
            **rider_info,
            "seats": 3,
            "emergency_contacts": [{"contact_order": 1, "name": "Dad", "phone": "555-0100"}],
            "medical_note": {"allergies": "peanuts"},
        })
        response_data = await response.json()
        assert response.status == 201
        rider = response_data["data"]["rider"]
        assert rider["url"] == f"/api/v1/riders/{rider['id']}"
        assert rider["payments_url"] == f"/api/v1/riders/{rider['id']}/payments"
        assert response_data["data"]["trip_rider"] == {
            "trip_id": api_trip.id,
            "rider_id": rider["id"],
            "seats": 3,
            "balance": "300.00",
            "instructions_sent": False,
        }
        assert await EmergencyContact.filter(rider_id=rider["id"]).count() == 1
        assert (await MedicalNote.get(rider_id=rider["id"])).allergies == "peanuts"

    async def test_create_rider_defaults_to_one_seat(self, client: TestClient, auth_headers, api_trip):
        response = await client.post('/api/v1/riders', headers=auth_headers, json={"name": "Sam Smith"})
        response_data = await response.json()
        assert response_data["data"]["trip_rider"]["seats"] == 1
        assert response_data["data"]["trip_rider"]["balance"] == "100.00"

    async def test_create_rider_without_active_trip(self, client: TestClient, auth_headers):
        """Assert that nothing is written when there is no trip to join."""
        response = await client.post('/api/v1/riders', headers=auth_headers, json={"name": "Sam Smith"})
        response_data = JSendSchema().load(await response.json())
        assert response.status == 409
        assert response_data["data"]["resolve"] == "create_trip"
        assert await Rider.all().count() == 0

    async def test_create_rider_invalid_contacts(self, client: TestClient, auth_headers, api_trip):
        response = await client.post('/api/v1/riders', headers=auth_headers, json={
            "name": "Sam Smith",
            "emergency_contacts": [{"name": "Dad"}],
        })
        response_data = JSendSchema().load(await response.json())
        assert response.status == 400
        assert "emergency_contacts" in response_data["data"]["errors"]
        assert await Rider.all().count() == 0

    async def test_create_rider_bad_email(self, client: TestClient, auth_headers, api_trip):
        response = await client.post('/api/v1/riders', headers=auth_headers, json={
            "name": "Sam Smith",
            "email": "not an email",
        })
        response_data = JSendSchema().load(await response.json())
        assert response.status == 400
        assert "email" in response_data["data"]["errors"]

    async def test_get_riders(self, client: TestClient, auth_headers, api_rider, random_rider):
        response = await client.get('/api/v1/riders', headers=auth_headers)
        response_data = await response.json()
        assert {rider["id"] for rider in response_data["data"]["riders"]} == {api_rider.id, random_rider.id}

        response = await client.get('/api/v1/riders', headers=auth_headers, params={"name": api_rider.name})
        response_data = await response.json()
        assert api_rider.id in [rider["id"] for rider in response_data["data"]["riders"]]
        assert all(api_rider.name in rider["name"] for rider in response_data["data"]["riders"])

    async def test_get_riders_logged_out(self, client: TestClient):
        response = await client.get('/api/v1/riders')
        assert response.status == 401


class TestRiderView:

    async def test_get_rider(self, client: TestClient, auth_headers, api_trip, api_rider):
        response = await client.get(f'/api/v1/riders/{api_rider.id}', headers=auth_headers)
        response_data = await response.json()
        rider = response_data["data"]["rider"]
        assert rider["name"] == api_rider.name
        assert rider["emergency_contacts"] == []
        assert rider["medical_note"] is None
        trip, = rider["trips"]
        assert trip["trip"]["id"] == api_trip.id
        assert trip["balance"] == "200.00"
        assert rider["current_balance"]["remaining_balance"] == "200.00"

    async def test_get_rider_off_the_active_trip(self, client: TestClient, auth_headers, api_trip, random_rider):
        response = await client.get(f'/api/v1/riders/{random_rider.id}', headers=auth_headers)
        response_data = await response.json()
        assert response_data["data"]["rider"]["trips"] == []
        assert response_data["data"]["rider"]["current_balance"] is None

    async def test_get_missing_rider(self, client: TestClient, auth_headers):
        response = await client.get('/api/v1/riders/1234', headers=auth_headers)
        response_data = JSendSchema().load(await response.json())
        assert response.status == 404
        assert response_data["data"]["params"] == {"rider_id": 1234}

    async def test_update_rider(self, client: TestClient, auth_headers, api_rider):
        """Assert that changing the seats reprices the rider's place on the active trip."""
        response = await client.patch(f'/api/v1/riders/{api_rider.id}', headers=auth_headers, json={
            "city": "Springfield",
            "seats": 4,
        })
        response_data = await response.json()
        assert response.status == 200
        assert response_data["data"]["rider"]["city"] == "Springfield"
        assert response_data["data"]["rider"]["name"] == api_rider.name
        assert response_data["data"]["trip_rider"]["seats"] == 4
        assert response_data["data"]["trip_rider"]["balance"] == "400.00"

    async def test_update_rider_balance(self, client: TestClient, auth_headers, api_rider):
        response = await client.patch(f'/api/v1/riders/{api_rider.id}', headers=auth_headers, json={
            "balance": "175.50",
            "instructions_sent": True,
        })
        response_data = await response.json()
        assert response_data["data"]["trip_rider"]["balance"] == "175.50"
        assert response_data["data"]["trip_rider"]["instructions_sent"]
        assert response_data["data"]["trip_rider"]["seats"] == 2

    async def test_update_rider_details_only(self, client: TestClient, auth_headers, random_rider):
        response = await client.patch(f'/api/v1/riders/{random_rider.id}', headers=auth_headers, json={
            "phone": "555-0199",
        })
        response_data = await response.json()
        assert response_data["data"]["rider"]["phone"] == "555-0199"
        assert response_data["data"]["trip_rider"] is None

    async def test_delete_rider(self, client: TestClient, auth_headers, api_rider):
        response = await client.delete(f'/api/v1/riders/{api_rider.id}', headers=auth_headers)
        assert response.status == 204
        assert not await Rider.filter(id=api_rider.id).exists()
        assert not await TripRider.filter(rider_id=api_rider.id).exists()

    async def test_delete_rider_with_payments(self, client: TestClient, auth_headers, api_rider):
        """Assert that a rider who has paid is kept, and the client is told why."""
        await client.app["payment_manager"].add_payment(api_rider.id, "50", date(2026, 2, 1))
        await client.app["payment_manager"].wait_for_notifications()

        response = await client.delete(f'/api/v1/riders/{api_rider.id}', headers=auth_headers)
        response_data = JSendSchema().load(await response.json())
        assert response.status == 409
        assert response_data["status"] == JSendStatus.FAIL
        assert api_rider.name in response_data["data"]["message"]
        assert await Rider.filter(id=api_rider.id).exists()


class TestRiderCompleteDeletionView:

    async def test_delete_rider_completely(self, client: TestClient, auth_headers, api_rider):
        await client.app["payment_manager"].add_payment(api_rider.id, "50", date(2026, 2, 1))
        await client.app["payment_manager"].wait_for_notifications()
        await client.app["rider_manager"].set_medical_note(api_rider.id, conditions="asthma")

        response = await client.delete(f'/api/v1/riders/{api_rider.id}/complete', headers=auth_headers)
        assert response.status == 204
        assert not await Rider.filter(id=api_rider.id).exists()
        assert not await Payment.filter(rider_id=api_rider.id).exists()
        assert not await MedicalNote.filter(rider_id=api_rider.id).exists()

    async def test_delete_missing_rider_completely(self, client: TestClient, auth_headers):
        response = await client.delete('/api/v1/riders/77/complete', headers=auth_headers)
        assert response.status == 404


class TestRiderContactView:

    async def test_set_contact(self, client: TestClient, auth_headers, api_rider):
        response = await client.put(f'/api/v1/riders/{api_rider.id}/contacts/2', headers=auth_headers, json={
            "name": "Aunt May",
            "relationship": "aunt",
        })
        response_data = await response.json()
        assert response_data["data"]["contact"]["contact_order"] == 2
        assert response_data["data"]["contact"]["name"] == "Aunt May"

    async def test_replace_contact(self, client: TestClient, auth_headers, api_rider):
        for name in ("Aunt May", "Uncle Ben"):
            await client.put(f'/api/v1/riders/{api_rider.id}/contacts/1', headers=auth_headers, json={"name": name})

        contact, = await EmergencyContact.filter(rider_id=api_rider.id)
        assert contact.name == "Uncle Ben"

    async def test_contact_order_out_of_range(self, client: TestClient, auth_headers, api_rider):
        response = await client.put(f'/api/v1/riders/{api_rider.id}/contacts/3', headers=auth_headers, json={
            "name": "Aunt May",
        })
        assert response.status == 404

    async def test_remove_contact(self, client: TestClient, auth_headers, api_rider):
        await client.app["rider_manager"].set_emergency_contact(api_rider.id, 1, name="Aunt May")

        response = await client.delete(f'/api/v1/riders/{api_rider.id}/contacts/1', headers=auth_headers)
        assert response.status == 204

        response = await client.delete(f'/api/v1/riders/{api_rider.id}/contacts/1', headers=auth_headers)
        assert response.status == 404


class TestRiderMedicalView:

    async def test_set_medical_note(self, client: TestClient, auth_headers, api_rider):
        response = await client.put(f'/api/v1/riders/{api_rider.id}/medical', headers=auth_headers, json={
            "conditions": "asthma",
            "medications": "inhaler",
        })
        response_data = await response.json()
        assert response_data["data"]["medical_note"]["conditions"] == "asthma"
        assert response_data["data"]["medical_note"]["allergies"] == ""

    async def test_remove_medical_note(self, client: TestClient, auth_headers, api_rider):
        await client.app["rider_manager"].set_medical_note(api_rider.id, conditions="asthma")

        response = await client.delete(f'/api/v1/riders/{api_rider.id}/medical', headers=auth_headers)
        assert response.status == 204
        assert not await MedicalNote.filter(rider_id=api_rider.id).exists()


class TestRiderPaymentsView:

    async def test_record_payment(self, client: TestClient, auth_headers, notifier, api_trip, api_rider):
        """Assert that a payment is taken against the active trip and a receipt is sent."""
        response = await client.post(f'/api/v1/riders/{api_rider.id}/payments', headers=auth_headers, json={
            "date": "2026-02-01",
            "amount": "150.00",
        })
        response_data = await response.json()
        assert response.status == 201
        payment = response_data["data"]["payment"]
        assert payment["trip_id"] == api_trip.id
        assert payment["amount"] == "150.00"
        assert payment["url"] == f"/api/v1/payments/{payment['id']}"
        assert response_data["data"]["balance"]["collected"] == "150.00"
        assert response_data["data"]["balance"]["remaining_balance"] == "50.00"

        await client.app["payment_manager"].wait_for_notifications()
        receipt, = notifier.sent
        assert receipt.amount == Decimal("150.00")
        assert receipt.running_total == Decimal("150.00")

    async def test_record_payment_updates_dashboard(self, client: TestClient, auth_headers, api_trip, api_rider):
        """Assert that a 1000 trip with one rider on two seats at 100 adds up after a payment of 150."""
        await client.post(f'/api/v1/riders/{api_rider.id}/payments', headers=auth_headers, json={
            "date": "2026-02-01",
            "amount": "150",
        })
        await client.app["payment_manager"].wait_for_notifications()

        response = await client.get('/api/v1/dashboard', headers=auth_headers)
        response_data = await response.json()
        assert response_data["data"]["totals"]["total_collected"] == "150.00"
        assert response_data["data"]["totals"]["remaining_funds"] == "850.00"
        assert response_data["data"]["totals"]["remaining_seats"] == 8
        rider, = response_data["data"]["riders"]
        assert rider["remaining_balance"] == "50.00"

    async def test_record_invalid_payment(self, client: TestClient, auth_headers, api_rider):
        response = await client.post(f'/api/v1/riders/{api_rider.id}/payments', headers=auth_headers, json={
            "date": "2026-02-01",
            "amount": "-5",
        })
        response_data = JSendSchema().load(await response.json())
        assert response.status == 400
        assert "amount" in response_data["data"]["errors"]
        assert await Payment.all().count() == 0

    async def test_record_payment_from_rider_off_trip(self, client: TestClient, auth_headers, api_trip, random_rider):
        response = await client.post(f'/api/v1/riders/{random_rider.id}/payments', headers=auth_headers, json={
            "date": "2026-02-01",
            "amount": "20",
        })
        response_data = await response.json()
        assert response.status == 201
        assert response_data["data"]["balance"] is None
        await client.app["payment_manager"].wait_for_notifications()

    async def test_get_payments(self, client: TestClient, auth_headers, api_trip, api_rider):
        payment_manager = client.app["payment_manager"]
        await payment_manager.add_payment(api_rider.id, "50", date(2026, 2, 1))
        await payment_manager.add_payment(api_rider.id, "25", date(2026, 2, 8))
        await payment_manager.wait_for_notifications()

        response = await client.get(f'/api/v1/riders/{api_rider.id}/payments', headers=auth_headers)
        response_data = await response.json()
        assert sorted(payment["amount"] for payment in response_data["data"]["payments"]) == ["25.00", "50.00"]

        other = await client.app["trip_manager"].create_trip("Other", "2026-06-01", None, "500", "50", 10)
        response = await client.get(
            f'/api/v1/riders/{api_rider.id}/payments', headers=auth_headers, params={"trip_id": other.id}
        )
        assert (await response.json())["data"]["payments"] == []

    async def test_get_payments_bad_trip_id(self, client: TestClient, auth_headers, api_rider):
        response = await client.get(
            f'/api/v1/riders/{api_rider.id}/payments', headers=auth_headers, params={"trip_id": "latest"}
        )
        assert response.status == 400
