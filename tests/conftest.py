from datetime import date
from decimal import Decimal

import pytest
from aiohttp.test_utils import TestClient
from faker import Faker
from tortoise import Tortoise

from busroster.app import build_app
from busroster.models import Trip, Rider, User
from busroster.service.access.users import create_user
from busroster.service.balance import BalanceCalculator
from busroster.service.manager.payment_manager import PaymentManager
from busroster.service.manager.rider_manager import RiderManager
from busroster.service.manager.trip_manager import TripManager
from busroster.service.notifier import DummyNotifier
from busroster.service.store import LedgerStore

fake = Faker()


@pytest.fixture
async def database():
    """Gives every test a fresh in-memory database."""
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={'models': ['busroster.models']},
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def store():
    return LedgerStore()


@pytest.fixture
def notifier():
    return DummyNotifier()


@pytest.fixture
def trip_manager(database, store) -> TripManager:
    return TripManager(store)


@pytest.fixture
def rider_manager(database, store, trip_manager) -> RiderManager:
    return RiderManager(store, trip_manager)


@pytest.fixture
def balance_calculator(database, store) -> BalanceCalculator:
    return BalanceCalculator(store)


@pytest.fixture
def payment_manager(database, store, trip_manager, notifier) -> PaymentManager:
    return PaymentManager(store, trip_manager, notifier)


@pytest.fixture
def random_trip_factory(trip_manager):
    async def create_trip(cost_of_rental="1000", cost_per_seat="100", total_seats=10) -> Trip:
        return await trip_manager.create_trip(
            name=f"{fake.city()} trip",
            start_date=fake.date_between(start_date="+1d", end_date="+60d"),
            end_date=None,
            cost_of_rental=cost_of_rental,
            cost_per_seat=cost_per_seat,
            total_seats=total_seats,
        )

    return create_trip


@pytest.fixture
async def random_trip(random_trip_factory) -> Trip:
    """Creates a random trip costing 1000 with 10 seats at 100 each."""
    return await random_trip_factory()


@pytest.fixture
async def active_trip(trip_manager, random_trip) -> Trip:
    """Creates a random trip and makes it the active trip."""
    return await trip_manager.activate_trip(random_trip.id)


def random_rider_info():
    return {
        "name": fake.name(),
        "email": fake.email(),
        "phone": fake.phone_number(),
        "street": fake.street_address(),
        "city": fake.city(),
        "state": fake.state_abbr(),
        "zip": fake.postcode(),
    }


@pytest.fixture
def random_rider_factory(database):
    async def create_rider() -> Rider:
        return await Rider.create(**random_rider_info())

    return create_rider


@pytest.fixture
async def random_rider(random_rider_factory) -> Rider:
    """Creates a rider that is not on any trip."""
    return await random_rider_factory()


@pytest.fixture
async def trip_rider(rider_manager, active_trip):
    """Adds a new rider to the active trip with two seats."""
    rider, trip_rider = await rider_manager.add_rider(random_rider_info(), seats=2)
    return trip_rider


@pytest.fixture
async def random_payment(payment_manager, trip_rider):
    payment = await payment_manager.add_payment(trip_rider.rider_id, Decimal("150.00"), date.today())
    await payment_manager.wait_for_notifications()
    return payment


@pytest.fixture
async def random_admin(database) -> User:
    return await create_user(fake.user_name(), "correct horse battery")


@pytest.fixture
async def client(aiohttp_client, database, notifier) -> TestClient:
    app = build_app(notifier=notifier, init_database=False)  # we get the database from a fixture
    return await aiohttp_client(app)


@pytest.fixture
def auth_headers(client, random_admin):
    token = client.app["token_verifier"].issue_token(random_admin)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def api_trip(client) -> Trip:
    """Creates the active trip through the app's own trip manager."""
    trip_manager = client.app["trip_manager"]
    trip = await trip_manager.create_trip("Coach Trip", date(2026, 3, 1), date(2026, 3, 3), "1000", "100", 10)
    return await trip_manager.activate_trip(trip.id)


@pytest.fixture
async def api_rider(client, api_trip) -> Rider:
    """Adds a rider with two seats to the app's active trip."""
    rider, _ = await client.app["rider_manager"].add_rider(random_rider_info(), seats=2)
    return rider


@pytest.fixture
def rider_info():
    return random_rider_info()
