# tests/conftest.py
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from ecobites.core.geocode import GeocodeError, address_query
from ecobites.deps import get_geocoder, get_repo
from ecobites.main import app
from ecobites.repos.inmemory import InMemoryRepo


class FakeGeocoder:
    """Answers from a fixed table of query -> (lat, lng); records every lookup."""

    def __init__(self, places=None):
        self.places = dict(places or {})
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        if query not in self.places:
            raise GeocodeError(f"No results for {query!r}")
        return self.places[query]

    async def locate(self, address):
        q = address_query(address)
        if q is None:
            return None
        try:
            return await self.search(q)
        except GeocodeError:
            return None

    async def reverse(self, lat, lng):
        for q, coords in self.places.items():
            if coords == (lat, lng):
                return {"street": None, "city": q.split(",")[0], "state": None,
                        "postal_code": None, "country": None, "display_name": q}
        raise GeocodeError(f"No address found for {lat},{lng}")

    async def aclose(self):
        pass


@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"


@pytest.fixture
def repo():
    return InMemoryRepo()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
async def test_client(repo, geocoder):
    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_geocoder] = lambda: geocoder
    try:
        async with LifespanManager(app):
            transport = ASGITransport(app=app, raise_app_exceptions=False)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def asha(test_client):
    """A registered, signed-in donor: (user dict, auth headers)."""
    r = await test_client.post("/api/auth/signup", json={
        "username": "Asha",
        "email": "asha@x.com",
        "password": "secret-1",
        "location": {"city": "Pune", "state": "Maharashtra"},
    })
    assert r.status_code == 201, r.text
    r = await test_client.post("/api/auth/signin", json={"email": "asha@x.com", "password": "secret-1"})
    assert r.status_code == 200, r.text
    data = r.json()
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


def food_donation(**overrides):
    body = {
        "name": "Asha",
        "email": "asha@x.com",
        "contact_number": "9000000001",
        "address": {"street": "FC Road", "city": "Pune", "state": "Maharashtra",
                    "postal_code": "411004", "country": "India"},
        "location": {"latitude": 18.5204, "longitude": 73.8567},
        "food_items": [{"type": "Cooked", "name": "Biryani", "quantity": 10, "unit": "plates",
                        "expiry_date": "2999-01-01"}],
        "available_until": "2999-01-02",
        "donation_type": "free",
    }
    body.update(overrides)
    return body


def non_food_donation(**overrides):
    body = {
        "name": "Asha",
        "email": "asha@x.com",
        "contact_number": "9000000001",
        "location": {"latitude": 18.5314, "longitude": 73.8446},
        "non_food_items": [{"type": "Clothing", "name": "Jackets", "condition": "Used", "quantity": 4}],
        "available_until": "2999-01-01",
        "donation_type": "free",
    }
    body.update(overrides)
    return body


def pickup_request(donor_id, **overrides):
    body = {
        "donor_id": donor_id,
        "name": "Ravi",
        "contact_number": "9000000002",
        "address": {"street": "JM Road", "city": "Pune", "state": "Maharashtra", "country": "India"},
        "description": "Community kitchen pickup",
    }
    body.update(overrides)
    return body
