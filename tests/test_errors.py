import pytest

from ecobites.deps import get_repo
from ecobites.main import app
from ecobites.repos.inmemory import InMemoryRepo

pytestmark = pytest.mark.anyio


class BrokenRepo(InMemoryRepo):
    async def list_donations(self, kind, available_only=True):
        raise RuntimeError("boom")


async def test_unexpected_error_is_500_with_raw_message(test_client):
    app.dependency_overrides[get_repo] = BrokenRepo
    r = await test_client.get("/api/donor/donorform")
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "boom", "statusCode": 500}


async def test_unknown_route_uses_the_same_error_body(test_client):
    r = await test_client.get("/api/nowhere")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Not Found", "statusCode": 404}
