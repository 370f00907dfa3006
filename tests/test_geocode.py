import httpx
import pytest

from ecobites.core.geocode import GeocodeError, Geocoder, address_query
from ecobites.services.listing import rank_donations

pytestmark = pytest.mark.anyio


def make_geocoder(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Geocoder(base_url="https://geo.test", client=client)


@pytest.mark.parametrize("address,expected", [
    ({"street": "FC Road", "city": "Pune", "state": "MH", "country": "India"}, "FC Road Pune, MH, India"),
    ({"city": "Pune", "state": "MH", "country": "India"}, "Pune, MH, India"),
    ({"street": "FC Road", "city": "Pune", "state": "MH"}, None),
    ({}, None),
    (None, None),
])
def test_address_query(address, expected):
    assert address_query(address) == expected


async def test_search_parses_first_result():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["q"] = request.url.params["q"]
        return httpx.Response(200, json=[{"lat": "18.52", "lon": "73.85"}, {"lat": "0", "lon": "0"}])

    geocoder = make_geocoder(handler)
    assert await geocoder.search("Pune, MH, India") == (18.52, 73.85)
    assert seen == {"path": "/search", "q": "Pune, MH, India"}
    await geocoder.aclose()


async def test_search_failures_raise_geocode_error():
    empty = make_geocoder(lambda request: httpx.Response(200, json=[]))
    with pytest.raises(GeocodeError):
        await empty.search("Atlantis")
    with pytest.raises(GeocodeError):
        await empty.search("   ")

    broken = make_geocoder(lambda request: httpx.Response(503))
    with pytest.raises(GeocodeError):
        await broken.search("Pune")


async def test_locate_is_best_effort():
    geocoder = make_geocoder(lambda request: httpx.Response(500))
    assert await geocoder.locate({"city": "Pune", "state": "MH", "country": "India"}) is None
    assert await geocoder.locate({"city": "Pune"}) is None


async def test_reverse_maps_nominatim_address():
    def handler(request):
        assert request.url.path == "/reverse"
        return httpx.Response(200, json={
            "display_name": "FC Road, Pune",
            "address": {"road": "FC Road", "city": "Pune", "state": "Maharashtra",
                        "postcode": "411004", "country": "India"},
        })

    address = await make_geocoder(handler).reverse(18.52, 73.85)
    assert address == {
        "street": "FC Road",
        "city": "Pune",
        "state": "Maharashtra",
        "postal_code": "411004",
        "country": "India",
        "display_name": "FC Road, Pune",
    }


async def test_geo_endpoints(test_client, geocoder):
    geocoder.places["Pune, MH, India"] = (18.52, 73.85)

    r = await test_client.get("/api/geo/search", params={"q": "Pune, MH, India"})
    assert r.status_code == 200
    assert r.json() == {"query": "Pune, MH, India", "latitude": 18.52, "longitude": 73.85}

    r = await test_client.get("/api/geo/reverse", params={"lat": 18.52, "lng": 73.85})
    assert r.status_code == 200
    assert r.json()["address"]["city"] == "Pune"

    assert (await test_client.get("/api/geo/search", params={"q": "Atlantis"})).status_code == 404
    assert (await test_client.get("/api/geo/reverse", params={"lat": 95, "lng": 0})).status_code == 400


@pytest.mark.parametrize("payload", [
    {"error": "Unable to geocode"},
    [{"display_name": "Pune"}],
    [{"lat": "north", "lon": "73.85"}],
    "ok",
])
async def test_search_rejects_malformed_replies(payload):
    geocoder = make_geocoder(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(GeocodeError):
        await geocoder.search("Pune, MH, India")


async def test_reverse_rejects_malformed_replies():
    geocoder = make_geocoder(lambda request: httpx.Response(200, json=[{"address": "Pune"}]))
    with pytest.raises(GeocodeError):
        await geocoder.reverse(18.52, 73.85)


async def test_error_reply_only_drops_the_unlocated_listing():
    geocoder = make_geocoder(lambda request: httpx.Response(200, json={"error": "Unable to geocode"}))
    donations = [
        {"id": "located", "food_items": [{"name": "rice", "expiry_date": None}],
         "location": {"latitude": 18.52, "longitude": 73.85}},
        {"id": "needs-lookup", "food_items": [{"name": "dal", "expiry_date": None}],
         "address": {"city": "Pune", "state": "MH", "country": "India"}},
    ]
    result = await rank_donations(donations, "food", geocoder, origin=(18.5, 73.8))
    assert [d["id"] for d in result["items"]] == ["located"]
