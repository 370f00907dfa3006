import jwt
import pytest
import requests

from ecobites.client.api_client import ApiClient, ApiError
from ecobites.client.session import Session


def make_token(**claims):
    return jwt.encode({"sub": "u1", "id": "u1", **claims}, "client-test-secret-0123456789abcdef", algorithm="HS256")


class FakeResponse:
    def __init__(self, status_code, payload, reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class Recorder:
    """Stands in for requests.request: logs calls, answers from a queue."""

    def __init__(self):
        self.calls = []
        self.replies = []

    def __call__(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.replies.pop(0)


@pytest.fixture
def http(monkeypatch):
    recorder = Recorder()
    monkeypatch.setattr(requests, "request", recorder)
    return recorder


def test_session_from_token_reads_claims():
    session = Session.from_token(make_token(city="Pune", state="MH"))
    assert session.is_authenticated
    assert session.user_id == "u1"
    assert session.user["city"] == "Pune"


def test_session_from_garbage_is_anonymous():
    assert not Session.from_token("not-a-jwt").is_authenticated
    assert not Session.from_token(None).is_authenticated


def test_session_persists_and_clears(tmp_path):
    path = tmp_path / "session.json"
    session = Session.from_token(make_token())
    session.save(path)
    restored = Session.load(path)
    assert restored.token == session.token
    assert restored.user_id == "u1"

    restored.sign_out()
    restored.save(path)
    assert not path.exists()
    assert not Session.load(path).is_authenticated


def test_signin_fills_session_and_authorizes_later_calls(http):
    token = make_token()
    http.replies = [
        FakeResponse(200, {"token": token, "user": {"id": "u1", "username": "Asha"}}),
        FakeResponse(200, []),
    ]
    client = ApiClient("http://api.test/")
    session = client.signin("asha@x.com", "pw")
    assert session is client.session
    assert session.user["username"] == "Asha"

    assert client.incoming_requests() == []
    method, url, kwargs = http.calls[-1]
    assert (method, url) == ("GET", "http://api.test/api/donor/requests/u1")
    assert kwargs["headers"]["Authorization"] == f"Bearer {token}"


def test_available_passes_location_only_when_complete(http):
    http.replies = [FakeResponse(200, {"items": []}), FakeResponse(200, {"items": []})]
    client = ApiClient("http://api.test")
    client.available(kind="non_food", lat=18.5, lng=73.8, sort="distance")
    client.available(lat=18.5)
    assert http.calls[0][2]["params"] == {"kind": "non_food", "sort": "distance", "lat": 18.5, "lng": 73.8}
    assert http.calls[1][2]["params"] == {"kind": "food"}
    assert "Authorization" not in http.calls[0][2]["headers"]


def test_request_pickup_routes_by_kind(http):
    http.replies = [FakeResponse(201, {"id": "r1"}), FakeResponse(201, {"id": "r2"})]
    client = ApiClient("http://api.test")
    client.request_pickup("d1", "Ravi", "900", {"city": "Pune"})
    client.request_pickup("d2", "Ravi", "900", {"city": "Pune"}, kind="non_food", description="chairs")
    assert http.calls[0][1].endswith("/api/donor/request")
    assert http.calls[1][1].endswith("/api/donor/request-nonfood")
    assert http.calls[1][2]["json"]["description"] == "chairs"


def test_error_body_becomes_api_error(http):
    http.replies = [
        FakeResponse(400, {"success": False, "message": "Email is not registered, please sign up"}, "Bad Request"),
        FakeResponse(502, None, "Bad Gateway"),
    ]
    client = ApiClient("http://api.test")
    with pytest.raises(ApiError) as exc:
        client.donate_food({"email": "x@x.com"})
    assert exc.value.status_code == 400
    assert exc.value.message == "Email is not registered, please sign up"

    with pytest.raises(ApiError) as exc:
        client.set_request_status("r1", "Accepted")
    assert exc.value.message == "Bad Gateway"


def test_donation_forms_send_numeric_quantities(http):
    http.replies = [FakeResponse(201, {"id": "d1"}), FakeResponse(201, {"id": "d2"})]
    client = ApiClient("http://api.test")
    client.donate_food({"food_items": [{"name": "Rice", "quantity": " 2.5 "}, {"name": "Dal", "quantity": 3}]})
    client.donate_non_food({"non_food_items": [{"name": "Chair", "quantity": "4"}]})
    assert [i["quantity"] for i in http.calls[0][2]["json"]["food_items"]] == [2.5, 3]
    assert http.calls[1][2]["json"]["non_food_items"][0]["quantity"] == 4


def test_non_numeric_quantity_is_refused_before_sending(http):
    client = ApiClient("http://api.test")
    with pytest.raises(ValueError, match="quantity must be a number"):
        client.donate_food({"food_items": [{"name": "Rice", "quantity": "2 boxes"}]})
    assert http.calls == []
