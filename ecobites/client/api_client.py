# ecobites/client/api_client.py
from typing import Any, Dict, Optional

import requests

from ecobites.client.session import Session


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def with_numeric_quantities(donation: Dict[str, Any], field: str, cast) -> Dict[str, Any]:
    """
    Copy of a donation form with item quantities as numbers. Form inputs
    arrive as text ("2"); anything that is not a number raises ValueError
    before the form is sent.
    """
    items = []
    for it in donation.get(field) or []:
        qty = it.get("quantity")
        if isinstance(qty, str):
            try:
                qty = cast(qty.strip())
            except ValueError:
                raise ValueError(f"quantity must be a number, got {qty!r}")
        items.append({**it, "quantity": qty})
    return {**donation, field: items}


class ApiClient:
    def __init__(self, base_url: str, session: Optional[Session] = None, timeout: float = 15):
        self.base_url = base_url.rstrip("/")
        self.session = session or Session()
        self.timeout = timeout

    def headers(self):
        h = {"Accept": "application/json"}
        if self.session.token:
            h["Authorization"] = f"Bearer {self.session.token}"
        return h

    def _call(self, method: str, path: str, **kwargs) -> Any:
        r = requests.request(
            method,
            f"{self.base_url}{path}",
            headers=self.headers(),
            timeout=self.timeout,
            **kwargs,
        )
        try:
            data = r.json()
        except ValueError:
            data = None
        if not r.ok:
            message = data.get("message") if isinstance(data, dict) else None
            raise ApiError(r.status_code, message or r.reason or "Request failed")
        return data

    # ---- auth ----
    def signup(self, username: str, email: str, password: str, location: Optional[Dict] = None):
        body = {"username": username, "email": email, "password": password, "location": location}
        return self._call("POST", "/api/auth/signup", json=body)

    def signin(self, email: str, password: str) -> Session:
        data = self._call("POST", "/api/auth/signin", json={"email": email, "password": password})
        self.session.sign_in(data["token"], data.get("user"))
        return self.session

    def update_profile(self, old_password: str, username: Optional[str] = None,
                       new_password: Optional[str] = None, picture_path: Optional[str] = None):
        form = {"old_password": old_password}
        if username:
            form["username"] = username
        if new_password:
            form["new_password"] = new_password
        if not picture_path:
            data = self._call("PUT", "/api/auth/update", data=form)
        else:
            ctype = "image/png" if picture_path.lower().endswith(".png") else "image/jpeg"
            with open(picture_path, "rb") as fh:
                files = {"profile_picture": (picture_path.rsplit("/", 1)[-1], fh, ctype)}
                data = self._call("PUT", "/api/auth/update", data=form, files=files)
        self.session.user.update(data.get("user") or {})
        return data

    def me(self):
        return self._call("GET", "/api/auth/user")

    # ---- donations ----
    def donate_food(self, donation: Dict[str, Any]):
        body = with_numeric_quantities(donation, "food_items", float)
        return self._call("POST", "/api/donor/donorform", json=body)

    def donate_non_food(self, donation: Dict[str, Any]):
        body = with_numeric_quantities(donation, "non_food_items", int)
        return self._call("POST", "/api/donor/nfdonorform", json=body)

    def food_donation(self, donation_id: str):
        return self._call("GET", f"/api/donor/get-donor/{donation_id}")

    def non_food_donation(self, donation_id: str):
        return self._call("GET", f"/api/donor/get-nondonor/{donation_id}")

    def update_food_donation(self, donation_id: str, changes: Dict[str, Any]):
        return self._call("PUT", f"/api/donor/{donation_id}", json=changes)

    def my_donations(self):
        return self._call("GET", f"/api/donor/userdonations/{self.session.user_id}")

    def available(self, kind: str = "food", sort: Optional[str] = None,
                  lat: Optional[float] = None, lng: Optional[float] = None):
        params = {"kind": kind}
        if sort:
            params["sort"] = sort
        if lat is not None and lng is not None:
            params.update(lat=lat, lng=lng)
        return self._call("GET", "/api/donor/available", params=params)

    # ---- requests ----
    def request_pickup(self, donor_id: str, name: str, contact_number: str,
                       address: Dict[str, Any], kind: str = "food", **extra):
        path = "/api/donor/request" if kind == "food" else "/api/donor/request-nonfood"
        body = {"donor_id": donor_id, "name": name, "contact_number": contact_number,
                "address": address, **extra}
        return self._call("POST", path, json=body)

    def incoming_requests(self, owner_id: Optional[str] = None):
        return self._call("GET", f"/api/donor/requests/{owner_id or self.session.user_id}")

    def set_request_status(self, request_id: str, status: str):
        return self._call("PATCH", f"/api/donor/requests/{request_id}/status", json={"status": status})
