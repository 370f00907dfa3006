import pytest
from fastapi import HTTPException

from ecobites.core.security import create_token, decode_token, hash_password, token_claims, verify_password


def test_password_hashing():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("s3cret", "")


def test_claims_prefer_city_and_state():
    claims = token_claims({"id": "u1", "location": {"city": "Pune", "state": "MH", "latitude": 1.0}})
    assert claims == {"sub": "u1", "id": "u1", "city": "Pune", "state": "MH"}


def test_claims_fall_back_to_coordinates():
    claims = token_claims({"id": "u1", "location": {"latitude": 18.5, "longitude": 73.8}})
    assert claims["latitude"] == 18.5 and claims["longitude"] == 73.8
    assert token_claims({"id": "u2", "location": None})["latitude"] is None


def test_token_round_trip_and_expiry():
    data = decode_token(create_token({"sub": "u1"}))
    assert data["sub"] == "u1"

    with pytest.raises(HTTPException) as exc:
        decode_token(create_token({"sub": "u1"}, minutes=-1))
    assert exc.value.status_code == 401
    assert exc.value.detail == "Token expired"
