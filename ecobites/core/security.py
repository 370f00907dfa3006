# ecobites/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext

from ecobites.core.config import settings
from ecobites.deps import get_repo

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/signin")


def hash_password(password: str) -> str:
    return pwd_context.hash(password or "")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password or "", hashed)
    except (ValueError, TypeError):
        # empty or legacy hash formats
        return False


def token_claims(user: Dict[str, Any]) -> Dict[str, Any]:
    """Claims carried by a session token: the user id plus where they are."""
    claims: Dict[str, Any] = {"sub": user["id"], "id": user["id"]}
    loc = user.get("location") or {}
    if loc.get("city") and loc.get("state"):
        claims.update(city=loc["city"], state=loc["state"])
    else:
        claims.update(latitude=loc.get("latitude"), longitude=loc.get("longitude"))
    return claims


def create_token(payload: Dict[str, Any], minutes: Optional[int] = None) -> str:
    payload = dict(payload)
    ttl = minutes if minutes is not None else settings.access_ttl_min
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=ttl)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


async def get_current_user(token: str = Depends(oauth2_scheme), repo=Depends(get_repo)):
    data = decode_token(token)
    user = await repo.get_user(data.get("sub", ""))
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user
