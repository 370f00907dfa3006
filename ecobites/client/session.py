# ecobites/client/session.py
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import jwt


def decode_claims(token: str) -> Optional[Dict[str, Any]]:
    """Read a token's claims without verifying it; the server does that."""
    try:
        return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.InvalidTokenError:
        return None


@dataclass
class Session:
    """
    Who is signed in on this client. Passed explicitly to ApiClient and
    views instead of living in module-level state.
    """
    token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def user_id(self) -> Optional[str]:
        return self.user.get("id")

    @classmethod
    def from_token(cls, token: Optional[str]) -> "Session":
        claims = decode_claims(token) if token else None
        if not claims:
            return cls()
        return cls(token=token, user=claims)

    def sign_in(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        self.token = token
        self.user = dict(user) if user else (decode_claims(token) or {})

    def sign_out(self) -> None:
        self.token = None
        self.user = {}

    def save(self, path) -> None:
        path = Path(path)
        if self.token:
            path.write_text(json.dumps({"access_token": self.token}))
        elif path.exists():
            path.unlink()

    @classmethod
    def load(cls, path) -> "Session":
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            token = json.loads(path.read_text()).get("access_token")
        except (OSError, ValueError):
            return cls()
        return cls.from_token(token)
