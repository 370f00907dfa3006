# ecobites/repos/inmemory.py
import copy
from typing import Dict, List, Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from ecobites.repos.base import DonationKind, collection_for, utcnow


def _id() -> str:
    return str(ObjectId())


def _newest_first(docs) -> List[dict]:
    return [copy.deepcopy(d) for d in sorted(docs, key=lambda d: (d["created_at"], d["id"]), reverse=True)]


class InMemoryRepo:
    """Dict-backed stand-in for MongoRepo; same method set, same document shapes."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.users_by_email: Dict[str, str] = {}
        self.donations: Dict[str, Dict[str, dict]] = {"donors": {}, "nonfooddonations": {}}
        self.requests: Dict[str, dict] = {}

    # Users
    async def create_user(self, doc: dict) -> dict:
        email = doc["email"]
        if email in self.users_by_email:
            raise DuplicateKeyError(f"E11000 duplicate key error: email {email}", code=11000)
        uid = _id()
        stored = {**copy.deepcopy(doc), "id": uid}
        stored.setdefault("created_at", utcnow())
        self.users[uid] = stored
        self.users_by_email[email] = uid
        return copy.deepcopy(stored)

    async def find_user_by_email(self, email: str) -> Optional[dict]:
        uid = self.users_by_email.get(email)
        return copy.deepcopy(self.users[uid]) if uid else None

    async def get_user(self, user_id: str) -> Optional[dict]:
        doc = self.users.get(user_id)
        return copy.deepcopy(doc) if doc else None

    async def update_user(self, user_id: str, updates: dict) -> Optional[dict]:
        doc = self.users.get(user_id)
        if not doc:
            return None
        doc.update(copy.deepcopy(updates))
        doc["updated_at"] = utcnow()
        return copy.deepcopy(doc)

    # Donations
    async def insert_donation(self, kind: DonationKind, doc: dict) -> dict:
        did = _id()
        now = utcnow()
        stored = {**copy.deepcopy(doc), "id": did}
        stored.setdefault("is_accepted", False)
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        self.donations[collection_for(kind)][did] = stored
        return copy.deepcopy(stored)

    async def list_donations(self, kind: DonationKind, available_only: bool = True) -> List[dict]:
        docs = self.donations[collection_for(kind)].values()
        return _newest_first(d for d in docs if not (available_only and d.get("is_accepted")))

    async def list_user_donations(self, kind: DonationKind, user_id: str) -> List[dict]:
        docs = self.donations[collection_for(kind)].values()
        return _newest_first(d for d in docs if d.get("user_id") == user_id)

    async def get_donation(self, kind: DonationKind, donation_id: str) -> Optional[dict]:
        doc = self.donations[collection_for(kind)].get(donation_id)
        return copy.deepcopy(doc) if doc else None

    async def update_donation(self, kind: DonationKind, donation_id: str, updates: dict) -> Optional[dict]:
        doc = self.donations[collection_for(kind)].get(donation_id)
        if not doc:
            return None
        doc.update(copy.deepcopy(updates))
        doc["updated_at"] = utcnow()
        return copy.deepcopy(doc)

    # Requests
    async def insert_request(self, doc: dict) -> dict:
        rid = _id()
        now = utcnow()
        stored = {**copy.deepcopy(doc), "id": rid}
        stored.setdefault("status", "Pending")
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        self.requests[rid] = stored
        return copy.deepcopy(stored)

    async def get_request(self, request_id: str) -> Optional[dict]:
        doc = self.requests.get(request_id)
        return copy.deepcopy(doc) if doc else None

    async def list_requests_for(self, owner_id: str) -> List[dict]:
        return _newest_first(
            r for r in self.requests.values()
            if owner_id in (r.get("donor_id"), r.get("user_id"))
        )

    async def update_request_status(self, request_id: str, status: str) -> Optional[dict]:
        doc = self.requests.get(request_id)
        if not doc:
            return None
        doc["status"] = status
        doc["updated_at"] = utcnow()
        return copy.deepcopy(doc)
