# ecobites/repos/mongo.py
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from ecobites.repos.base import DONATION_COLLECTIONS, DonationKind, collection_for, utcnow


def _oid(id_str: str) -> Optional[ObjectId]:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None


def _out(doc: Optional[dict]) -> Optional[dict]:
    """Normalize a stored document for callers: string "id" instead of "_id"."""
    if not doc:
        return None
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoRepo:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def ensure_indexes(self) -> None:
        async def ensure_index(col, keys, name: str, **kwargs):
            existing = [ix["name"] async for ix in col.list_indexes()]
            if name in existing:
                return
            await col.create_index(keys, name=name, **kwargs)

        await ensure_index(self.db.users, [("email", ASCENDING)], "email_1", unique=True)
        for name in DONATION_COLLECTIONS.values():
            await ensure_index(self.db[name], [("user_id", ASCENDING)], "user_id_1")
            await ensure_index(self.db[name], [("is_accepted", ASCENDING), ("created_at", DESCENDING)],
                               "is_accepted_1_created_at_-1")
        await ensure_index(self.db.requests, [("donor_id", ASCENDING)], "donor_id_1")
        await ensure_index(self.db.requests, [("user_id", ASCENDING)], "user_id_1")

    async def _find(self, col_name: str, query: dict) -> List[dict]:
        cur = self.db[col_name].find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        return [_out(d) async for d in cur]

    async def _update(self, col_name: str, doc_id: str, updates: dict) -> Optional[dict]:
        _id = _oid(doc_id)
        if _id is None:
            return None
        doc = await self.db[col_name].find_one_and_update(
            {"_id": _id},
            {"$set": {**updates, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return _out(doc)

    async def _get(self, col_name: str, doc_id: str) -> Optional[dict]:
        _id = _oid(doc_id)
        if _id is None:
            return None
        return _out(await self.db[col_name].find_one({"_id": _id}))

    # Users
    async def create_user(self, doc: dict) -> dict:
        doc = dict(doc)
        doc.setdefault("created_at", utcnow())
        res = await self.db.users.insert_one(doc)
        doc["_id"] = res.inserted_id
        return _out(doc)

    async def find_user_by_email(self, email: str) -> Optional[dict]:
        return _out(await self.db.users.find_one({"email": email}))

    async def get_user(self, user_id: str) -> Optional[dict]:
        return await self._get("users", user_id)

    async def update_user(self, user_id: str, updates: dict) -> Optional[dict]:
        return await self._update("users", user_id, updates)

    # Donations
    async def insert_donation(self, kind: DonationKind, doc: dict) -> dict:
        now = utcnow()
        doc = dict(doc)
        doc.setdefault("is_accepted", False)
        doc.setdefault("created_at", now)
        doc.setdefault("updated_at", now)
        res = await self.db[collection_for(kind)].insert_one(doc)
        doc["_id"] = res.inserted_id
        return _out(doc)

    async def list_donations(self, kind: DonationKind, available_only: bool = True) -> List[dict]:
        query = {"is_accepted": {"$ne": True}} if available_only else {}
        return await self._find(collection_for(kind), query)

    async def list_user_donations(self, kind: DonationKind, user_id: str) -> List[dict]:
        return await self._find(collection_for(kind), {"user_id": user_id})

    async def get_donation(self, kind: DonationKind, donation_id: str) -> Optional[dict]:
        return await self._get(collection_for(kind), donation_id)

    async def update_donation(self, kind: DonationKind, donation_id: str, updates: dict) -> Optional[dict]:
        return await self._update(collection_for(kind), donation_id, updates)

    # Requests
    async def insert_request(self, doc: dict) -> dict:
        now = utcnow()
        doc = dict(doc)
        doc.setdefault("status", "Pending")
        doc.setdefault("created_at", now)
        doc.setdefault("updated_at", now)
        res = await self.db.requests.insert_one(doc)
        doc["_id"] = res.inserted_id
        return _out(doc)

    async def get_request(self, request_id: str) -> Optional[dict]:
        return await self._get("requests", request_id)

    async def list_requests_for(self, owner_id: str) -> List[dict]:
        return await self._find("requests", {"$or": [{"donor_id": owner_id}, {"user_id": owner_id}]})

    async def update_request_status(self, request_id: str, status: str) -> Optional[dict]:
        return await self._update("requests", request_id, {"status": status})
