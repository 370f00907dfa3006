# ecobites/repos/base.py
from datetime import datetime, timezone
from typing import Literal

DonationKind = Literal["food", "non_food"]

# collection per donation kind
DONATION_COLLECTIONS = {
    "food": "donors",
    "non_food": "nonfooddonations",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def collection_for(kind: DonationKind) -> str:
    try:
        return DONATION_COLLECTIONS[kind]
    except KeyError:
        raise ValueError(f"Unknown donation kind: {kind!r}")
