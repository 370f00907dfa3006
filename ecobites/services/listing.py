# ecobites/services/listing.py
import asyncio
import logging
from datetime import datetime, timezone
from math import asin, cos, radians, sin, sqrt
from typing import Any, Dict, List, Literal, Optional, Tuple

from ecobites.core.dates import as_utc
from ecobites.repos.base import DonationKind

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

SortKey = Literal["expiry", "distance"]
Coords = Tuple[float, float]

DETAIL_ROUTES = {
    "food": "/api/donor/get-donor/{id}",
    "non_food": "/api/donor/get-nondonor/{id}",
}

LOCATION_ERROR = "Requester location unavailable; results are not ranked by distance."


def haversine_km(lat1, lng1, lat2, lng2) -> float:
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat/2)**2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng/2)**2
    c = 2 * asin(sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c


def parse_coords(lat: Any, lng: Any) -> Optional[Coords]:
    """(lat, lng) as floats, or None if either is missing or out of range."""
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return lat, lng


def donation_coords(doc: Dict[str, Any]) -> Optional[Coords]:
    loc = doc.get("location") or {}
    return parse_coords(loc.get("latitude"), loc.get("longitude"))


def unexpired_items(items: List[Dict[str, Any]], now: datetime) -> List[Dict[str, Any]]:
    # items without an expiry date never expire
    out = []
    for it in items:
        exp = as_utc(it.get("expiry_date"))
        if exp is None or exp >= now:
            out.append(it)
    return out


def drop_expired_food(donations: List[Dict[str, Any]], now: datetime) -> List[Dict[str, Any]]:
    """
    Prune expired food items; a donation left with no items is dropped.
    The input documents are not modified.
    """
    kept = []
    for d in donations:
        items = unexpired_items(d.get("food_items") or [], now)
        if items:
            kept.append({**d, "food_items": items})
    return kept


def nearest_expiry(doc: Dict[str, Any], kind: DonationKind) -> Optional[datetime]:
    if kind == "food":
        dates = [as_utc(it.get("expiry_date")) for it in doc.get("food_items") or []]
        dates = [x for x in dates if x is not None]
        if dates:
            return min(dates)
    return as_utc(doc.get("available_until"))


def _last_if_missing(value):
    return (value is None, value if value is not None else 0)


def sort_entries(entries: List[Dict[str, Any]], kind: DonationKind, sort: SortKey) -> List[Dict[str, Any]]:
    if sort == "distance":
        return sorted(entries, key=lambda e: _last_if_missing(e.get("distance_km")))
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        entries,
        key=lambda e: (nearest_expiry(e, kind) is None, nearest_expiry(e, kind) or epoch),
    )


async def _resolve(doc: Dict[str, Any], geocoder) -> Optional[Coords]:
    coords = donation_coords(doc)
    if coords is not None:
        return coords
    return await geocoder.locate(doc.get("address"))


async def rank_donations(
    donations: List[Dict[str, Any]],
    kind: DonationKind,
    geocoder,
    origin: Optional[Coords] = None,
    sort: Optional[SortKey] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the requester-facing view of available donations.

    Without an origin, nothing is geocoded and no entry carries a distance;
    a location error is reported and entries are ordered by expiry.
    With an origin, donations whose coordinates cannot be resolved (no
    coordinates and the address fails to geocode) are left out.
    """
    now = as_utc(now) or datetime.now(timezone.utc)
    sort = sort or ("expiry" if kind == "food" else "distance")

    if kind == "food":
        donations = drop_expired_food(donations, now)

    location_error = None
    entries: List[Dict[str, Any]] = []
    if origin is None:
        location_error = LOCATION_ERROR
        entries = [{**d, "distance_km": None} for d in donations]
    else:
        resolved = await asyncio.gather(*(_resolve(d, geocoder) for d in donations))
        for d, coords in zip(donations, resolved):
            if coords is None:
                logger.info("Leaving %s donation %s out of ranking: no coordinates", kind, d.get("id"))
                continue
            dist = haversine_km(origin[0], origin[1], coords[0], coords[1])
            entries.append({**d, "distance_km": round(dist, 2)})

    effective = sort if origin is not None else "expiry"
    for e in entries:
        e["detail_url"] = DETAIL_ROUTES[kind].format(id=e.get("id"))

    return {
        "kind": kind,
        "sort": effective,
        "location_error": location_error,
        "count": len(entries),
        "items": sort_entries(entries, kind, effective),
    }
