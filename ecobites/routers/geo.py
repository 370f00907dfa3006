# ecobites/routers/geo.py
from fastapi import APIRouter, Depends, HTTPException, Query

from ecobites.core.geocode import GeocodeError
from ecobites.deps import get_geocoder

router = APIRouter(prefix="/api/geo", tags=["geo"])


@router.get("/reverse")
async def reverse(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    geocoder=Depends(get_geocoder),
):
    try:
        address = await geocoder.reverse(lat, lng)
    except GeocodeError as ex:
        raise HTTPException(404, str(ex))
    return {"latitude": lat, "longitude": lng, "address": address}


@router.get("/search")
async def search(q: str = Query(..., min_length=1), geocoder=Depends(get_geocoder)):
    try:
        lat, lng = await geocoder.search(q)
    except GeocodeError as ex:
        raise HTTPException(404, str(ex))
    return {"query": q, "latitude": lat, "longitude": lng}
