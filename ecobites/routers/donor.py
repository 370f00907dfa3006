# ecobites/routers/donor.py
import logging
from typing import List, Literal, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ecobites.deps import get_geocoder, get_repo
from ecobites.repos.base import DonationKind
from ecobites.schemas import (
    FoodDonationIn,
    FoodDonationOut,
    FoodDonationUpdate,
    NonFoodDonationIn,
    NonFoodDonationOut,
    NonFoodDonationUpdate,
    RequestIn,
    RequestOut,
    RequestStatusIn,
)
from ecobites.services.listing import parse_coords, rank_donations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/donor", tags=["donor"])

DonationIn = Union[FoodDonationIn, NonFoodDonationIn]
DonationUpdate = Union[FoodDonationUpdate, NonFoodDonationUpdate]


# ---------- Shared impl ----------
async def _create_donation(kind: DonationKind, body: DonationIn, repo) -> dict:
    owner = await repo.find_user_by_email(body.email)
    if not owner:
        raise HTTPException(400, "Email is not registered, please sign up")

    doc = body.model_dump()
    doc["user_id"] = owner["id"]
    if doc["donation_type"] == "free":
        doc["price"] = None
    saved = await repo.insert_donation(kind, doc)
    logger.info("Created %s donation %s for user %s", kind, saved["id"], owner["id"])
    return saved


async def _get_donation(kind: DonationKind, donation_id: str, repo) -> dict:
    doc = await repo.get_donation(kind, donation_id)
    if not doc:
        raise HTTPException(404, "Donation not found")
    return doc


async def _update_donation(kind: DonationKind, donation_id: str, body: DonationUpdate, repo) -> dict:
    existing = await _get_donation(kind, donation_id, repo)
    updates = body.model_dump(exclude_unset=True, exclude_none=True)

    donation_type = updates.get("donation_type", existing.get("donation_type", "free"))
    if donation_type == "free":
        updates["price"] = None
    elif updates.get("price", existing.get("price")) is None:
        raise HTTPException(400, "price is required when donation_type is 'priced'")

    saved = await repo.update_donation(kind, donation_id, updates)
    if not saved:
        raise HTTPException(404, "Donation not found")
    logger.info("Updated %s donation %s: %s", kind, donation_id, sorted(updates))
    return saved


async def _create_request(kind: DonationKind, body: RequestIn, repo) -> dict:
    donation = await repo.get_donation(kind, body.donor_id)
    if not donation:
        raise HTTPException(404, "Donor not found")

    doc = body.model_dump()
    doc.update(donation_kind=kind, user_id=donation.get("user_id"), status="Pending")
    saved = await repo.insert_request(doc)
    logger.info("Request %s submitted against %s donation %s", saved["id"], kind, body.donor_id)
    return saved


# ---------- Food donations ----------
@router.post("/donorform", status_code=status.HTTP_201_CREATED, response_model=FoodDonationOut)
async def create_food_donation(body: FoodDonationIn, repo=Depends(get_repo)):
    return await _create_donation("food", body, repo)


@router.get("/donorform", response_model=List[FoodDonationOut])
async def list_food_donations(repo=Depends(get_repo)):
    return await repo.list_donations("food")


# ---------- Listing ----------
@router.get("/available")
async def available(
    kind: DonationKind = Query("food"),
    sort: Optional[Literal["expiry", "distance"]] = Query(None),
    lat: Optional[str] = Query(None, description="Requester latitude"),
    lng: Optional[str] = Query(None, description="Requester longitude"),
    repo=Depends(get_repo),
    geocoder=Depends(get_geocoder),
):
    donations = await repo.list_donations(kind)
    return await rank_donations(donations, kind, geocoder, origin=parse_coords(lat, lng), sort=sort)


@router.get("/userdonations/{user_id}", response_model=List[FoodDonationOut])
async def user_food_donations(user_id: str, repo=Depends(get_repo)):
    return await repo.list_user_donations("food", user_id)


@router.get("/get-donor/{donation_id}", response_model=FoodDonationOut)
async def get_food_donation(donation_id: str, repo=Depends(get_repo)):
    return await _get_donation("food", donation_id, repo)


# ---------- Non-food donations ----------
@router.post("/nfdonorform", status_code=status.HTTP_201_CREATED, response_model=NonFoodDonationOut)
async def create_non_food_donation(body: NonFoodDonationIn, repo=Depends(get_repo)):
    return await _create_donation("non_food", body, repo)


@router.get("/nfdonorform", response_model=List[NonFoodDonationOut])
async def list_non_food_donations(repo=Depends(get_repo)):
    return await repo.list_donations("non_food")


@router.get("/usernonfooddonations/{user_id}", response_model=List[NonFoodDonationOut])
async def user_non_food_donations(user_id: str, repo=Depends(get_repo)):
    return await repo.list_user_donations("non_food", user_id)


@router.get("/get-nondonor/{donation_id}", response_model=NonFoodDonationOut)
async def get_non_food_donation(donation_id: str, repo=Depends(get_repo)):
    return await _get_donation("non_food", donation_id, repo)


@router.put("/nonfood/{donation_id}", response_model=NonFoodDonationOut)
async def update_non_food_donation(donation_id: str, body: NonFoodDonationUpdate, repo=Depends(get_repo)):
    return await _update_donation("non_food", donation_id, body, repo)


# ---------- Requests ----------
@router.post("/request", status_code=status.HTTP_201_CREATED, response_model=RequestOut)
async def create_food_request(body: RequestIn, repo=Depends(get_repo)):
    return await _create_request("food", body, repo)


@router.post("/request-nonfood", status_code=status.HTTP_201_CREATED, response_model=RequestOut)
async def create_non_food_request(body: RequestIn, repo=Depends(get_repo)):
    return await _create_request("non_food", body, repo)


@router.get("/request/{request_id}", response_model=RequestOut)
async def get_request(request_id: str, repo=Depends(get_repo)):
    doc = await repo.get_request(request_id)
    if not doc:
        raise HTTPException(404, "Request not found")
    return doc


@router.get("/requests/{owner_id}", response_model=List[RequestOut])
async def list_requests(owner_id: str, repo=Depends(get_repo)):
    # owner_id may be a donation id or the donor's user id
    return await repo.list_requests_for(owner_id)


@router.patch("/requests/{request_id}/status", response_model=RequestOut)
async def update_request_status(request_id: str, body: RequestStatusIn, repo=Depends(get_repo)):
    doc = await repo.update_request_status(request_id, body.status)
    if not doc:
        raise HTTPException(404, "Request not found")
    logger.info("Request %s -> %s", request_id, body.status)
    return doc


# ---------- Food donation by id (keep last: catch-all path) ----------
@router.get("/{donation_id}", response_model=FoodDonationOut)
async def get_food_donation_short(donation_id: str, repo=Depends(get_repo)):
    return await _get_donation("food", donation_id, repo)


@router.put("/{donation_id}", response_model=FoodDonationOut)
async def update_food_donation(donation_id: str, body: FoodDonationUpdate, repo=Depends(get_repo)):
    return await _update_donation("food", donation_id, body, repo)
