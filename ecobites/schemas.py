# ecobites/schemas.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ecobites.core.dates import as_utc

# --------------------------
# Shared Submodels
# --------------------------
DonationType = Literal["free", "priced"]
Condition = Literal["New", "Used"]
RequestStatus = Literal["Pending", "Accepted", "Rejected"]


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class GeoPoint(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PlaceLocation(BaseModel):
    """Either coordinates or a city/state pair; both halves optional."""
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    city: Optional[str] = None
    state: Optional[str] = None


# --------------------------
# Users & Auth
# --------------------------
class SignupIn(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    location: Optional[PlaceLocation] = None


class SigninIn(BaseModel):
    email: EmailStr
    password: str


class UserOut(BaseModel):
    id: str
    username: str
    email: EmailStr
    location: Optional[PlaceLocation] = None
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None


class SigninOut(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserOut


# --------------------------
# Donations
# --------------------------
class FoodItem(BaseModel):
    type: Optional[str] = None
    name: str
    quantity: float = Field(..., gt=0)
    unit: Optional[str] = None
    expiry_date: Optional[datetime] = None

    @field_validator("expiry_date")
    @classmethod
    def utc_expiry_date(cls, v):
        return as_utc(v)


class NonFoodItem(BaseModel):
    type: str
    name: str
    condition: Condition
    quantity: int = Field(..., ge=1)
    price: Optional[float] = Field(None, ge=0)


class _PricedDonation(BaseModel):
    donation_type: DonationType = "free"
    price: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_price(self):
        if self.donation_type == "priced" and self.price is None:
            raise ValueError("price is required when donation_type is 'priced'")
        return self


class FoodDonationIn(_PricedDonation):
    name: str = Field(..., min_length=1)
    email: EmailStr
    contact_number: str = Field(..., min_length=1)
    address: Optional[Address] = None
    location: Optional[PlaceLocation] = None
    food_items: List[FoodItem] = Field(..., min_length=1)
    available_until: Optional[datetime] = None

    @field_validator("available_until")
    @classmethod
    def utc_available_until(cls, v):
        return as_utc(v)


class FoodDonationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    contact_number: Optional[str] = Field(None, min_length=1)
    address: Optional[Address] = None
    location: Optional[PlaceLocation] = None
    food_items: Optional[List[FoodItem]] = Field(None, min_length=1)
    available_until: Optional[datetime] = None
    donation_type: Optional[DonationType] = None
    price: Optional[float] = Field(None, ge=0)
    is_accepted: Optional[bool] = None

    @field_validator("available_until")
    @classmethod
    def utc_available_until(cls, v):
        return as_utc(v)


class FoodDonationOut(FoodDonationIn):
    id: str
    user_id: str
    is_accepted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NonFoodDonationIn(_PricedDonation):
    name: str = Field(..., min_length=1)
    email: EmailStr
    contact_number: str = Field(..., min_length=1)
    location: GeoPoint
    address: Optional[Address] = None
    non_food_items: List[NonFoodItem] = Field(..., min_length=1)
    available_until: datetime
    donation_type: DonationType

    @field_validator("available_until")
    @classmethod
    def utc_available_until(cls, v):
        return as_utc(v)


class NonFoodDonationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    contact_number: Optional[str] = Field(None, min_length=1)
    location: Optional[GeoPoint] = None
    address: Optional[Address] = None
    non_food_items: Optional[List[NonFoodItem]] = Field(None, min_length=1)
    available_until: Optional[datetime] = None
    donation_type: Optional[DonationType] = None
    price: Optional[float] = Field(None, ge=0)
    is_accepted: Optional[bool] = None

    @field_validator("available_until")
    @classmethod
    def utc_available_until(cls, v):
        return as_utc(v)


class NonFoodDonationOut(NonFoodDonationIn):
    id: str
    user_id: str
    is_accepted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --------------------------
# Requests
# --------------------------
class RequestIn(BaseModel):
    donor_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    contact_number: str = Field(..., min_length=1)
    address: Address
    location: Optional[GeoPoint] = None
    description: Optional[str] = None

    @field_validator("address")
    @classmethod
    def address_not_blank(cls, v: Address):
        if not any((value or "").strip() for value in v.model_dump().values()):
            raise ValueError("address needs at least one non-empty field")
        return v


class RequestOut(RequestIn):
    id: str
    donation_kind: Literal["food", "non_food"]
    user_id: Optional[str] = None
    status: RequestStatus = "Pending"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RequestStatusIn(BaseModel):
    status: Literal["Accepted", "Rejected"]
