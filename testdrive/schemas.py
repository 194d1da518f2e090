# testdrive/schemas.py
"""Request/response bodies for every endpoint.

JSON uses camelCase keys (``isAvailable``, ``fuelType``); snake_case is
accepted on input as well.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import FuelType, RequestStatus, Role, Transmission

MIN_YEAR = 1900


def max_year() -> int:
    # next year's models are allowed
    return datetime.now().year + 1


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class MessageOut(CamelModel):
    message: str


# --- users -----------------------------------------------------------------

class SocialMedia(CamelModel):
    website: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None


class JournalistInfo(CamelModel):
    publication: Optional[str] = None
    specialization: Optional[str] = None


class OwnerInfo(CamelModel):
    business_name: Optional[str] = None


class RegisterIn(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: str


class LoginIn(CamelModel):
    email: str
    password: str


class FirebaseAuthIn(CamelModel):
    firebase_token: Optional[str] = None
    role: Optional[str] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    journalist_info: Optional[JournalistInfo] = None
    owner_info: Optional[OwnerInfo] = None


class UserSummary(CamelModel):
    id: str
    name: str
    email: str


class AuthOut(CamelModel):
    id: str
    name: str
    email: str
    role: Role
    token: str


class PublicProfileOut(CamelModel):
    id: str
    name: str
    role: Role
    location: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    journalist_info: Optional[JournalistInfo] = None
    owner_info: Optional[OwnerInfo] = None
    created_at: Optional[datetime] = None


class ProfileOut(PublicProfileOut):
    email: str
    phone: Optional[str] = None
    updated_at: Optional[datetime] = None


class ProfileUpdateOut(ProfileOut):
    token: str


# --- cars ------------------------------------------------------------------

class CarFields(CamelModel):
    @field_validator("year", check_fields=False)
    @classmethod
    def year_in_range(cls, v):
        if v is not None and not MIN_YEAR <= v <= max_year():
            raise ValueError(f"Year must be between {MIN_YEAR} and {max_year()}")
        return v


class CarCreate(CarFields):
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: int
    color: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    mileage: int = Field(..., ge=0)
    transmission: Transmission
    fuel_type: FuelType
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)


class CarUpdate(CarFields):
    make: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = None
    color: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    mileage: Optional[int] = Field(None, ge=0)
    transmission: Optional[Transmission] = None
    fuel_type: Optional[FuelType] = None
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    is_available: Optional[bool] = None


class CarSummary(CamelModel):
    id: str
    make: str
    model: str
    year: int
    location: str
    image: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    is_available: bool

    @field_validator("images", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class CarOut(CarSummary):
    owner_id: str
    owner: Optional[UserSummary] = None
    color: str
    price: float
    mileage: int
    transmission: Transmission
    fuel_type: FuelType
    description: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ToggleAvailabilityOut(CamelModel):
    message: str
    is_available: bool
    car: CarOut


# --- test-drive requests ---------------------------------------------------

class RequestCreate(CamelModel):
    car_id: str
    requested_date_time: Optional[datetime] = None
    message: Optional[str] = None


class StatusUpdate(CamelModel):
    status: Optional[str] = None
    owner_response: Optional[str] = None


class RequestOut(CamelModel):
    id: str
    journalist_id: str
    car_id: str
    owner_id: str
    requested_date_time: Optional[datetime] = None
    message: Optional[str] = None
    status: RequestStatus
    owner_response: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    journalist: Optional[UserSummary] = None
    owner: Optional[UserSummary] = None
    car: Optional[CarSummary] = None


class RequestDetailOut(RequestOut):
    car: Optional[CarOut] = None


class WithdrawOut(CamelModel):
    message: str
    request_id: str
    car_id: str


# --- testimonials ----------------------------------------------------------

class TestimonialCreate(CamelModel):
    name: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class TestimonialUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    role: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, min_length=1)
    text: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class TestimonialOut(CamelModel):
    id: str
    name: str
    role: str
    image: str
    text: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
