from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from app.portal.constants import NATIONALITY_LOCAL
from app.portal.validation import BaseSchema, split_list

PropertyType = Literal["RESIDENTIAL", "COMMERCIAL", "LAND", "VEHICLE", "EQUIPMENT", "OTHER"]
PropertyStatus = Literal["AVAILABLE", "UNDER_AUCTION", "SOLD", "RESERVED", "WITHDRAWN"]
InterestStatus = Literal["PENDING", "UNDER_REVIEW", "APPROVED", "REJECTED", "WITHDRAWN"]


def _max_year() -> int:
    return date.today().year


class PropertyFilters(BaseSchema):
    type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    region: Optional[str] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1, le=100)


class PropertyCreate(BaseSchema):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20)
    type: PropertyType
    status: PropertyStatus = "AVAILABLE"
    region: str = Field(min_length=1)
    district: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=500)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    estimated_value: float = Field(ge=0)
    minimum_bid: Optional[float] = Field(default=None, ge=0)
    currency: str = "SLE"
    auction_date: Optional[date] = None
    auction_venue: Optional[str] = None
    auction_end_date: Optional[date] = None
    size: Optional[str] = None
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    year_built: Optional[int] = Field(default=None, ge=1800)
    features: list[str] = Field(default_factory=list)
    case_reference: Optional[str] = None
    former_owner: Optional[str] = None
    recovery_date: Optional[date] = None
    is_featured: bool = False
    publish: bool = False

    @field_validator("features", mode="before")
    @classmethod
    def _split_features(cls, v):
        return split_list(v)

    @field_validator("year_built")
    @classmethod
    def _year_not_future(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v > _max_year():
            raise ValueError(f"Year built cannot be after {_max_year()}")
        return v


class PropertyUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20)
    type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    region: Optional[str] = Field(default=None, min_length=1)
    district: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=500)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    estimated_value: Optional[float] = Field(default=None, ge=0)
    minimum_bid: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    auction_date: Optional[date] = None
    auction_venue: Optional[str] = None
    auction_end_date: Optional[date] = None
    size: Optional[str] = None
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    year_built: Optional[int] = Field(default=None, ge=1800)
    features: Optional[list[str]] = None
    case_reference: Optional[str] = None
    former_owner: Optional[str] = None
    recovery_date: Optional[date] = None
    is_featured: Optional[bool] = None
    publish: Optional[bool] = None

    @field_validator("features", mode="before")
    @classmethod
    def _split_features(cls, v):
        return split_list(v)

    @field_validator("year_built")
    @classmethod
    def _year_not_future(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v > _max_year():
            raise ValueError(f"Year built cannot be after {_max_year()}")
        return v


class ExpressionOfInterestCreate(BaseSchema):
    full_name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=8, max_length=20)
    organization: Optional[str] = Field(default=None, max_length=200)
    address: Optional[str] = Field(default=None, max_length=500)
    nationality: str = Field(min_length=1)
    nin: Optional[str] = None
    passport_number: Optional[str] = None
    intended_use: Optional[str] = Field(default=None, max_length=500)
    proposed_amount: Optional[float] = Field(default=None, ge=0)
    message: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _identity_document(self) -> "ExpressionOfInterestCreate":
        if self.nationality == NATIONALITY_LOCAL:
            if not self.nin or len(self.nin) < 8:
                raise ValueError("NIN must be at least 8 characters")
        elif not self.passport_number or len(self.passport_number) < 5:
            raise ValueError("Passport number must be at least 5 characters")
        return self


class InterestStatusUpdate(BaseSchema):
    status: InterestStatus
    admin_notes: Optional[str] = Field(default=None, max_length=5000)
