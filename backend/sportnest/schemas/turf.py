"""Pydantic v2 request/response schemas for turf, review and favorite endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from sportnest.models.turf import LOCATIONS, SPORTS

_LOCATION_PATTERN = "^(" + "|".join(LOCATIONS) + ")$"
_SPORT_PATTERN = "^(" + "|".join(SPORTS) + ")$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TurfCreate(BaseModel):
    """Schema for listing a new turf."""

    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., pattern=_LOCATION_PATTERN)
    address: str = Field(..., min_length=1, max_length=512)
    sport: str = Field(..., pattern=_SPORT_PATTERN)
    price: Decimal = Field(..., ge=0)
    description: str | None = None
    images: list[str] = Field(default_factory=list, max_length=5)


class TurfUpdate(BaseModel):
    """Schema for partially updating a turf. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, pattern=_LOCATION_PATTERN)
    address: str | None = Field(None, min_length=1, max_length=512)
    sport: str | None = Field(None, pattern=_SPORT_PATTERN)
    price: Decimal | None = Field(None, ge=0)
    description: str | None = None
    images: list[str] | None = Field(None, max_length=5)


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ReviewResponse(BaseModel):
    id: uuid.UUID
    turf_id: uuid.UUID
    user_id: uuid.UUID
    rating: int
    comment: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TurfResponse(BaseModel):
    """Public turf information returned from the API."""

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    location: str
    address: str
    sport: str
    price: Decimal
    description: str | None = None
    images: list[str] | None = None
    average_rating: Decimal | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TurfDetailResponse(TurfResponse):
    """Turf with its reviews, newest first."""

    reviews: list[ReviewResponse] = []


class TurfListResponse(BaseModel):
    """Paginated list of turfs."""

    items: list[TurfResponse]
    total: int


class FavoriteResponse(BaseModel):
    id: uuid.UUID
    turf_id: uuid.UUID
    created_at: datetime
    turf: TurfResponse

    model_config = ConfigDict(from_attributes=True)
