"""
Service catalog schemas
"""
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional, List
from datetime import datetime
from decimal import Decimal
import re

from app.models.service import ServiceCategory

THUMBNAIL_PATTERN = re.compile(r"^https?://.+\.(jpg|jpeg|png|webp|gif)(\?.*)?$", re.IGNORECASE)
SERVICE_CATEGORIES = [c.value for c in ServiceCategory]


def _check_category(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SERVICE_CATEGORIES:
        raise ValueError(f"Category must be one of: {', '.join(SERVICE_CATEGORIES)}")
    return value


def _check_features(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return value
    cleaned = [f.strip() for f in value if f and f.strip()]
    for feature in cleaned:
        if len(feature) > 100:
            raise ValueError("Feature description cannot exceed 100 characters")
    return cleaned


def _check_thumbnail(value: Optional[str]) -> Optional[str]:
    if value and not THUMBNAIL_PATTERN.match(value):
        raise ValueError("Please provide a valid image URL")
    return value


Category = Annotated[str, AfterValidator(_check_category)]
Features = Annotated[List[str], AfterValidator(_check_features)]
ThumbnailUrl = Annotated[Optional[str], AfterValidator(_check_thumbnail)]


class ServiceCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=3, max_length=100)
    category: Category
    description: str = Field(..., min_length=10, max_length=1000)
    price_min: Decimal = Field(..., ge=0)
    price_max: Decimal = Field(..., ge=0)
    currency: str = Field("INR", max_length=10)
    thumbnail_url: ThumbnailUrl = None
    duration: str = Field("2-4 hours", max_length=50)
    features: Features = Field(default_factory=list)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def check_price_range(self):
        if self.price_min > self.price_max:
            raise ValueError("Minimum price cannot be greater than maximum price")
        return self


class ServiceUpdate(BaseModel):
    """Partial update; price range is re-checked against stored values in the route"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = Field(None, min_length=3, max_length=100)
    category: Optional[Category] = None
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    price_min: Optional[Decimal] = Field(None, ge=0)
    price_max: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=10)
    thumbnail_url: ThumbnailUrl = None
    duration: Optional[str] = Field(None, max_length=50)
    features: Optional[Features] = None
    is_active: Optional[bool] = None


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    description: str
    price_min: Decimal
    price_max: Decimal
    currency: str
    formatted_price_range: str
    thumbnail_url: Optional[str] = None
    duration: str
    features: Optional[List[str]] = None
    is_active: bool
    popularity: int
    average_rating: Decimal
    rating_count: int
    total_bookings: int
    created_at: datetime
