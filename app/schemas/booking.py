"""
Service booking schemas
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
import re

from app.schemas.auth import validate_phone

PINCODE_PATTERN = re.compile(r"^[0-9]{6}$")
TIME_24H_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
TIME_AMPM_PATTERN = re.compile(r"(AM|PM)")
TIME_PART_OF_DAY_PATTERN = re.compile(r"^(Morning|Afternoon|Evening|Night)", re.IGNORECASE)


def is_valid_time_slot(value: str) -> bool:
    """24-hour HH:MM, anything with AM/PM, or a part-of-day label"""
    return bool(
        TIME_24H_PATTERN.match(value)
        or TIME_AMPM_PATTERN.search(value)
        or TIME_PART_OF_DAY_PATTERN.match(value)
    )


class CamelModel(BaseModel):
    """Accepts both snake_case and camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddressIn(CamelModel):
    street: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=50)
    state: str = Field(..., min_length=1, max_length=50)
    pincode: str

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, v: str) -> str:
        v = v.strip()
        if not PINCODE_PATTERN.match(v):
            raise ValueError("Please enter a valid 6-digit pincode")
        return v


class LocationIn(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    formatted: Optional[str] = Field(None, alias="formattedAddress")
    place_id: Optional[str] = None
    captured_at: Optional[datetime] = None


class BookingServiceIn(CamelModel):
    """One requested service; snapshot fields are filled from the catalog when missing"""
    service_id: Optional[int] = None
    service_name: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    price: Optional[str] = Field(None, max_length=50)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v):
        if v is None:
            return v
        return str(v)


class BookingCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: str
    address: AddressIn
    location: Optional[LocationIn] = None
    services: List[BookingServiceIn] = Field(..., min_length=1)
    service_date: date = Field(..., alias="date")
    time_slot: str = Field(..., alias="time", min_length=1, max_length=50)
    work_description: Optional[str] = Field(None, max_length=1000)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("time_slot")
    @classmethod
    def check_time(cls, v: str) -> str:
        if not is_valid_time_slot(v.strip()):
            raise ValueError("Please enter a valid time format (HH:MM, AM/PM or Morning/Afternoon/Evening/Night)")
        return v


class BookingStatusUpdate(CamelModel):
    # Plain string so an unknown label is reported by the booking service
    status: str
    technician_notes: Optional[str] = Field(None, max_length=500)
    admin_notes: Optional[str] = Field(None, max_length=500)
    estimated_cost: Optional[Decimal] = Field(None, ge=0)
    actual_cost: Optional[Decimal] = Field(None, ge=0)


class BookingFeedback(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=500)


class BookingReply(CamelModel):
    reply: str = Field(..., min_length=1, max_length=1000)


class TechnicianAssign(CamelModel):
    technician_name: str = Field(..., min_length=1, max_length=100)
    technician_phone: str = Field(..., min_length=1)
    technician_email: Optional[EmailStr] = None

    @field_validator("technician_phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        return validate_phone(v)


class BookingItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    service_id: Optional[int] = None
    service_name: str
    category: str
    estimated_price: Optional[str] = None


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_code: str
    user_id: int
    name: str
    email: str
    phone: str
    address: dict
    location: Optional[dict] = None
    items: List[BookingItemResponse]
    service_date: date
    time_slot: str
    work_description: Optional[str] = None
    status: str
    completed_at: Optional[datetime] = None
    estimated_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    technician_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    technician_name: Optional[str] = None
    technician_phone: Optional[str] = None
    technician_email: Optional[str] = None
    technician_assigned_at: Optional[datetime] = None
    has_technician: bool = False
    rating: Optional[int] = None
    feedback: Optional[str] = None
    admin_reply: Optional[str] = None
    admin_reply_at: Optional[datetime] = None
    customer_notified: bool = False
    admin_notified: bool = False
    technician_notified: bool = False
    last_notification_sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return v.value if hasattr(v, "value") else v
