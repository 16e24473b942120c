"""
Support request schemas
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from app.models.support import SupportCategory, SupportPriority, SupportStatus
from app.schemas.auth import validate_phone


class SupportRequestCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: Optional[str] = None
    subject: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=10, max_length=2000)
    category: SupportCategory = SupportCategory.GENERAL
    priority: SupportPriority = SupportPriority.MEDIUM

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        return validate_phone(v) if v else None


class SupportRequestUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: Optional[SupportStatus] = None
    priority: Optional[SupportPriority] = None
    admin_notes: Optional[str] = Field(None, max_length=1000)
    assigned_to_id: Optional[int] = None


class SupportRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    category: SupportCategory
    priority: SupportPriority
    status: SupportStatus
    assigned_to_id: Optional[int] = None
    admin_notes: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolved_by_id: Optional[int] = None
    created_at: datetime
