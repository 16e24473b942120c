"""
Review schemas
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class ReviewCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    booking_id: int
    rating: int = Field(..., ge=1, le=5)
    feedback: str = Field(..., min_length=1, max_length=1000)


class ReviewReply(BaseModel):
    reply_text: str = Field(..., min_length=1, max_length=500, alias="replyText")

    model_config = ConfigDict(populate_by_name=True)


class ReviewApproval(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_approved: Optional[bool] = None
    is_displayed_on_homepage: Optional[bool] = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_id: int
    user_id: int
    customer_name: str
    service_category: str
    service_name: str
    rating: int
    feedback: str
    is_approved: bool
    is_displayed_on_homepage: bool
    reply_text: Optional[str] = None
    replied_at: Optional[datetime] = None
    created_at: datetime
