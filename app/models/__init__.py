"""Database models for the AX TEAM platform"""
from app.models.base import Base
from app.models.user import User, UserRole
from app.models.service import Service, ServiceCategory
from app.models.booking import Booking, BookingItem, BookingStatus
from app.models.review import Review
from app.models.support import SupportRequest, SupportStatus, SupportPriority, SupportCategory
from app.models.gallery import GalleryItem, GalleryCategory, GallerySection, MediaType

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Service",
    "ServiceCategory",
    "Booking",
    "BookingItem",
    "BookingStatus",
    "Review",
    "SupportRequest",
    "SupportStatus",
    "SupportPriority",
    "SupportCategory",
    "GalleryItem",
    "GalleryCategory",
    "GallerySection",
    "MediaType",
]
