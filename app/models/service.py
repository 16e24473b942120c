"""Service catalog model"""
from sqlalchemy import Column, String, Text, Boolean, Integer, Numeric, JSON
import enum

from app.models.base import Base, TimestampMixin


class ServiceCategory(str, enum.Enum):
    """Catalog categories"""
    AC_SERVICES = "AC Services"
    APPLIANCE_SERVICES = "Appliance Services"
    ELECTRICAL_SERVICES = "Electrical Services"
    PLUMBING_SERVICES = "Plumbing Services"
    HOME_MAINTENANCE = "Home Maintenance"
    INTERIOR_SERVICES = "Interior Services"
    PAINTING_SERVICES = "Painting Services"
    CCTV_SERVICES = "CCTV Services"
    CLEANING_SERVICES = "Cleaning Services"
    GENERAL_REPAIRS = "General Repairs"


class Service(Base, TimestampMixin):
    """Offerable home service"""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    category = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=False)

    # Pricing
    price_min = Column(Numeric(10, 2), nullable=False, default=0)
    price_max = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="INR")

    # Details
    thumbnail_url = Column(String(500), nullable=True)
    duration = Column(String(50), nullable=False, default="2-4 hours")
    features = Column(JSON, nullable=True)  # Array of short feature strings
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Derived metrics, only ever changed with SQL expression updates
    popularity = Column(Integer, default=0, nullable=False)
    average_rating = Column(Numeric(3, 2), default=0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)
    total_bookings = Column(Integer, default=0, nullable=False)

    @property
    def formatted_price_range(self) -> str:
        symbol = {"INR": "₹", "USD": "$"}.get(self.currency, self.currency)
        return f"{symbol}{float(self.price_min or 0):,.0f} - {symbol}{float(self.price_max or 0):,.0f}"

    def __repr__(self):
        return f"<Service {self.name}>"
