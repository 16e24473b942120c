"""Service booking models"""
from sqlalchemy import (
    Column, String, Text, Numeric, Integer, ForeignKey, Date, DateTime, Boolean,
    Enum as SQLEnum, JSON,
)
from sqlalchemy.orm import backref, relationship
import enum

from app.models.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    """Service booking status"""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @classmethod
    def values(cls):
        return [s.value for s in cls]


ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS)
TERMINAL_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED)
DELETABLE_STATUSES = (BookingStatus.PENDING, BookingStatus.CANCELLED)


class Booking(Base, TimestampMixin):
    """Customer service request"""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    booking_code = Column(String(20), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Contact snapshot taken at booking time
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)

    # {street, city, state, pincode}
    address = Column(JSON, nullable=False)
    # {latitude, longitude, formatted, place_id, captured_at}
    location = Column(JSON, nullable=True)

    # Scheduling
    service_date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(50), nullable=False)
    work_description = Column(Text, nullable=True)

    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.PENDING, index=True)
    completed_at = Column(DateTime, nullable=True)

    # Costs & notes
    estimated_cost = Column(Numeric(10, 2), nullable=True)
    actual_cost = Column(Numeric(10, 2), nullable=True)
    technician_notes = Column(String(500), nullable=True)
    admin_notes = Column(String(500), nullable=True)

    # Technician
    technician_name = Column(String(100), nullable=True)
    technician_phone = Column(String(20), nullable=True)
    technician_email = Column(String(255), nullable=True)
    technician_assigned_at = Column(DateTime, nullable=True)
    technician_assigned_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    has_technician = Column(Boolean, default=False, nullable=False)

    # Feedback
    rating = Column(Integer, nullable=True)  # 1-5
    feedback = Column(String(500), nullable=True)
    admin_reply = Column(String(1000), nullable=True)
    admin_reply_at = Column(DateTime, nullable=True)

    # Advisory notification bookkeeping
    admin_notified = Column(Boolean, default=False, nullable=False)
    customer_notified = Column(Boolean, default=False, nullable=False)
    technician_notified = Column(Boolean, default=False, nullable=False)
    last_notification_sent_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User", foreign_keys=[user_id], backref=backref("bookings", cascade="all, delete-orphan"))
    items = relationship(
        "BookingItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingItem.position",
    )

    @property
    def services_text(self) -> str:
        return ", ".join(item.service_name for item in self.items)

    @property
    def full_address(self) -> str:
        address = self.address or {}
        return f"{address.get('street', '')}, {address.get('city', '')}, {address.get('state', '')} - {address.get('pincode', '')}"

    def __repr__(self):
        return f"<Booking {self.booking_code} - {self.status}>"


class BookingItem(Base):
    """Line item: a snapshot of one requested service"""
    __tablename__ = "booking_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True, index=True)
    position = Column(Integer, nullable=False, default=0)

    service_name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False, default="General")
    estimated_price = Column(String(50), nullable=True)

    booking = relationship("Booking", back_populates="items")

    def __repr__(self):
        return f"<BookingItem {self.service_name}>"
