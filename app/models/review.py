"""Customer review model"""
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import backref, relationship

from app.models.base import Base, TimestampMixin


class Review(Base, TimestampMixin):
    """Post-completion review, at most one per booking"""
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshots
    customer_name = Column(String(50), nullable=False)
    service_category = Column(String(50), nullable=False)
    service_name = Column(String(100), nullable=False)

    rating = Column(Integer, nullable=False)
    feedback = Column(String(1000), nullable=False)

    is_approved = Column(Boolean, default=True, nullable=False)
    is_displayed_on_homepage = Column(Boolean, default=True, nullable=False)

    # Single admin reply
    reply_text = Column(String(500), nullable=True)
    replied_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    replied_at = Column(DateTime, nullable=True)

    booking = relationship("Booking", backref=backref("review", cascade="all, delete-orphan", uselist=False))
    user = relationship("User", foreign_keys=[user_id])
    replied_by = relationship("User", foreign_keys=[replied_by_id])

    def __repr__(self):
        return f"<Review booking={self.booking_id} rating={self.rating}>"
