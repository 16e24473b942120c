"""Support request (contact form ticket) model"""
from sqlalchemy import Column, String, Text, Integer, ForeignKey, DateTime, Enum as SQLEnum
import enum

from app.models.base import Base, TimestampMixin


class SupportCategory(str, enum.Enum):
    TECHNICAL = "Technical"
    BILLING = "Billing"
    GENERAL = "General"
    COMPLAINT = "Complaint"
    FEEDBACK = "Feedback"


class SupportPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class SupportStatus(str, enum.Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class SupportRequest(Base, TimestampMixin):
    """Contact form ticket"""
    __tablename__ = "support_requests"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    subject = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)

    category = Column(SQLEnum(SupportCategory), nullable=False, default=SupportCategory.GENERAL)
    priority = Column(SQLEnum(SupportPriority), nullable=False, default=SupportPriority.MEDIUM, index=True)
    status = Column(SQLEnum(SupportStatus), nullable=False, default=SupportStatus.OPEN, index=True)

    assigned_to_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    admin_notes = Column(String(1000), nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    resolved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self):
        return f"<SupportRequest {self.subject} ({self.status})>"
