"""
Notification channel contract and shared value objects
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, List
import logging
import re

from app.core.exceptions import NotificationError

logger = logging.getLogger(__name__)

# Channels
EMAIL = "email"
SMS = "sms"
WHATSAPP = "whatsapp"
ALL_CHANNELS = (WHATSAPP, EMAIL, SMS)

# Audiences
CUSTOMER = "customer"
STAFF = "staff"
TECHNICIAN = "technician"

# Events
BOOKING_CREATED = "booking_created"
STATUS_CHANGED = "status_changed"
TECHNICIAN_ASSIGNED = "technician_assigned"


@dataclass
class ChannelResult:
    channel: str
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    disabled: bool = False


@dataclass
class RenderedMessage:
    text: str
    subject: Optional[str] = None
    html: Optional[str] = None


@dataclass
class SupportContact:
    phone: str
    email: str
    whatsapp: str


@dataclass(frozen=True)
class BookingSnapshot:
    """Everything a template needs, detached from the ORM session"""
    booking_code: str
    status: str
    name: str
    email: str
    phone: str
    services: List[str]
    address: str
    service_date: date
    time_slot: str
    work_description: Optional[str] = None
    maps_link: Optional[str] = None
    technician_name: Optional[str] = None
    technician_phone: Optional[str] = None
    technician_email: Optional[str] = None

    @classmethod
    def from_booking(cls, booking) -> "BookingSnapshot":
        location = booking.location or {}
        maps_link = None
        if location.get("latitude") is not None and location.get("longitude") is not None:
            maps_link = f"https://www.google.com/maps?q={location['latitude']},{location['longitude']}"
        status = booking.status.value if hasattr(booking.status, "value") else booking.status
        return cls(
            booking_code=booking.booking_code,
            status=status,
            name=booking.name,
            email=booking.email,
            phone=booking.phone,
            services=[item.service_name for item in booking.items],
            address=booking.full_address,
            service_date=booking.service_date,
            time_slot=booking.time_slot,
            work_description=booking.work_description,
            maps_link=maps_link,
            technician_name=booking.technician_name,
            technician_phone=booking.technician_phone,
            technician_email=booking.technician_email,
        )

    @property
    def services_text(self) -> str:
        return ", ".join(self.services)

    @property
    def date_text(self) -> str:
        return self.service_date.strftime("%d/%m/%Y")


def normalize_phone(phone: str, default_country_code: str = "+91") -> str:
    """Strip formatting and make the number E.164-ish"""
    digits = re.sub(r"[\s\-\(\)]", "", phone or "")
    if not digits:
        return digits
    if digits.startswith("+"):
        return digits
    if len(digits) == 10:
        return f"{default_country_code}{digits}"
    return f"+{digits}"


class NotificationChannel:
    """
    Base class for outbound channels.

    Subclasses implement `is_configured` and `_send`. `send` never raises for
    provider problems: an unconfigured channel returns a disabled result and a
    NotificationError from `_send` becomes a failed result.
    """
    name: str = "base"

    @property
    def is_configured(self) -> bool:
        raise NotImplementedError

    async def _send(self, recipient: str, message: RenderedMessage) -> Optional[str]:
        raise NotImplementedError

    async def send(self, recipient: Optional[str], message: RenderedMessage) -> ChannelResult:
        if not self.is_configured:
            logger.warning(f"{self.name} channel not configured, message not sent")
            return ChannelResult(
                channel=self.name,
                success=False,
                error=f"{self.name} not configured",
                disabled=True,
            )
        if not recipient:
            logger.warning(f"{self.name} message skipped: no recipient")
            return ChannelResult(channel=self.name, success=False, error="No recipient")

        try:
            message_id = await self._send(recipient, message)
        except NotificationError as e:
            logger.error(f"{self.name} send to {recipient} failed: {e.message}")
            return ChannelResult(channel=self.name, success=False, error=e.message)

        logger.info(f"{self.name} sent to {recipient} (id: {message_id})")
        return ChannelResult(channel=self.name, success=True, message_id=message_id)
