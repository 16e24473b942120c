"""
Notification dispatcher: picks recipients, renders templates and hands the
message to the right channel.

The notify_* operations do not send anything themselves: each returns the
named sends for its event, one per channel (`customer_email`, `staff_sms`,
...). Callers schedule them as post-commit effects so every send gets its
own timeout and outcome.
"""
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, Dict, Sequence

import httpx

from app.services.notifications.base import (
    BookingSnapshot, ChannelResult, NotificationChannel, SupportContact,
    ALL_CHANNELS, EMAIL, SMS, WHATSAPP, CUSTOMER, STAFF, TECHNICIAN,
    BOOKING_CREATED, STATUS_CHANGED, TECHNICIAN_ASSIGNED,
)
from app.services.notifications.email import EmailChannel
from app.services.notifications.sms import SmsChannel
from app.services.notifications.whatsapp import WhatsAppChannel
from app.services.notifications import templates

Send = Callable[[], Awaitable[ChannelResult]]


@dataclass
class StaffContacts:
    email: str = ""
    phone: str = ""
    whatsapp: str = ""


class NotificationDispatcher:
    """Booking notifications across email, SMS and WhatsApp"""

    def __init__(
        self,
        channels: Dict[str, NotificationChannel],
        staff: StaffContacts,
        support: SupportContact,
    ):
        self.channels = channels
        self.staff = staff
        self.support = support

    @classmethod
    def from_settings(cls, settings, http_client: httpx.AsyncClient) -> "NotificationDispatcher":
        twilio = dict(
            http_client=http_client,
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            api_base_url=settings.TWILIO_API_BASE_URL,
        )
        channels = {
            EMAIL: EmailChannel(
                api_key=settings.BREVO_API_KEY,
                sender_email=settings.EMAIL_FROM,
                sender_name=settings.EMAIL_FROM_NAME,
                reply_to=settings.EMAIL_REPLY_TO,
                timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
            ),
            SMS: SmsChannel(from_number=settings.TWILIO_SMS_FROM, **twilio),
            WHATSAPP: WhatsAppChannel(from_number=settings.TWILIO_WHATSAPP_FROM, **twilio),
        }
        staff = StaffContacts(
            email=settings.ADMIN_EMAIL,
            phone=settings.ADMIN_PHONE,
            whatsapp=settings.ADMIN_WHATSAPP_NUMBER,
        )
        support = SupportContact(
            phone=settings.SUPPORT_PHONE,
            email=settings.SUPPORT_EMAIL,
            whatsapp=settings.SUPPORT_WHATSAPP_NUMBER,
        )
        return cls(channels=channels, staff=staff, support=support)

    def recipient_for(self, channel: str, audience: str, snapshot: BookingSnapshot) -> str:
        if audience == STAFF:
            return {EMAIL: self.staff.email, SMS: self.staff.phone, WHATSAPP: self.staff.whatsapp}[channel]
        if audience == TECHNICIAN:
            return snapshot.technician_email if channel == EMAIL else snapshot.technician_phone
        return snapshot.email if channel == EMAIL else snapshot.phone

    async def deliver(self, channel: str, audience: str, event: str, snapshot: BookingSnapshot) -> ChannelResult:
        """Render and send a single message on one channel"""
        if channel not in self.channels:
            return ChannelResult(channel=channel, success=False, error=f"{channel} not registered", disabled=True)
        message = templates.render(channel, audience, event, snapshot, self.support)
        recipient = self.recipient_for(channel, audience, snapshot)
        return await self.channels[channel].send(recipient, message)

    def _sends(
        self, audience: str, event: str, snapshot: BookingSnapshot, channels: Sequence[str] = ALL_CHANNELS
    ) -> Dict[str, Send]:
        return {
            f"{audience}_{channel}": partial(self.deliver, channel, audience, event, snapshot)
            for channel in channels
        }

    def notify_customer_created(self, snapshot: BookingSnapshot) -> Dict[str, Send]:
        return self._sends(CUSTOMER, BOOKING_CREATED, snapshot)

    def notify_staff_created(self, snapshot: BookingSnapshot) -> Dict[str, Send]:
        return self._sends(STAFF, BOOKING_CREATED, snapshot)

    def notify_customer_status_changed(self, snapshot: BookingSnapshot) -> Dict[str, Send]:
        return self._sends(CUSTOMER, STATUS_CHANGED, snapshot)

    def notify_technician_assigned(self, snapshot: BookingSnapshot) -> Dict[str, Send]:
        # email is optional for technicians
        channels = [c for c in ALL_CHANNELS if c != EMAIL or snapshot.technician_email]
        return self._sends(TECHNICIAN, TECHNICIAN_ASSIGNED, snapshot, channels)
