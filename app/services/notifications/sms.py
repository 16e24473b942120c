"""
SMS channel using the Twilio Messages REST API
"""
import logging
from typing import Optional

import httpx

from app.core.exceptions import NotificationError
from app.services.notifications.base import NotificationChannel, RenderedMessage, SMS, normalize_phone

logger = logging.getLogger(__name__)


class TwilioChannel(NotificationChannel):
    """Shared Twilio plumbing for SMS and WhatsApp"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        account_sid: str,
        auth_token: str,
        from_number: str,
        api_base_url: str = "https://api.twilio.com/2010-04-01",
    ):
        self.http_client = http_client
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_base_url = api_base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def _address(self, number: str) -> str:
        return normalize_phone(number)

    async def _send(self, recipient: str, message: RenderedMessage) -> Optional[str]:
        data = {
            "To": self._address(recipient),
            "From": self._address(self.from_number),
            "Body": message.text,
        }
        try:
            response = await self.http_client.post(
                f"{self.api_base_url}/Accounts/{self.account_sid}/Messages.json",
                auth=(self.account_sid, self.auth_token),
                data=data,
            )
        except httpx.HTTPError as e:
            raise NotificationError(self.name, f"Twilio request failed: {e}")

        if response.status_code not in (200, 201):
            try:
                error_message = response.json().get("message", "Unknown error")
            except ValueError:
                error_message = response.text
            raise NotificationError(self.name, f"Twilio error {response.status_code}: {error_message}")

        return response.json().get("sid")


class SmsChannel(TwilioChannel):
    name = SMS
