"""
WhatsApp channel using the Twilio Messages REST API
"""
from app.services.notifications.base import WHATSAPP, normalize_phone
from app.services.notifications.sms import TwilioChannel


class WhatsAppChannel(TwilioChannel):
    name = WHATSAPP

    def _address(self, number: str) -> str:
        if number.startswith("whatsapp:"):
            return number
        return f"whatsapp:{normalize_phone(number)}"
