"""
Email channel using Brevo (formerly Sendinblue) transactional API
"""
import asyncio
import logging
from typing import Optional

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException

from app.core.exceptions import NotificationError
from app.services.notifications.base import NotificationChannel, RenderedMessage, EMAIL

logger = logging.getLogger(__name__)


class EmailChannel(NotificationChannel):
    """Brevo email; the SDK is synchronous so calls run in a worker thread"""
    name = EMAIL

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        sender_name: str,
        reply_to: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.reply_to = reply_to or sender_email
        self.timeout = timeout
        self.client = None
        if api_key:
            configuration = sib_api_v3_sdk.Configuration()
            configuration.api_key['api-key'] = api_key
            self.client = sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))
        else:
            logger.warning("Brevo API key not configured. Email sending disabled.")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _build_email(self, recipient: str, message: RenderedMessage):
        return sib_api_v3_sdk.SendSmtpEmail(
            sender=sib_api_v3_sdk.SendSmtpEmailSender(name=self.sender_name, email=self.sender_email),
            to=[sib_api_v3_sdk.SendSmtpEmailTo(email=recipient)],
            subject=message.subject or "AX TEAM notification",
            html_content=message.html or f"<pre>{message.text}</pre>",
            text_content=message.text,
            reply_to=sib_api_v3_sdk.SendSmtpEmailReplyTo(email=self.reply_to),
        )

    def _send_sync(self, recipient: str, message: RenderedMessage) -> Optional[str]:
        try:
            # bounds the worker thread; the caller only stops waiting on it
            response = self.client.send_transac_email(
                self._build_email(recipient, message), _request_timeout=self.timeout
            )
        except ApiException as e:
            raise NotificationError(self.name, f"Brevo API error: {e.status} {e.reason}")
        return getattr(response, "message_id", None)

    async def _send(self, recipient: str, message: RenderedMessage) -> Optional[str]:
        return await asyncio.to_thread(self._send_sync, recipient, message)
