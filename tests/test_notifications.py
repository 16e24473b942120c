"""
Notification templates, dispatcher routing and provider channels.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import httpx
import pytest
from sib_api_v3_sdk.rest import ApiException

from app.services.notifications import templates
from app.services.notifications.base import (
    BookingSnapshot, RenderedMessage, SupportContact, normalize_phone,
    EMAIL, SMS, WHATSAPP, CUSTOMER, STAFF, TECHNICIAN,
    BOOKING_CREATED, STATUS_CHANGED, TECHNICIAN_ASSIGNED,
)
from app.services.notifications.dispatcher import NotificationDispatcher
from app.services.notifications.email import EmailChannel
from app.services.notifications.sms import SmsChannel
from app.services.notifications.whatsapp import WhatsAppChannel
from app.services.post_commit import PostCommitEffects

SUPPORT = SupportContact(phone="+91-9876543210", email="support@axteam.com", whatsapp="+91-9876543211")


def make_snapshot(status="Pending", **overrides):
    data = dict(
        booking_code="AX-20261020-K7QZ",
        status=status,
        name="Ravi Kumar",
        email="ravi@example.com",
        phone="+919812345678",
        services=["AC Repair", "Geyser Service"],
        address="12 MG Road, Bengaluru, Karnataka - 560001",
        service_date=date(2026, 10, 20),
        time_slot="10:00",
    )
    data.update(overrides)
    return BookingSnapshot(**data)


# ============ TEMPLATES ============

@pytest.mark.parametrize("channel", [EMAIL, SMS, WHATSAPP])
@pytest.mark.parametrize("status", ["Confirmed", "InProgress", "Completed", "Cancelled", "OnHold"])
def test_status_templates_carry_required_fields(channel, status):
    message = templates.render(channel, CUSTOMER, STATUS_CHANGED, make_snapshot(status), SUPPORT)
    for required in ("AX-20261020-K7QZ", "20/10/2026", "10:00", "AC Repair, Geyser Service", "560001"):
        assert required in message.text
    assert "+91-98765432" in message.text


def test_status_templates_are_distinct_per_status():
    texts = {
        status: templates.render(SMS, CUSTOMER, STATUS_CHANGED, make_snapshot(status), SUPPORT).text
        for status in ("Confirmed", "InProgress", "Completed", "Cancelled", "OnHold")
    }
    assert len(set(texts.values())) == 5
    assert "status updated to OnHold" in texts["OnHold"]


def test_templates_are_deterministic():
    snapshot = make_snapshot("Confirmed")
    first = templates.render(EMAIL, CUSTOMER, STATUS_CHANGED, snapshot, SUPPORT)
    second = templates.render(EMAIL, CUSTOMER, STATUS_CHANGED, snapshot, SUPPORT)
    assert first == second
    assert first.subject.startswith("Booking Confirmed - AX-20261020-K7QZ")
    assert "<ul>" in first.html


def test_staff_template_includes_customer_contact():
    message = templates.render(WHATSAPP, STAFF, BOOKING_CREATED, make_snapshot(), SUPPORT)
    assert "NEW BOOKING ALERT" in message.text
    assert "ravi@example.com" in message.text
    assert "+919812345678" in message.text


def test_email_html_is_escaped():
    message = templates.render(EMAIL, CUSTOMER, BOOKING_CREATED, make_snapshot(name="<script>"), SUPPORT)
    assert "<script>" not in message.html
    assert "&lt;script&gt;" in message.html


def test_technician_template_has_job_details():
    snapshot = make_snapshot(
        "Confirmed", technician_name="Suresh", technician_phone="+919900112233",
        work_description="AC not cooling",
    )
    for channel in (SMS, WHATSAPP, EMAIL):
        message = templates.render(channel, TECHNICIAN, TECHNICIAN_ASSIGNED, snapshot, SUPPORT)
        for required in ("AX-20261020-K7QZ", "Ravi Kumar", "+919812345678", "560001"):
            assert required in message.text
    whatsapp = templates.render(WHATSAPP, TECHNICIAN, TECHNICIAN_ASSIGNED, snapshot, SUPPORT)
    assert whatsapp.text.splitlines()[2] == "Hello Suresh,"
    assert "Work: AC not cooling" in whatsapp.text
    assert "ravi@example.com" not in whatsapp.text


def test_no_staff_status_template():
    with pytest.raises(ValueError):
        templates.render(SMS, STAFF, STATUS_CHANGED, make_snapshot("Confirmed"), SUPPORT)


# ============ DISPATCHER ============

async def run_sends(sends):
    effects = PostCommitEffects(timeout=1)
    effects.add_all(sends)
    return await effects.run()


def test_notify_operations_name_one_send_per_channel(notifier):
    assert sorted(notifier.notify_customer_created(make_snapshot())) == [
        "customer_email", "customer_sms", "customer_whatsapp",
    ]
    assert sorted(notifier.notify_staff_created(make_snapshot())) == ["staff_email", "staff_sms", "staff_whatsapp"]
    assert sorted(notifier.notify_customer_status_changed(make_snapshot("Confirmed"))) == [
        "customer_email", "customer_sms", "customer_whatsapp",
    ]


async def test_dispatcher_sends_to_customer_contacts(notifier, channels):
    report = await run_sends(notifier.notify_customer_status_changed(make_snapshot("Confirmed")))

    assert report.failed == []
    assert channels[EMAIL].sent[0][0] == "ravi@example.com"
    assert channels[WHATSAPP].sent[0][0] == "+919812345678"


async def test_dispatcher_staff_recipients_from_config(notifier, channels):
    await run_sends(notifier.notify_staff_created(make_snapshot()))
    assert channels[EMAIL].sent[0][0] == "ops@axteam.com"
    assert channels[SMS].sent[0][0] == "+919800000001"
    assert channels[WHATSAPP].sent[0][0] == "+919800000002"


async def test_technician_sends_skip_email_without_address(notifier, channels):
    snapshot = make_snapshot("Confirmed", technician_name="Suresh", technician_phone="+919900112233")
    assert sorted(notifier.notify_technician_assigned(snapshot)) == ["technician_sms", "technician_whatsapp"]

    with_email = make_snapshot(
        "Confirmed", technician_name="Suresh", technician_phone="+919900112233",
        technician_email="suresh@axteam.com",
    )
    await run_sends(notifier.notify_technician_assigned(with_email))
    assert channels[EMAIL].sent[0][0] == "suresh@axteam.com"
    assert channels[SMS].sent[0][0] == "+919900112233"
    assert channels[EMAIL].sent[0][1].subject.startswith("Job Assigned - AX-20261020-K7QZ")


async def test_dispatcher_isolates_channel_crash(notifier, channels):
    channels[SMS].explode = True
    report = await run_sends(notifier.notify_customer_status_changed(make_snapshot("Completed")))

    assert report.failed == ["customer_sms"]
    assert "unexpected provider crash" in report.get("customer_sms").error
    assert report.get("customer_email").ok and report.get("customer_whatsapp").ok


async def test_disabled_channel_does_not_raise(notifier, channels):
    channels[EMAIL].configured = False
    result = await notifier.deliver(EMAIL, CUSTOMER, BOOKING_CREATED, make_snapshot())
    assert result.disabled is True
    assert result.success is False
    assert channels[EMAIL].sent == []


async def test_missing_staff_recipient_is_a_failed_result(channels):
    dispatcher = NotificationDispatcher(
        channels=channels,
        staff=MagicMock(email="", phone="", whatsapp=""),
        support=SUPPORT,
    )
    result = await dispatcher.deliver(SMS, STAFF, BOOKING_CREATED, make_snapshot())
    assert result.success is False
    assert result.error == "No recipient"


async def test_from_settings_without_credentials_disables_everything():
    settings = MagicMock(
        BREVO_API_KEY="", EMAIL_FROM="noreply@axteam.com", EMAIL_FROM_NAME="AX TEAM",
        EMAIL_REPLY_TO="support@axteam.com", NOTIFICATION_TIMEOUT_SECONDS=5.0,
        TWILIO_ACCOUNT_SID="", TWILIO_AUTH_TOKEN="", TWILIO_SMS_FROM="", TWILIO_WHATSAPP_FROM="",
        TWILIO_API_BASE_URL="https://api.twilio.com/2010-04-01",
        ADMIN_EMAIL="ops@axteam.com", ADMIN_PHONE="", ADMIN_WHATSAPP_NUMBER="",
        SUPPORT_PHONE="+91-9876543210", SUPPORT_EMAIL="support@axteam.com", SUPPORT_WHATSAPP_NUMBER="",
    )
    async with httpx.AsyncClient() as http_client:
        dispatcher = NotificationDispatcher.from_settings(settings, http_client)
        report = await run_sends(dispatcher.notify_customer_created(make_snapshot()))
    assert dispatcher.channels[EMAIL].timeout == 5.0
    assert all(o.result.disabled for o in report.outcomes)


# ============ TWILIO CHANNELS ============

def twilio_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_sms_channel_posts_to_twilio():
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["body"] = request.content.decode()
        return httpx.Response(201, json={"sid": "SM123"})

    async with twilio_client(handler) as http_client:
        channel = SmsChannel(http_client, "AC1", "token", "+15005550006")
        result = await channel.send("98123 45678", RenderedMessage(text="hello"))

    assert result.success and result.message_id == "SM123"
    assert captured["url"].endswith("/Accounts/AC1/Messages.json")
    assert "To=%2B919812345678" in captured["body"]


async def test_whatsapp_channel_uses_whatsapp_addresses():
    captured = {}

    def handler(request):
        captured["body"] = request.content.decode()
        return httpx.Response(201, json={"sid": "WA123"})

    async with twilio_client(handler) as http_client:
        channel = WhatsAppChannel(http_client, "AC1", "token", "+14155238886")
        result = await channel.send("+919812345678", RenderedMessage(text="hello"))

    assert result.success
    assert "To=whatsapp%3A%2B919812345678" in captured["body"]
    assert "From=whatsapp%3A%2B14155238886" in captured["body"]


async def test_twilio_error_becomes_failed_result():
    def handler(request):
        return httpx.Response(400, json={"message": "Invalid 'To' number", "code": 21211})

    async with twilio_client(handler) as http_client:
        result = await SmsChannel(http_client, "AC1", "token", "+15005550006").send(
            "+919812345678", RenderedMessage(text="hello")
        )

    assert not result.success
    assert "Invalid 'To' number" in result.error


async def test_twilio_network_error_becomes_failed_result():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    async with twilio_client(handler) as http_client:
        result = await SmsChannel(http_client, "AC1", "token", "+15005550006").send(
            "+919812345678", RenderedMessage(text="hello")
        )

    assert not result.success
    assert "connection refused" in result.error


async def test_twilio_channel_without_credentials_is_disabled():
    async with httpx.AsyncClient() as http_client:
        result = await SmsChannel(http_client, "", "", "").send("+919812345678", RenderedMessage(text="hi"))
    assert result.disabled


def test_normalize_phone():
    assert normalize_phone("98123 45678") == "+919812345678"
    assert normalize_phone("+91 (981) 234-5678") == "+919812345678"
    assert normalize_phone("14155238886") == "+14155238886"


# ============ EMAIL CHANNEL ============

async def test_email_channel_sends_through_brevo():
    channel = EmailChannel(api_key="key", sender_email="noreply@axteam.com", sender_name="AX TEAM")
    channel.client = MagicMock()
    channel.client.send_transac_email.return_value = MagicMock(message_id="<brevo-1>")

    result = await channel.send(
        "ravi@example.com", RenderedMessage(text="hello", subject="Hi", html="<p>hello</p>")
    )

    assert result.success and result.message_id == "<brevo-1>"
    email = channel.client.send_transac_email.call_args[0][0]
    assert email.subject == "Hi"
    assert email.to[0].email == "ravi@example.com"


async def test_email_api_error_becomes_failed_result():
    channel = EmailChannel(api_key="key", sender_email="noreply@axteam.com", sender_name="AX TEAM")
    channel.client = MagicMock()
    channel.client.send_transac_email.side_effect = ApiException(status=401, reason="Unauthorized")

    result = await channel.send("ravi@example.com", RenderedMessage(text="hello"))

    assert not result.success
    assert "401" in result.error


async def test_email_channel_without_key_is_disabled():
    channel = EmailChannel(api_key="", sender_email="noreply@axteam.com", sender_name="AX TEAM")
    with patch.object(EmailChannel, "_send") as send:
        result = await channel.send("ravi@example.com", RenderedMessage(text="hello"))
    assert result.disabled
    send.assert_not_called()


async def test_email_request_timeout_is_passed_to_brevo():
    channel = EmailChannel(
        api_key="key", sender_email="noreply@axteam.com", sender_name="AX TEAM", timeout=2.5,
    )
    channel.client = MagicMock()
    channel.client.send_transac_email.return_value = MagicMock(message_id="<brevo-2>")

    await channel.send("ravi@example.com", RenderedMessage(text="hello"))

    assert channel.client.send_transac_email.call_args.kwargs["_request_timeout"] == 2.5
