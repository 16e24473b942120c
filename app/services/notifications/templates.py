"""
Message templates per channel, audience and event.

Status-change messages are keyed by the new status with a generic fallback.
Every message carries the booking code, date, time, services, address and a
support contact.
"""
from html import escape

from app.services.notifications.base import (
    BookingSnapshot, RenderedMessage, SupportContact,
    EMAIL, SMS, WHATSAPP, CUSTOMER, STAFF, TECHNICIAN,
    BOOKING_CREATED, STATUS_CHANGED, TECHNICIAN_ASSIGNED,
)

BRAND = "AX TEAM"

STATUS_HEADLINES = {
    "Confirmed": "Your booking {code} is confirmed! Our technician will arrive on {date} at {time}.",
    "InProgress": "Work has started on booking {code}. Our technician is now servicing your request.",
    "Completed": "Service completed for booking {code}. Thank you for choosing us! We would love your review.",
    "Cancelled": "Booking {code} has been cancelled. Contact us any time to rebook.",
}
GENERIC_STATUS_HEADLINE = "Booking {code} status updated to {status}."
TECHNICIAN_HEADLINE = "New job assigned: booking {code} on {date} at {time}. Please contact the customer before visiting."

STATUS_SUBJECTS = {
    "Confirmed": "Booking Confirmed",
    "InProgress": "Service In Progress",
    "Completed": "Service Completed",
    "Cancelled": "Booking Cancelled",
}


def _headline(event: str, audience: str, snapshot: BookingSnapshot) -> str:
    fields = {
        "code": snapshot.booking_code,
        "date": snapshot.date_text,
        "time": snapshot.time_slot,
        "status": snapshot.status,
    }
    if audience == STAFF:
        return "NEW BOOKING ALERT - please assign a technician ASAP."
    if audience == TECHNICIAN:
        return TECHNICIAN_HEADLINE.format(**fields)
    if event == BOOKING_CREATED:
        return "Your booking has been submitted successfully. Our team will contact you soon."
    return STATUS_HEADLINES.get(snapshot.status, GENERIC_STATUS_HEADLINE).format(**fields)


def _detail_lines(audience: str, snapshot: BookingSnapshot, support: SupportContact, support_number: str):
    lines = [f"Booking ID: {snapshot.booking_code}"]
    if audience in (STAFF, TECHNICIAN):
        lines += [
            f"Customer: {snapshot.name}",
            f"Phone: {snapshot.phone}",
        ]
    if audience == STAFF:
        lines.append(f"Email: {snapshot.email}")
    lines += [
        f"Services: {snapshot.services_text}",
        f"Address: {snapshot.address}",
    ]
    if snapshot.maps_link:
        lines.append(f"Location: {snapshot.maps_link}")
    lines += [
        f"Date: {snapshot.date_text}",
        f"Time: {snapshot.time_slot}",
    ]
    if audience in (STAFF, TECHNICIAN):
        lines.append(f"Work: {snapshot.work_description or 'No specific description provided'}")
    if snapshot.technician_name and audience == CUSTOMER:
        lines.append(f"Technician: {snapshot.technician_name} ({snapshot.technician_phone})")
    lines.append(f"Support: {support_number}")
    return lines


def _subject(event: str, audience: str, snapshot: BookingSnapshot) -> str:
    if audience == STAFF:
        return f"New Booking Alert - {snapshot.booking_code}"
    if audience == TECHNICIAN:
        return f"Job Assigned - {snapshot.booking_code}"
    if event == BOOKING_CREATED:
        return f"Booking Confirmation - {snapshot.booking_code}"
    label = STATUS_SUBJECTS.get(snapshot.status, "Booking Update")
    return f"{label} - {snapshot.booking_code}"


def render_sms(audience: str, event: str, snapshot: BookingSnapshot, support: SupportContact) -> RenderedMessage:
    # SMS stays on one line to keep segment count down
    headline = _headline(event, audience, snapshot)
    if audience == STAFF:
        text = (
            f"{BRAND}: New booking {snapshot.booking_code} from {snapshot.name} ({snapshot.phone}). "
            f"Services: {snapshot.services_text}. Date: {snapshot.date_text} {snapshot.time_slot}. "
            f"Address: {snapshot.address}. Support: {support.phone}"
        )
    elif audience == TECHNICIAN:
        text = (
            f"{BRAND}: {headline} Customer: {snapshot.name} ({snapshot.phone}). "
            f"Services: {snapshot.services_text}. Address: {snapshot.address}. Support: {support.phone}"
        )
    else:
        text = (
            f"{BRAND}: {headline} Booking: {snapshot.booking_code}. Services: {snapshot.services_text}. "
            f"Date: {snapshot.date_text} {snapshot.time_slot}. Address: {snapshot.address}. "
            f"Call {support.phone} for queries."
        )
    return RenderedMessage(text=text)


def render_whatsapp(audience: str, event: str, snapshot: BookingSnapshot, support: SupportContact) -> RenderedMessage:
    title = f"{BRAND} - {_subject(event, audience, snapshot)}"
    greeting = {
        STAFF: [],
        TECHNICIAN: [f"Hello {snapshot.technician_name},"],
    }.get(audience, [f"Hello {snapshot.name},"])
    lines = [title, ""] + greeting + [_headline(event, audience, snapshot), ""]
    lines += _detail_lines(audience, snapshot, support, support.whatsapp)
    if audience == CUSTOMER:
        lines += ["", f"Thank you for choosing {BRAND}!"]
    return RenderedMessage(text="\n".join(lines))


def render_email(audience: str, event: str, snapshot: BookingSnapshot, support: SupportContact) -> RenderedMessage:
    subject = f"{_subject(event, audience, snapshot)} | {BRAND}"
    headline = _headline(event, audience, snapshot)
    details = _detail_lines(audience, snapshot, support, f"{support.phone} / {support.email}")
    greeting = {
        STAFF: "Hello team,",
        TECHNICIAN: f"Hello {snapshot.technician_name},",
    }.get(audience, f"Hello {snapshot.name},")

    text = "\n".join([greeting, "", headline, ""] + details + ["", f"- {BRAND} Home Services"])
    rows = "".join(f"<li>{escape(line)}</li>" for line in details)
    html = (
        f"<div style=\"font-family: Arial, sans-serif; max-width: 600px;\">"
        f"<h2>{escape(BRAND)}</h2>"
        f"<p>{escape(greeting)}</p>"
        f"<p>{escape(headline)}</p>"
        f"<ul>{rows}</ul>"
        f"<p>- {escape(BRAND)} Home Services</p>"
        f"</div>"
    )
    return RenderedMessage(text=text, subject=subject, html=html)


RENDERERS = {
    EMAIL: render_email,
    SMS: render_sms,
    WHATSAPP: render_whatsapp,
}

SUPPORTED_EVENTS = {
    CUSTOMER: (BOOKING_CREATED, STATUS_CHANGED),
    STAFF: (BOOKING_CREATED,),
    TECHNICIAN: (TECHNICIAN_ASSIGNED,),
}


def render(channel: str, audience: str, event: str, snapshot: BookingSnapshot, support: SupportContact) -> RenderedMessage:
    if channel not in RENDERERS:
        raise ValueError(f"Unknown channel: {channel}")
    if event not in SUPPORTED_EVENTS.get(audience, ()):
        raise ValueError(f"No {audience} template for event {event}")
    return RENDERERS[channel](audience, event, snapshot, support)
