"""Outbound booking notifications"""
from app.services.notifications.base import (
    BookingSnapshot,
    ChannelResult,
    NotificationChannel,
    RenderedMessage,
    SupportContact,
)
from app.services.notifications.dispatcher import NotificationDispatcher, StaffContacts

__all__ = [
    "BookingSnapshot",
    "ChannelResult",
    "NotificationChannel",
    "NotificationDispatcher",
    "RenderedMessage",
    "StaffContacts",
    "SupportContact",
]
