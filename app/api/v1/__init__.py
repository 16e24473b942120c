# API v1 routers
# This file ensures all routers are properly exported

from . import (
    auth,
    services,
    bookings,
    reviews,
    admin,
    support,
    gallery,
)

__all__ = [
    "auth",
    "services",
    "bookings",
    "reviews",
    "admin",
    "support",
    "gallery",
]
