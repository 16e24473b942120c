"""Service booking endpoints"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from app.core.exceptions import AuthorizationError
from app.db.session import get_db
from app.dependencies.auth import get_current_user, get_current_admin_user, get_notifier
from app.middleware.rate_limit import limiter, BOOKING_CREATE_LIMIT
from app.models.user import User, UserRole
from app.schemas.booking import BookingCreate, BookingFeedback, BookingResponse, BookingStatusUpdate
from app.services.booking_service import BookingService

router = APIRouter()


def get_booking_service(
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
) -> BookingService:
    return BookingService(db, notifier)


def serialize_booking(booking) -> dict:
    return BookingResponse.model_validate(booking).model_dump(mode="json")


def paginated(bookings, total: int, page: int, limit: int) -> dict:
    return {
        "success": True,
        "data": {
            "bookings": [serialize_booking(b) for b in bookings],
            "pagination": {
                "current_page": page,
                "total_pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        },
    }


# ============ CUSTOMER ENDPOINTS ============

@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(BOOKING_CREATE_LIMIT)
async def create_booking(
    request: Request,
    booking_data: BookingCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """
    Create a booking. Notifications and catalog counters are best-effort and
    never affect the outcome once the booking is stored.
    """
    booking, report = await service.create_booking(current_user, booking_data)
    return {
        "success": True,
        "message": "Booking created successfully",
        "data": {
            "booking": serialize_booking(booking),
            "notifications": report.to_dict(),
        },
    }


@router.get("/my")
async def get_my_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    bookings, total = service.search_bookings(
        user_id=current_user.id,
        status=status_filter,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return paginated(bookings, total, page, limit)


@router.get("/user/{user_id}")
async def get_user_bookings(
    user_id: int,
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings of a given user (admin or the user themselves)"""
    if current_user.role != UserRole.ADMIN and current_user.id != user_id:
        raise AuthorizationError("Access denied")
    bookings, total = service.search_bookings(
        user_id=user_id,
        status=status_filter,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return paginated(bookings, total, page, limit)


# ============ ADMIN ENDPOINTS ============

@router.get("/all")
async def get_all_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    sort_by: str = Query("created_at", pattern="^(created_at|service_date|status)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_admin_user),
    service: BookingService = Depends(get_booking_service),
):
    bookings, total = service.search_bookings(
        status=status_filter,
        search=search,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return paginated(bookings, total, page, limit)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking_for(current_user, booking_id)
    return {"success": True, "data": {"booking": serialize_booking(booking)}}


@router.patch("/{booking_id}/status")
async def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    current_user: User = Depends(get_current_admin_user),
    service: BookingService = Depends(get_booking_service),
):
    """
    Move a booking through its lifecycle (admin only).

    Re-requesting the current status is accepted; the customer is notified
    only when the status actually changes.
    """
    booking, report = await service.update_status(booking_id, update)
    return {
        "success": True,
        "message": f"Booking status updated to {booking.status.value}",
        "data": {
            "booking": serialize_booking(booking),
            "notifications": report.to_dict(),
        },
    }


@router.patch("/{booking_id}/feedback")
async def add_booking_feedback(
    booking_id: int,
    feedback: BookingFeedback,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.add_feedback(booking_id, current_user, feedback)
    return {
        "success": True,
        "message": "Feedback added successfully",
        "data": {"booking": serialize_booking(booking)},
    }


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    service.delete_booking(booking_id, current_user)
    return {"success": True, "message": "Booking deleted successfully"}
