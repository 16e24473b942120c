"""Admin dashboard and management endpoints"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from sqlalchemy import func, or_, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date, datetime, timedelta
import logging

from app.api.v1.bookings import get_booking_service, paginated, serialize_booking
from app.api.v1.services import serialize_service
from app.config import settings
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.db.session import get_db
from app.dependencies.auth import get_current_admin_user
from app.models.booking import Booking, BookingItem, BookingStatus
from app.models.service import Service
from app.models.user import User, UserRole
from app.schemas.auth import UserResponse
from app.schemas.booking import BookingReply, TechnicianAssign
from app.services.booking_service import BookingService
from app.services.export_service import export_bookings_xlsx, XLSX_MEDIA_TYPE

router = APIRouter()
logger = logging.getLogger(__name__)

PROCESS_STARTED_AT = datetime.utcnow()


class UserStatusUpdate(BaseModel):
    is_active: bool


# ============ DASHBOARD ============

@router.get("/stats")
async def get_admin_stats(
    period: int = Query(30, ge=1, le=365),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Dashboard statistics: totals, status breakdown, revenue, trends
    """
    now = datetime.utcnow()
    period_start = now - timedelta(days=period)

    status_counts = dict(
        db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
    )

    completed_with_cost = db.query(Booking).filter(
        Booking.status == BookingStatus.COMPLETED,
        Booking.actual_cost > 0,
    )
    total_revenue, avg_order_value = completed_with_cost.with_entities(
        func.coalesce(func.sum(Booking.actual_cost), 0),
        func.coalesce(func.avg(Booking.actual_cost), 0),
    ).one()
    period_revenue = completed_with_cost.filter(Booking.completed_at >= period_start).with_entities(
        func.coalesce(func.sum(Booking.actual_cost), 0)
    ).scalar()

    popular_services = db.query(Service).filter(Service.is_active == True).order_by(  # noqa: E712
        Service.total_bookings.desc(), Service.average_rating.desc()
    ).limit(5).all()

    recent_bookings = db.query(Booking).order_by(Booking.created_at.desc()).limit(10).all()

    trend_day = func.date(Booking.created_at)
    booking_trends = db.query(trend_day, func.count(Booking.id)).filter(
        Booking.created_at >= now - timedelta(days=7)
    ).group_by(trend_day).order_by(trend_day).all()

    category_stats = db.query(BookingItem.category, func.count(BookingItem.id)).group_by(
        BookingItem.category
    ).order_by(func.count(BookingItem.id).desc()).all()

    stats = {
        "overview": {
            "total_users": db.query(User).filter(User.role == UserRole.USER).count(),
            "total_bookings": db.query(Booking).count(),
            "total_services": db.query(Service).count(),
            "total_revenue": float(total_revenue or 0),
            "avg_order_value": round(float(avg_order_value or 0), 2),
        },
        "period_stats": {
            "period": period,
            "new_bookings": db.query(Booking).filter(Booking.created_at >= period_start).count(),
            "new_users": db.query(User).filter(
                User.created_at >= period_start, User.role == UserRole.USER
            ).count(),
            "revenue": float(period_revenue or 0),
        },
        "booking_status": {s.value: status_counts.get(s, 0) for s in BookingStatus},
        "popular_services": [
            {
                "id": s.id,
                "name": s.name,
                "category": s.category,
                "total_bookings": s.total_bookings,
                "average_rating": float(s.average_rating or 0),
            }
            for s in popular_services
        ],
        "recent_bookings": [
            {
                "id": b.id,
                "booking_code": b.booking_code,
                "name": b.name,
                "phone": b.phone,
                "status": b.status.value,
                "service_date": b.service_date.isoformat(),
                "has_technician": b.has_technician,
                "created_at": b.created_at.isoformat(),
            }
            for b in recent_bookings
        ],
        "booking_trends": [{"date": str(day), "count": count} for day, count in booking_trends],
        "category_stats": [{"category": category, "count": count} for category, count in category_stats],
    }
    return {"success": True, "data": {"stats": stats}}


# ============ BOOKINGS ============

@router.get("/bookings")
async def get_admin_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
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
        category=category,
        search=search,
        date_from=date_from,
        date_to=date_to,
        sort_by=sort_by,
        sort_order=sort_order,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return paginated(bookings, total, page, limit)


@router.post("/bookings/{booking_id}/assign-technician")
async def assign_technician(
    booking_id: int,
    technician: TechnicianAssign,
    current_user: User = Depends(get_current_admin_user),
    service: BookingService = Depends(get_booking_service),
):
    """
    Assign a technician. The technician is sent the job details; a Pending
    booking becomes Confirmed and the customer is notified of the change.
    """
    booking, report = await service.assign_technician(booking_id, technician, current_user)
    return {
        "success": True,
        "message": "Technician assigned successfully",
        "data": {
            "booking": serialize_booking(booking),
            "notifications": report.to_dict(),
        },
    }


@router.patch("/bookings/{booking_id}/reply")
async def reply_to_booking_feedback(
    booking_id: int,
    reply: BookingReply,
    current_user: User = Depends(get_current_admin_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.reply_to_feedback(booking_id, reply, current_user)
    return {
        "success": True,
        "message": "Reply added successfully",
        "data": {"booking": serialize_booking(booking)},
    }


@router.get("/export/bookings")
async def export_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    current_user: User = Depends(get_current_admin_user),
    service: BookingService = Depends(get_booking_service),
):
    bookings, total = service.search_bookings(
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        limit=10000,
    )
    output = export_bookings_xlsx(bookings)
    filename = f"bookings-{datetime.utcnow().strftime('%Y%m%d')}.xlsx"
    logger.info(f"Admin {current_user.id} exported {len(bookings)} bookings")
    return StreamingResponse(
        output,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


# ============ USERS ============

@router.get("/users")
async def get_admin_users(
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    query = db.query(User).filter(User.role == UserRole.USER)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(User.name.ilike(term), User.email.ilike(term), User.phone.ilike(term)))
    if is_active is not None:
        query = query.filter(User.is_active == is_active)

    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()

    booking_counts = dict(
        db.query(Booking.user_id, func.count(Booking.id)).filter(
            Booking.user_id.in_([u.id for u in users])
        ).group_by(Booking.user_id).all()
    ) if users else {}

    return {
        "success": True,
        "data": {
            "users": [
                {
                    **UserResponse.model_validate(u).model_dump(mode="json"),
                    "total_bookings": booking_counts.get(u.id, 0),
                }
                for u in users
            ],
            "pagination": {
                "current_page": page,
                "total_pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        },
    }


@router.patch("/users/{user_id}/status")
async def update_user_status(
    user_id: int,
    update: UserStatusUpdate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    if user.role == UserRole.ADMIN:
        raise AuthorizationError("Cannot modify admin users")

    user.is_active = update.is_active
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} {'activated' if user.is_active else 'deactivated'} by admin {current_user.id}")
    return {
        "success": True,
        "message": f"User {'activated' if user.is_active else 'deactivated'} successfully",
        "data": {"user": UserResponse.model_validate(user).model_dump(mode="json")},
    }


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Delete a user together with their bookings and reviews"""
    if user_id == current_user.id:
        raise ValidationError("You cannot delete your own account")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    if user.role == UserRole.ADMIN:
        raise AuthorizationError("Cannot delete admin users")

    # bookings (and their items and reviews) go with the user via ORM cascades
    deleted_bookings = len(user.bookings)
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} and {deleted_bookings} booking(s) deleted by admin {current_user.id}")
    return {
        "success": True,
        "message": "User deleted successfully",
        "data": {"deleted_bookings": deleted_bookings},
    }


# ============ SERVICES ============

@router.get("/services")
async def get_admin_services(
    search: Optional[str] = None,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    query = db.query(Service)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            Service.name.ilike(term), Service.description.ilike(term), Service.category.ilike(term)
        ))
    if category:
        query = query.filter(Service.category == category)
    if is_active is not None:
        query = query.filter(Service.is_active == is_active)

    total = query.count()
    services = query.order_by(Service.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "success": True,
        "data": {
            "services": [serialize_service(s) for s in services],
            "pagination": {
                "current_page": page,
                "total_pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        },
    }


# ============ SYSTEM ============

@router.get("/system-health")
async def get_system_health(
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        database = "disconnected"

    uptime = datetime.utcnow() - PROCESS_STARTED_AT
    return {
        "success": True,
        "data": {
            "health": {
                "status": "healthy" if database == "connected" else "degraded",
                "database": database,
                "uptime_seconds": int(uptime.total_seconds()),
                "environment": settings.ENVIRONMENT,
                "timestamp": datetime.utcnow().isoformat(),
            }
        },
    }
