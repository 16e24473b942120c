"""
Booking lifecycle: creation, status transitions, technician assignment,
deletion, feedback and staff replies.

Every mutation commits first; notifications and catalog counters run
afterwards as post-commit effects and never undo or fail the commit.
"""
import logging
from datetime import date, datetime
from functools import partial
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import AppError, AuthorizationError, NotFoundError, ValidationError
from app.models.booking import (
    Booking, BookingItem, BookingStatus, DELETABLE_STATUSES, TERMINAL_STATUSES,
)
from app.models.service import Service
from app.models.user import User
from app.schemas.booking import (
    BookingCreate, BookingFeedback, BookingReply, BookingStatusUpdate, TechnicianAssign,
)
from app.services.notifications.base import BookingSnapshot, CUSTOMER, STAFF, TECHNICIAN
from app.services.post_commit import EffectReport, PostCommitEffects
from app.utils.booking_code import generate_booking_code

logger = logging.getLogger(__name__)

DEFAULT_ITEM_CATEGORY = "General"
CATALOG_COUNTERS_EFFECT = "catalog_counters"

# Forward moves only; skipping ahead is allowed because every move is an
# explicit staff command. Terminal states have no exits.
ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {
        BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS,
        BookingStatus.COMPLETED, BookingStatus.CANCELLED,
    },
    BookingStatus.CONFIRMED: {
        BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, BookingStatus.CANCELLED,
    },
    BookingStatus.IN_PROGRESS: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

SORTABLE_FIELDS = {
    "created_at": Booking.created_at,
    "service_date": Booking.service_date,
    "status": Booking.status,
}


def parse_status(value) -> BookingStatus:
    """Map a raw label onto BookingStatus or raise ValidationError listing the valid labels"""
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(value)
    except ValueError:
        allowed = ", ".join(BookingStatus.values())
        raise ValidationError(
            f"Invalid status. Must be one of: {allowed}",
            errors=[f"status must be one of: {allowed}"],
        )


def check_transition(current: BookingStatus, target: BookingStatus) -> None:
    if current == target:
        return
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(f"Cannot change booking status from {current.value} to {target.value}")


def is_staff(user: User) -> bool:
    return user.is_admin


class BookingService:
    """Booking operations bound to one request's session and the notifier"""

    def __init__(self, db: Session, notifier, timeout: Optional[float] = None):
        self.db = db
        self.notifier = notifier
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT_SECONDS

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def get_booking_for(self, user: User, booking_id: int) -> Booking:
        booking = self.get_booking(booking_id)
        if not is_staff(user) and booking.user_id != user.id:
            raise AuthorizationError("Access denied")
        return booking

    def search_bookings(
        self,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Booking], int]:
        query = self.db.query(Booking)
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        if status:
            query = query.filter(Booking.status == parse_status(status))
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(
                Booking.booking_code.ilike(term),
                Booking.name.ilike(term),
                Booking.email.ilike(term),
                Booking.phone.ilike(term),
            ))
        if category:
            query = query.filter(Booking.items.any(BookingItem.category == category))
        if date_from:
            query = query.filter(Booking.service_date >= date_from)
        if date_to:
            query = query.filter(Booking.service_date <= date_to)

        total = query.count()
        column = SORTABLE_FIELDS.get(sort_by, Booking.created_at)
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc())
        return query.offset(skip).limit(limit).all(), total

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _resolve_line_items(self, payload: BookingCreate) -> List[Dict]:
        """Snapshot each requested service, filling gaps from the live catalog"""
        resolved = []
        for position, entry in enumerate(payload.services):
            service = None
            if entry.service_id is not None:
                service = self.db.query(Service).filter(Service.id == entry.service_id).first()
            if service is None:
                service = self.db.query(Service).filter(
                    func.lower(Service.name) == entry.service_name.strip().lower()
                ).first()

            resolved.append({
                "position": position,
                "service_id": service.id if service else None,
                "service_name": entry.service_name.strip(),
                "category": entry.category or (service.category if service else None) or DEFAULT_ITEM_CATEGORY,
                "estimated_price": entry.price or (service.formatted_price_range if service else None),
            })
        return resolved

    def _build_booking(self, user: User, payload: BookingCreate, line_items: List[Dict]) -> Booking:
        location = None
        if payload.location:
            location = payload.location.model_dump(mode="json")
            location["captured_at"] = location.get("captured_at") or datetime.utcnow().isoformat()

        return Booking(
            booking_code=generate_booking_code(),
            user_id=user.id,
            name=payload.name.strip(),
            email=payload.email,
            phone=payload.phone,
            address=payload.address.model_dump(),
            location=location,
            service_date=payload.service_date,
            time_slot=payload.time_slot.strip(),
            work_description=payload.work_description,
            status=BookingStatus.PENDING,
            items=[BookingItem(**item) for item in line_items],
        )

    def _persist_with_unique_code(self, user: User, payload: BookingCreate, line_items: List[Dict]) -> Booking:
        max_attempts = settings.BOOKING_CODE_MAX_ATTEMPTS
        for attempt in range(1, max_attempts + 1):
            booking = self._build_booking(user, payload, line_items)
            self.db.add(booking)
            try:
                self.db.commit()
                return booking
            except IntegrityError as e:
                self.db.rollback()
                if "booking_code" not in str(e.orig):
                    raise
                logger.warning(f"Booking code collision on {booking.booking_code} (attempt {attempt}/{max_attempts})")
        raise AppError("Could not generate a unique booking code, please try again")

    async def _increment_catalog_counters(self, service_ids: List[int]) -> int:
        try:
            updated = self.db.query(Service).filter(Service.id.in_(service_ids)).update(
                {
                    Service.total_bookings: Service.total_bookings + 1,
                    Service.popularity: Service.popularity + 1,
                },
                synchronize_session=False,
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return updated

    async def create_booking(self, user: User, payload: BookingCreate) -> Tuple[Booking, EffectReport]:
        if payload.service_date < date.today():
            raise ValidationError(
                "Service date cannot be in the past",
                errors=["date must be today or later"],
            )

        line_items = self._resolve_line_items(payload)
        booking = self._persist_with_unique_code(user, payload, line_items)
        self.db.refresh(booking)
        logger.info(f"Booking {booking.booking_code} created by user {user.id}")

        effects = PostCommitEffects(timeout=self.timeout)
        snapshot = BookingSnapshot.from_booking(booking)
        effects.add_all(self.notifier.notify_customer_created(snapshot))
        effects.add_all(self.notifier.notify_staff_created(snapshot))
        service_ids = sorted({item["service_id"] for item in line_items if item["service_id"] is not None})
        if service_ids:
            effects.add(CATALOG_COUNTERS_EFFECT, partial(self._increment_catalog_counters, service_ids))

        report = await effects.run()
        self._record_notifications(booking, report)
        return booking, report

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    async def _notify_status_change(self, booking: Booking) -> EffectReport:
        effects = PostCommitEffects(timeout=self.timeout)
        snapshot = BookingSnapshot.from_booking(booking)
        effects.add_all(self.notifier.notify_customer_status_changed(snapshot))
        report = await effects.run()
        self._record_notifications(booking, report)
        return report

    async def update_status(self, booking_id: int, payload: BookingStatusUpdate) -> Tuple[Booking, EffectReport]:
        new_status = parse_status(payload.status)
        booking = self.get_booking(booking_id)
        old_status = booking.status
        check_transition(old_status, new_status)

        if payload.technician_notes is not None:
            booking.technician_notes = payload.technician_notes
        if payload.admin_notes is not None:
            booking.admin_notes = payload.admin_notes
        if payload.estimated_cost is not None:
            booking.estimated_cost = payload.estimated_cost
        if payload.actual_cost is not None:
            booking.actual_cost = payload.actual_cost

        booking.status = new_status
        if new_status == BookingStatus.COMPLETED and booking.completed_at is None:
            booking.completed_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Booking {booking.booking_code} status {old_status.value} -> {new_status.value}")

        if old_status == new_status:
            return booking, EffectReport()
        return booking, await self._notify_status_change(booking)

    async def assign_technician(
        self, booking_id: int, payload: TechnicianAssign, assigned_by: User
    ) -> Tuple[Booking, EffectReport]:
        booking = self.get_booking(booking_id)
        if booking.status in TERMINAL_STATUSES:
            raise ValidationError(f"Cannot assign a technician to a {booking.status.value} booking")

        old_status = booking.status
        booking.technician_name = payload.technician_name.strip()
        booking.technician_phone = payload.technician_phone
        booking.technician_email = payload.technician_email
        booking.technician_assigned_at = datetime.utcnow()
        booking.technician_assigned_by_id = assigned_by.id
        booking.has_technician = True
        booking.technician_notified = False
        if old_status == BookingStatus.PENDING:
            booking.status = BookingStatus.CONFIRMED

        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Technician {booking.technician_name} assigned to booking {booking.booking_code}")

        snapshot = BookingSnapshot.from_booking(booking)
        effects = PostCommitEffects(timeout=self.timeout)
        effects.add_all(self.notifier.notify_technician_assigned(snapshot))
        if booking.status != old_status:
            effects.add_all(self.notifier.notify_customer_status_changed(snapshot))
        report = await effects.run()
        self._record_notifications(booking, report)
        return booking, report

    # ------------------------------------------------------------------
    # Deletion & feedback
    # ------------------------------------------------------------------

    def delete_booking(self, booking_id: int, user: User) -> None:
        booking = self.get_booking(booking_id)
        if not is_staff(user) and booking.user_id != user.id:
            raise AuthorizationError("You can only delete your own bookings")
        if booking.status not in DELETABLE_STATUSES:
            raise ValidationError(
                f"Cannot delete a {booking.status.value} booking. Only Pending or Cancelled bookings can be deleted"
            )
        self.db.delete(booking)
        self.db.commit()
        logger.info(f"Booking {booking.booking_code} deleted by user {user.id}")

    def add_feedback(self, booking_id: int, user: User, payload: BookingFeedback) -> Booking:
        booking = self.get_booking(booking_id)
        if booking.user_id != user.id:
            raise AuthorizationError("You can only give feedback on your own bookings")
        if booking.status != BookingStatus.COMPLETED:
            raise ValidationError("Feedback can only be added to completed bookings")

        booking.rating = payload.rating
        booking.feedback = payload.feedback
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def reply_to_feedback(self, booking_id: int, payload: BookingReply, replied_by: User) -> Booking:
        booking = self.get_booking(booking_id)
        if booking.rating is None:
            raise ValidationError("This booking has no feedback to reply to")

        reply = payload.reply.strip()
        if not reply:
            raise ValidationError("Reply cannot be empty")

        booking.admin_reply = reply
        booking.admin_reply_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"Admin {replied_by.id} replied to feedback on booking {booking.booking_code}")
        return booking

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _record_notifications(self, booking: Booking, report: EffectReport) -> None:
        customer_ok = report.any_ok(f"{CUSTOMER}_")
        staff_ok = report.any_ok(f"{STAFF}_")
        technician_ok = report.any_ok(f"{TECHNICIAN}_")
        if not (customer_ok or staff_ok or technician_ok):
            return
        try:
            if customer_ok:
                booking.customer_notified = True
            if staff_ok:
                booking.admin_notified = True
            if technician_ok:
                booking.technician_notified = True
            booking.last_notification_sent_at = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record notification flags for booking {booking.booking_code}: {e}")
