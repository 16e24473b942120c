"""Customer review endpoints"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.db.session import get_db
from app.dependencies.auth import get_current_user, get_current_admin_user
from app.models.booking import Booking, BookingStatus
from app.models.review import Review
from app.models.service import Service
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewReply, ReviewApproval, ReviewResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def serialize_review(review: Review) -> dict:
    return ReviewResponse.model_validate(review).model_dump(mode="json")


def get_review_or_404(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFoundError("Review not found")
    return review


def fold_rating_into_catalog(db: Session, service_ids, rating: int) -> None:
    """Running average update expressed in SQL so concurrent reviews don't clobber each other"""
    if not service_ids:
        return
    db.query(Service).filter(Service.id.in_(service_ids)).update(
        {
            Service.average_rating: (Service.average_rating * Service.rating_count + rating) / (Service.rating_count + 1.0),
            Service.rating_count: Service.rating_count + 1,
        },
        synchronize_session=False,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Review a completed booking. One review per booking, regardless of
    whether an earlier review was later unapproved.
    """
    booking = db.query(Booking).filter(Booking.id == review_data.booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.user_id != current_user.id:
        raise AuthorizationError("You can only review your own bookings")
    if booking.status != BookingStatus.COMPLETED:
        raise ValidationError("You can only review completed bookings")
    if db.query(Review).filter(Review.booking_id == booking.id).first():
        raise ValidationError("Review already exists for this booking")

    first_item = booking.items[0] if booking.items else None
    review = Review(
        booking_id=booking.id,
        user_id=current_user.id,
        customer_name=booking.name,
        service_category=first_item.category if first_item else "General",
        service_name=first_item.service_name if first_item else "Service",
        rating=review_data.rating,
        feedback=review_data.feedback.strip(),
    )
    db.add(review)

    booking.rating = review_data.rating
    booking.feedback = review_data.feedback.strip()[:500]

    service_ids = sorted({item.service_id for item in booking.items if item.service_id is not None})
    fold_rating_into_catalog(db, service_ids, review_data.rating)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Review already exists for this booking")
    db.refresh(review)
    logger.info(f"Review {review.id} created for booking {booking.booking_code}")

    return {
        "success": True,
        "message": "Review submitted successfully",
        "data": {"review": serialize_review(review)},
    }


@router.get("/homepage")
async def get_homepage_reviews(
    limit: int = Query(6, ge=1, le=50),
    db: Session = Depends(get_db)
):
    reviews = db.query(Review).filter(
        Review.is_approved == True,  # noqa: E712
        Review.is_displayed_on_homepage == True,  # noqa: E712
    ).order_by(Review.created_at.desc()).limit(limit).all()
    return {"success": True, "data": {"reviews": [serialize_review(r) for r in reviews]}}


@router.get("")
async def get_all_reviews(
    status_filter: str = Query("all", alias="status", pattern="^(all|approved|pending)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    query = db.query(Review)
    if status_filter == "approved":
        query = query.filter(Review.is_approved == True)  # noqa: E712
    elif status_filter == "pending":
        query = query.filter(Review.is_approved == False)  # noqa: E712

    total = query.count()
    reviews = query.order_by(Review.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "success": True,
        "data": {
            "reviews": [serialize_review(r) for r in reviews],
            "pagination": {
                "current_page": page,
                "total_pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        },
    }


@router.patch("/{review_id}/reply")
async def reply_to_review(
    review_id: int,
    reply: ReviewReply,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    review = get_review_or_404(db, review_id)
    review.reply_text = reply.reply_text.strip()
    review.replied_by_id = current_user.id
    review.replied_at = datetime.utcnow()
    db.commit()
    db.refresh(review)
    return {
        "success": True,
        "message": "Reply added successfully",
        "data": {"review": serialize_review(review)},
    }


@router.patch("/{review_id}/approval")
async def update_review_approval(
    review_id: int,
    approval: ReviewApproval,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    review = get_review_or_404(db, review_id)
    if approval.is_approved is not None:
        review.is_approved = approval.is_approved
    if approval.is_displayed_on_homepage is not None:
        review.is_displayed_on_homepage = approval.is_displayed_on_homepage
    db.commit()
    db.refresh(review)
    return {
        "success": True,
        "message": "Review updated successfully",
        "data": {"review": serialize_review(review)},
    }


@router.delete("/{review_id}")
async def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    review = get_review_or_404(db, review_id)
    db.delete(review)
    db.commit()
    return {"success": True, "message": "Review deleted successfully"}
