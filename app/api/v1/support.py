"""Support request (contact form) endpoints"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
import logging

from app.core.exceptions import NotFoundError
from app.db.session import get_db
from app.dependencies.auth import get_current_admin_user
from app.middleware.rate_limit import limiter, SUPPORT_LIMIT
from app.models.support import SupportRequest, SupportStatus, SupportPriority, SupportCategory
from app.models.user import User
from app.schemas.support import SupportRequestCreate, SupportRequestUpdate, SupportRequestResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def serialize_ticket(ticket: SupportRequest) -> dict:
    return SupportRequestResponse.model_validate(ticket).model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(SUPPORT_LIMIT)
async def create_support_request(
    request: Request,
    ticket_data: SupportRequestCreate,
    db: Session = Depends(get_db)
):
    ticket = SupportRequest(
        name=ticket_data.name.strip(),
        email=ticket_data.email.lower(),
        phone=ticket_data.phone,
        subject=ticket_data.subject.strip(),
        message=ticket_data.message.strip(),
        category=ticket_data.category,
        priority=ticket_data.priority,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    logger.info(f"Support request {ticket.id} received from {ticket.email}")
    return {
        "success": True,
        "message": "Your request has been received. Our team will get back to you soon.",
        "data": {"request": serialize_ticket(ticket)},
    }


@router.get("")
async def get_support_requests(
    status_filter: Optional[SupportStatus] = Query(None, alias="status"),
    priority: Optional[SupportPriority] = None,
    category: Optional[SupportCategory] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    query = db.query(SupportRequest)
    if status_filter:
        query = query.filter(SupportRequest.status == status_filter)
    if priority:
        query = query.filter(SupportRequest.priority == priority)
    if category:
        query = query.filter(SupportRequest.category == category)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            SupportRequest.name.ilike(term),
            SupportRequest.email.ilike(term),
            SupportRequest.subject.ilike(term),
        ))

    total = query.count()
    tickets = query.order_by(SupportRequest.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "success": True,
        "data": {
            "requests": [serialize_ticket(t) for t in tickets],
            "pagination": {
                "current_page": page,
                "total_pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        },
    }


@router.patch("/{request_id}")
async def update_support_request(
    request_id: int,
    update: SupportRequestUpdate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    ticket = db.query(SupportRequest).filter(SupportRequest.id == request_id).first()
    if not ticket:
        raise NotFoundError("Support request not found")

    if update.status is not None:
        ticket.status = update.status
        # Resolution is stamped once
        if update.status == SupportStatus.RESOLVED and ticket.resolved_at is None:
            ticket.resolved_at = datetime.utcnow()
            ticket.resolved_by_id = current_user.id
    if update.priority is not None:
        ticket.priority = update.priority
    if update.admin_notes is not None:
        ticket.admin_notes = update.admin_notes
    if update.assigned_to_id is not None:
        ticket.assigned_to_id = update.assigned_to_id

    db.commit()
    db.refresh(ticket)
    return {
        "success": True,
        "message": "Support request updated successfully",
        "data": {"request": serialize_ticket(ticket)},
    }
