"""Service catalog endpoints"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, cast, String
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.exceptions import NotFoundError, ValidationError
from app.db.session import get_db
from app.dependencies.auth import get_current_admin_user
from app.models.booking import Booking, BookingItem, ACTIVE_STATUSES
from app.models.service import Service
from app.models.user import User
from app.schemas.service import ServiceCreate, ServiceUpdate, ServiceResponse, SERVICE_CATEGORIES

router = APIRouter()
logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "name": Service.name,
    "popularity": Service.popularity,
    "average_rating": Service.average_rating,
    "price_min": Service.price_min,
    "created_at": Service.created_at,
}


def serialize_service(service: Service) -> dict:
    return ServiceResponse.model_validate(service).model_dump(mode="json")


def get_service_or_404(db: Session, service_id: int) -> Service:
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise NotFoundError("Service not found")
    return service


def ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Service).filter(func.lower(Service.name) == name.strip().lower())
    if exclude_id is not None:
        query = query.filter(Service.id != exclude_id)
    if query.first():
        raise ValidationError("Service with this name already exists")


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_service(
    service_data: ServiceCreate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    ensure_unique_name(db, service_data.name)

    service = Service(**service_data.model_dump())
    db.add(service)
    db.commit()
    db.refresh(service)
    logger.info(f"Service '{service.name}' added by admin {current_user.id}")
    return {
        "success": True,
        "message": "Service added successfully",
        "data": {"service": serialize_service(service)},
    }


@router.get("")
async def get_services(
    category: Optional[str] = None,
    is_active: Optional[bool] = True,
    search: Optional[str] = None,
    sort_by: str = Query("popularity", pattern="^(name|popularity|average_rating|price_min|created_at)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """
    List catalog services with filters; includes the distinct active categories
    """
    query = db.query(Service)
    if category:
        query = query.filter(Service.category == category)
    if is_active is not None:
        query = query.filter(Service.is_active == is_active)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(Service.name.ilike(term), Service.description.ilike(term)))

    total = query.count()
    column = SORTABLE_FIELDS[sort_by]
    services = query.order_by(column.asc() if sort_order == "asc" else column.desc()) \
        .offset((page - 1) * limit).limit(limit).all()

    categories = [
        row[0] for row in
        db.query(Service.category).filter(Service.is_active == True).distinct().order_by(Service.category).all()  # noqa: E712
    ]
    return {
        "success": True,
        "data": {
            "services": [serialize_service(s) for s in services],
            "categories": categories,
            "pagination": {
                "current_page": page,
                "total_pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        },
    }


@router.get("/popular")
async def get_popular_services(
    limit: int = Query(6, ge=1, le=50),
    db: Session = Depends(get_db)
):
    services = db.query(Service).filter(Service.is_active == True).order_by(  # noqa: E712
        Service.popularity.desc(), Service.average_rating.desc()
    ).limit(limit).all()
    return {"success": True, "data": {"services": [serialize_service(s) for s in services]}}


@router.get("/categories")
async def get_service_categories():
    return {"success": True, "data": {"categories": SERVICE_CATEGORIES}}


@router.get("/category/{category}")
async def get_services_by_category(category: str, db: Session = Depends(get_db)):
    if category not in SERVICE_CATEGORIES:
        raise ValidationError(f"Invalid category. Must be one of: {', '.join(SERVICE_CATEGORIES)}")
    services = db.query(Service).filter(
        Service.category == category, Service.is_active == True  # noqa: E712
    ).order_by(Service.popularity.desc()).all()
    return {
        "success": True,
        "data": {"category": category, "services": [serialize_service(s) for s in services]},
    }


@router.get("/search")
async def search_services(
    q: str = Query("", max_length=100),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Search active services by name, description or features"""
    q = q.strip()
    if len(q) < 2:
        raise ValidationError("Search query must be at least 2 characters long")

    term = f"%{q}%"
    services = db.query(Service).filter(
        Service.is_active == True,  # noqa: E712
        or_(
            Service.name.ilike(term),
            Service.description.ilike(term),
            cast(Service.features, String).ilike(term),
        ),
    ).order_by(Service.popularity.desc()).limit(limit).all()
    return {
        "success": True,
        "data": {"query": q, "services": [serialize_service(s) for s in services]},
    }


@router.get("/{service_id}")
async def get_service(service_id: int, db: Session = Depends(get_db)):
    service = get_service_or_404(db, service_id)
    return {"success": True, "data": {"service": serialize_service(service)}}


@router.patch("/{service_id}")
async def update_service(
    service_id: int,
    update: ServiceUpdate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    service = get_service_or_404(db, service_id)
    changes = update.model_dump(exclude_unset=True)

    if changes.get("name"):
        ensure_unique_name(db, changes["name"], exclude_id=service.id)
        changes["name"] = changes["name"].strip()

    price_min = changes.get("price_min", service.price_min)
    price_max = changes.get("price_max", service.price_max)
    if price_min is not None and price_max is not None and price_min > price_max:
        raise ValidationError("Minimum price cannot be greater than maximum price")

    for field, value in changes.items():
        setattr(service, field, value)
    db.commit()
    db.refresh(service)
    return {
        "success": True,
        "message": "Service updated successfully",
        "data": {"service": serialize_service(service)},
    }


@router.delete("/{service_id}")
async def delete_service(
    service_id: int,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Delete a service unless an active booking still references it"""
    service = get_service_or_404(db, service_id)

    active_references = db.query(Booking).filter(
        Booking.status.in_(ACTIVE_STATUSES),
        Booking.items.any(BookingItem.service_id == service.id),
    ).count()
    if active_references:
        raise ValidationError(
            f"Cannot delete service with {active_references} active booking(s). Complete or cancel them first."
        )

    db.delete(service)
    db.commit()
    logger.info(f"Service {service_id} deleted by admin {current_user.id}")
    return {"success": True, "message": "Service deleted successfully"}
