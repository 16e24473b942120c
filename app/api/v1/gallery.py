"""
Gallery endpoints: public listing and admin media uploads
"""
from fastapi import APIRouter, Depends, Form, Query, UploadFile, File, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.db.session import get_db
from app.dependencies.auth import get_current_admin_user
from app.models.gallery import GalleryItem, GalleryCategory, GallerySection, MediaType
from app.models.user import User
from app.services.file_storage import (
    FileStorageService, get_file_storage, ALLOWED_IMAGE_TYPES, ALLOWED_VIDEO_TYPES,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def serialize_item(item: GalleryItem) -> dict:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "category": item.category.value,
        "section": item.section.value,
        "media_type": item.media_type.value,
        "file_url": item.file_url,
        "file_size": item.file_size,
        "mime_type": item.mime_type,
        "view_count": item.view_count,
        "created_at": item.created_at.isoformat() if item.created_at else None,
    }


@router.get("")
async def get_gallery(
    category: Optional[GalleryCategory] = None,
    section: Optional[GallerySection] = None,
    media_type: Optional[MediaType] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(24, ge=1, le=100),
    db: Session = Depends(get_db)
):
    query = db.query(GalleryItem).filter(GalleryItem.is_active == True)  # noqa: E712
    if category:
        query = query.filter(GalleryItem.category == category)
    if section:
        query = query.filter(GalleryItem.section == section)
    if media_type:
        query = query.filter(GalleryItem.media_type == media_type)

    total = query.count()
    items = query.order_by(GalleryItem.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "success": True,
        "data": {
            "items": [serialize_item(i) for i in items],
            "pagination": {
                "current_page": page,
                "total_pages": (total + limit - 1) // limit,
                "total": total,
                "limit": limit,
            },
        },
    }


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_gallery_item(
    file: UploadFile = File(...),
    title: str = Form(..., min_length=1, max_length=100),
    category: GalleryCategory = Form(...),
    section: GallerySection = Form(GallerySection.APPLIANCE_SERVICES),
    description: Optional[str] = Form(None, max_length=500),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage),
):
    """
    Upload an image or video (max MAX_UPLOAD_SIZE_MB) to the gallery
    """
    if not file.filename:
        raise ValidationError("No file provided")

    mime_type = file.content_type or ""
    if mime_type in ALLOWED_IMAGE_TYPES:
        media_type = MediaType.IMAGE
    elif mime_type in ALLOWED_VIDEO_TYPES:
        media_type = MediaType.VIDEO
    else:
        raise ValidationError("Only image and video files are allowed")

    file_content = await file.read()
    if len(file_content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise ValidationError(f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE_MB}MB")

    file_name = storage.generate_file_name(file.filename)
    url = storage.save(file_content, file_name)

    item = GalleryItem(
        title=title.strip(),
        description=description,
        category=category,
        section=section,
        media_type=media_type,
        file_name=file_name,
        file_url=url,
        file_size=len(file_content),
        mime_type=mime_type,
        uploaded_by_id=current_user.id,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info(f"Gallery item {item.id} uploaded by admin {current_user.id}")
    return {
        "success": True,
        "message": "File uploaded successfully",
        "data": {"item": serialize_item(item)},
    }


@router.delete("/{item_id}")
async def delete_gallery_item(
    item_id: int,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage),
):
    item = db.query(GalleryItem).filter(GalleryItem.id == item_id).first()
    if not item:
        raise NotFoundError("Gallery item not found")

    storage.delete(item.file_name)
    db.delete(item)
    db.commit()
    return {"success": True, "message": "Gallery item deleted successfully"}
