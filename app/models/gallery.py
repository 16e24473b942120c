"""Gallery media model"""
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Enum as SQLEnum
import enum

from app.models.base import Base, TimestampMixin


class GalleryCategory(str, enum.Enum):
    WASHING_MACHINE = "Washing Machine"
    REFRIGERATOR = "Refrigerator"
    GEYSER = "Geyser"
    WATER_PURIFIER = "Water Purifier"
    MICROWAVE = "Microwave"
    AC = "AC"
    INTERIOR = "Interior"
    ELECTRICAL_SERVICE = "Electrical Service"
    HOME_MAINTENANCE = "Home Maintenance & Services"
    WALL_PAINTING = "Wall Painting"
    CCTV = "CCTV"
    AC_ADVANCED_PIPING = "AC Advanced Piping"


class GallerySection(str, enum.Enum):
    APPLIANCE_SERVICES = "Appliance Services"
    HOME_REPAIR = "Home Repair & Service"


class MediaType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"


class GalleryItem(Base, TimestampMixin):
    """Uploaded gallery image or video"""
    __tablename__ = "gallery_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    category = Column(SQLEnum(GalleryCategory), nullable=False, index=True)
    section = Column(SQLEnum(GallerySection), nullable=False, default=GallerySection.APPLIANCE_SERVICES)
    media_type = Column(SQLEnum(MediaType), nullable=False, default=MediaType.IMAGE)

    file_name = Column(String(255), nullable=False)
    file_url = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)

    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    view_count = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<GalleryItem {self.title}>"
