"""
Local filesystem storage for gallery uploads, served under STATIC_URL_PREFIX
"""
import os
import uuid
import logging
from typing import Optional

from app.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
ALLOWED_VIDEO_TYPES = {"video/mp4", "video/webm", "video/quicktime"}
GALLERY_SUBDIRECTORY = "gallery"


class FileStorageService:
    """Stores uploaded files on local disk"""

    def __init__(self, base_dir: Optional[str] = None, static_url_prefix: Optional[str] = None):
        self.base_dir = base_dir or settings.UPLOAD_BASE_DIR
        self.static_url_prefix = (static_url_prefix or settings.STATIC_URL_PREFIX).rstrip("/")
        self._ensure_directories()

    def _ensure_directories(self):
        for directory in (self.base_dir, os.path.join(self.base_dir, GALLERY_SUBDIRECTORY)):
            os.makedirs(directory, exist_ok=True)

    def _full_path(self, subdirectory: str, file_name: str) -> str:
        # Never let a stored name escape the upload directory
        safe_name = os.path.basename(file_name)
        return os.path.join(self.base_dir, subdirectory, safe_name)

    @staticmethod
    def generate_file_name(original_name: str) -> str:
        extension = os.path.splitext(original_name or "")[1].lower()
        return f"{uuid.uuid4().hex}{extension}"

    def save(self, file_content: bytes, file_name: str, subdirectory: str = GALLERY_SUBDIRECTORY) -> str:
        """
        Write bytes to disk and return the public URL

        Raises OSError when the file cannot be written.
        """
        full_path = self._full_path(subdirectory, file_name)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(file_content)

        url = f"{self.static_url_prefix}/{subdirectory}/{os.path.basename(full_path)}"
        logger.info(f"File stored: {full_path} -> {url}")
        return url

    def delete(self, file_name: str, subdirectory: str = GALLERY_SUBDIRECTORY) -> bool:
        full_path = self._full_path(subdirectory, file_name)
        if not os.path.exists(full_path):
            logger.warning(f"File not found for deletion: {full_path}")
            return False
        os.remove(full_path)
        logger.info(f"File deleted: {full_path}")
        return True


def get_file_storage() -> FileStorageService:
    return FileStorageService()
