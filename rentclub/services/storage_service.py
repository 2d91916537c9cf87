"""
Image storage for property, profile, promotion and gallery pictures.
Files are written under the upload directory and served from /uploads.
"""
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from rentclub.core.config import settings
from rentclub.core.errors import ExternalServiceError, ValidationFailed
from rentclub.core.logging_config import get_logger

logger = get_logger("storage_service")

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"}
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
PUBLIC_PREFIX = "/uploads"


def validate_image(file: Optional[UploadFile]) -> None:
    """Validate image file type (by Content-Type or filename)."""
    if file is None or not file.filename:
        raise ValidationFailed("Image is required")
    content_type = (file.content_type or "").strip().lower()
    if content_type in ALLOWED_IMAGE_TYPES:
        return
    # Accept missing/generic Content-Type if filename has image extension
    if content_type in ("application/octet-stream", ""):
        ext = Path(file.filename).suffix.lower()
        if ext in ALLOWED_IMAGE_EXTENSIONS:
            return
    raise ValidationFailed(f"File must be an image ({', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))})")


class ImageStorage:
    def __init__(self, root: str, max_size: int):
        self.root = Path(root)
        self.max_size = max_size

    async def save(self, file: Optional[UploadFile], folder: str) -> str:
        """Store a validated image and return its public path."""
        validate_image(file)
        content = await file.read()
        if not content:
            raise ValidationFailed("Image is empty")
        if len(content) > self.max_size:
            raise ValidationFailed(f"File size must be less than {self.max_size / 1024 / 1024:g} MB")

        ext = Path(file.filename).suffix.lower() or ".jpg"
        filename = f"{uuid.uuid4()}{ext}"
        target_dir = self.root / folder
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(target_dir / filename, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to store image {filename} in {target_dir}: {e}", exc_info=True)
            raise ExternalServiceError("Failed to upload image")

        public_path = f"{PUBLIC_PREFIX}/{folder}/{filename}"
        logger.info(f"Stored image at {public_path} ({len(content)} bytes)")
        return public_path

    def delete(self, public_path: Optional[str]) -> None:
        if not public_path or not public_path.startswith(PUBLIC_PREFIX + "/"):
            return
        path = (self.root / public_path[len(PUBLIC_PREFIX) + 1:]).resolve()
        if not str(path).startswith(str(self.root.resolve())):
            return
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            logger.warning(f"Could not delete old image {path}: {e}")


def get_image_storage() -> ImageStorage:
    return ImageStorage(settings.UPLOAD_DIR_ABS, settings.MAX_UPLOAD_SIZE)
