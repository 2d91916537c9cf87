from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import NotFound, ValidationFailed, format_validation_errors
from rentclub.core.logging_config import get_logger
from rentclub.models.content import Gallery
from rentclub.models.profile import Profile
from rentclub.api.v1.endpoints.auth import get_admin_profile
from rentclub.schemas.common import ActionResult
from rentclub.schemas.content import GalleryCreate, GalleryResponse
from rentclub.services.storage_service import ImageStorage, get_image_storage

logger = get_logger("galleries")

router = APIRouter()


@router.get("/", response_model=List[GalleryResponse])
async def list_galleries(db: Session = Depends(get_db)):
    return db.query(Gallery).order_by(Gallery.created_at.desc(), Gallery.id.desc()).all()


@router.post("/", response_model=GalleryResponse, status_code=201)
async def create_gallery(
    title: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_admin_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    try:
        data = GalleryCreate(title=title)
    except ValidationError as e:
        raise ValidationFailed(format_validation_errors(e.errors()))
    full_path = await storage.save(image, "galleries")
    try:
        with db_transaction(db):
            gallery = Gallery(profile_id=profile.id, title=data.title, media=full_path)
            db.add(gallery)
    except Exception:
        storage.delete(full_path)
        raise
    db.refresh(gallery)
    logger.info(f"Gallery {gallery.id} created by profile {profile.id}")
    return gallery


@router.delete("/{gallery_id}", response_model=ActionResult)
async def delete_gallery(
    gallery_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_admin_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    gallery = db.query(Gallery).filter(Gallery.id == gallery_id).first()
    if not gallery:
        raise NotFound("Gallery not found")
    media = gallery.media
    with db_transaction(db):
        db.delete(gallery)
    storage.delete(media)
    return ActionResult(message="Gallery deleted successfully")
