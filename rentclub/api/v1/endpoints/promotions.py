from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import ValidationFailed, format_validation_errors
from rentclub.core.logging_config import get_logger
from rentclub.core.validators import get_promotion_or_404
from rentclub.models.content import Promotion
from rentclub.models.profile import Profile
from rentclub.api.v1.endpoints.auth import get_admin_profile
from rentclub.schemas.common import ActionResult
from rentclub.schemas.content import PromotionCreate, PromotionResponse, PromotionUpdate
from rentclub.services.storage_service import ImageStorage, get_image_storage

logger = get_logger("promotions")

router = APIRouter()


def promotion_form(
    title: str = Form(""),
    subtitle: str = Form(""),
    category: str = Form(""),
    description: str = Form(""),
) -> PromotionCreate:
    try:
        return PromotionCreate(title=title, subtitle=subtitle, category=category, description=description)
    except ValidationError as e:
        raise ValidationFailed(format_validation_errors(e.errors()))


@router.get("/", response_model=List[PromotionResponse])
async def list_promotions(db: Session = Depends(get_db)):
    return db.query(Promotion).order_by(Promotion.created_at.desc(), Promotion.id.desc()).all()


@router.post("/", response_model=PromotionResponse, status_code=201)
async def create_promotion(
    data: PromotionCreate = Depends(promotion_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_admin_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    full_path = await storage.save(image, "promotions")
    try:
        with db_transaction(db):
            promotion = Promotion(profile_id=profile.id, media=full_path, **data.model_dump())
            db.add(promotion)
    except Exception:
        storage.delete(full_path)
        raise
    db.refresh(promotion)
    logger.info(f"Promotion {promotion.id} created by profile {profile.id}")
    return promotion


@router.get("/{promotion_id}", response_model=PromotionResponse)
async def fetch_promotion(promotion_id: int, db: Session = Depends(get_db)):
    return get_promotion_or_404(db, promotion_id)


@router.get("/{promotion_id}/admin", response_model=PromotionResponse)
async def fetch_admin_promotion(
    promotion_id: int,
    db: Session = Depends(get_db),
    _: Profile = Depends(get_admin_profile),
):
    """Same record as the public view, behind the admin gate for the edit form."""
    return get_promotion_or_404(db, promotion_id)


@router.put("/{promotion_id}", response_model=ActionResult)
async def update_promotion(
    promotion_id: int,
    body: PromotionUpdate,
    db: Session = Depends(get_db),
    _: Profile = Depends(get_admin_profile),
):
    promotion = get_promotion_or_404(db, promotion_id)
    with db_transaction(db):
        for field, value in body.model_dump().items():
            setattr(promotion, field, value)
    return ActionResult(message="Promotion updated successfully")


@router.put("/{promotion_id}/image", response_model=ActionResult)
async def update_promotion_image(
    promotion_id: int,
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    _: Profile = Depends(get_admin_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    promotion = get_promotion_or_404(db, promotion_id)
    full_path = await storage.save(image, "promotions")
    old_media = promotion.media
    try:
        with db_transaction(db):
            promotion.media = full_path
    except Exception:
        storage.delete(full_path)
        raise
    storage.delete(old_media)
    return ActionResult(message="Promotion image updated successfully")


@router.delete("/{promotion_id}", response_model=ActionResult)
async def delete_promotion(
    promotion_id: int,
    db: Session = Depends(get_db),
    _: Profile = Depends(get_admin_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    promotion = get_promotion_or_404(db, promotion_id)
    media = promotion.media
    with db_transaction(db):
        db.delete(promotion)
    storage.delete(media)
    logger.info(f"Promotion {promotion_id} deleted")
    return ActionResult(message="Promotion deleted successfully")
