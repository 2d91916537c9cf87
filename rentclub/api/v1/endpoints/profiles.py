from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import Conflict, ValidationFailed
from rentclub.core.logging_config import get_logger
from rentclub.core.security import Identity
from rentclub.models.profile import Profile
from rentclub.api.v1.endpoints.auth import get_current_identity, get_current_profile, get_optional_profile
from rentclub.schemas.common import ActionResult
from rentclub.schemas.profile import ProfileCreate, ProfileResponse, ProfileUpdate
from rentclub.services.storage_service import ImageStorage, get_image_storage

logger = get_logger("profiles")

router = APIRouter()


@router.post("/", response_model=ProfileResponse, status_code=201)
async def create_profile(
    body: ProfileCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Create the caller's profile from the form data and the identity's email/image."""
    if not identity.email:
        raise ValidationFailed("Please login to create a profile")
    existing = db.query(Profile).filter(Profile.auth_id == identity.subject).first()
    if existing:
        raise Conflict("Profile already exists")
    with db_transaction(db):
        profile = Profile(
            auth_id=identity.subject,
            email=identity.email,
            profile_image=identity.image_url or "",
            **body.model_dump(),
        )
        db.add(profile)
    db.refresh(profile)
    logger.info(f"Profile {profile.id} created for subject {identity.subject}")
    return profile


@router.get("/me", response_model=ProfileResponse)
async def fetch_profile(profile: Profile = Depends(get_current_profile)):
    return profile


@router.get("/me/image")
async def fetch_profile_image(profile: Optional[Profile] = Depends(get_optional_profile)):
    """Profile picture for the navbar; null when signed out or without a profile."""
    return {"profile_image": profile.profile_image if profile else None}


@router.put("/me", response_model=ActionResult)
async def update_profile(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    with db_transaction(db):
        for field, value in body.model_dump().items():
            setattr(profile, field, value)
    return ActionResult(message="Profile updated successfully")


@router.put("/me/image", response_model=ActionResult)
async def update_profile_image(
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    full_path = await storage.save(image, "profiles")
    old_image = profile.profile_image
    try:
        with db_transaction(db):
            profile.profile_image = full_path
    except Exception:
        storage.delete(full_path)
        raise
    storage.delete(old_image)
    return ActionResult(message="Profile image updated successfully")
