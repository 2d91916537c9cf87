from typing import Dict, List, Optional, Tuple
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import ValidationFailed, format_validation_errors
from rentclub.core.logging_config import get_logger
from rentclub.core.validators import get_owned_property, get_property_or_404
from rentclub.models.booking import Booking
from rentclub.models.profile import Profile
from rentclub.models.property import Favorite, Property
from rentclub.models.review import Review
from rentclub.api.v1.endpoints.auth import get_current_profile
from rentclub.schemas.common import ActionResult
from rentclub.schemas.property import (
    BookedRange,
    FavoriteId,
    FavoriteToggleResult,
    PropertyCard,
    PropertyCreate,
    PropertyDetails,
    PropertyOwner,
    PropertyRating,
    PropertyResponse,
    PropertyUpdate,
    RentalSummary,
)
from rentclub.services.storage_service import ImageStorage, get_image_storage

logger = get_logger("properties")

router = APIRouter()


def property_form(
    name: str = Form(""),
    tagline: str = Form(""),
    category: str = Form(""),
    country: str = Form(""),
    city: str = Form(""),
    description: str = Form(""),
    price: str = Form("0"),
    guests: str = Form("0"),
    bedrooms: str = Form("0"),
    beds: str = Form("0"),
    baths: str = Form("0"),
    amenities: str = Form(""),
) -> PropertyCreate:
    try:
        return PropertyCreate(
            name=name, tagline=tagline, category=category, country=country, city=city,
            description=description, price=price, guests=guests, bedrooms=bedrooms,
            beds=beds, baths=baths, amenities=amenities,
        )
    except ValidationError as e:
        raise ValidationFailed(format_validation_errors(e.errors()))


def rating_summary(db: Session, property_ids: List[int]) -> Dict[int, Tuple[Optional[float], int]]:
    """property_id -> (average rating rounded to 1 dp, review count)"""
    if not property_ids:
        return {}
    rows = db.query(
        Review.property_id,
        func.avg(Review.rating),
        func.count(Review.id)
    ).filter(Review.property_id.in_(property_ids)).group_by(Review.property_id).all()
    return {pid: (round(float(avg), 1) if avg is not None else None, count) for pid, avg, count in rows}


@router.get("/", response_model=List[PropertyCard])
async def list_properties(
    search: str = Query(""),
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Newest first; search matches name or tagline, case-insensitive."""
    query = db.query(Property)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Property.name.ilike(pattern), Property.tagline.ilike(pattern)))
    if category:
        query = query.filter(Property.category == category)
    properties = query.order_by(Property.created_at.desc(), Property.id.desc()).all()

    ratings = rating_summary(db, [p.id for p in properties])
    cards = []
    for prop in properties:
        rating, count = ratings.get(prop.id, (None, 0))
        cards.append(PropertyCard(
            id=prop.id,
            name=prop.name,
            tagline=prop.tagline,
            city=prop.city,
            image=prop.image,
            price=prop.price,
            created_at=prop.created_at,
            rating=rating,
            count=count,
        ))
    return cards


@router.post("/", response_model=PropertyResponse, status_code=201)
async def create_property(
    data: PropertyCreate = Depends(property_form),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    full_path = await storage.save(image, "properties")
    try:
        with db_transaction(db):
            prop = Property(profile_id=profile.id, image=full_path, **data.model_dump())
            db.add(prop)
    except Exception:
        storage.delete(full_path)
        raise
    db.refresh(prop)
    logger.info(f"Property {prop.id} created by profile {profile.id}")
    return prop


@router.get("/favorites", response_model=List[PropertyCard])
async def fetch_favorites(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    favorites = db.query(Favorite).options(joinedload(Favorite.property)).filter(
        Favorite.profile_id == profile.id
    ).order_by(Favorite.created_at.desc(), Favorite.id.desc()).all()
    return [
        PropertyCard(
            id=fav.property.id,
            name=fav.property.name,
            tagline=fav.property.tagline,
            city=fav.property.city,
            image=fav.property.image,
            price=fav.property.price,
            created_at=fav.property.created_at,
        )
        for fav in favorites
    ]


@router.get("/rentals", response_model=List[RentalSummary])
async def fetch_rentals(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Caller's listings with nights and revenue summed over paid bookings."""
    rentals = db.query(Property).filter(Property.profile_id == profile.id).order_by(Property.id).all()
    sums = dict(
        (pid, (nights, total))
        for pid, nights, total in db.query(
            Booking.property_id,
            func.sum(Booking.total_nights),
            func.sum(Booking.order_total)
        ).filter(
            Booking.property_id.in_([r.id for r in rentals]),
            Booking.payment_status == True
        ).group_by(Booking.property_id).all()
    ) if rentals else {}
    return [
        RentalSummary(
            id=rental.id,
            name=rental.name,
            price=rental.price,
            created_at=rental.created_at,
            total_nights_sum=sums.get(rental.id, (None, None))[0],
            order_total_sum=sums.get(rental.id, (None, None))[1],
        )
        for rental in rentals
    ]


@router.get("/rentals/{property_id}", response_model=PropertyResponse)
async def fetch_rental_details(
    property_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    return get_owned_property(db, property_id, profile)


@router.delete("/rentals/{property_id}", response_model=ActionResult)
async def delete_rental(
    property_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    prop = get_owned_property(db, property_id, profile)
    image = prop.image
    with db_transaction(db):
        db.delete(prop)
    storage.delete(image)
    logger.info(f"Property {property_id} deleted by profile {profile.id}")
    return ActionResult(message="Rental deleted successfully")


@router.get("/{property_id}", response_model=PropertyDetails)
async def fetch_property_details(property_id: int, db: Session = Depends(get_db)):
    """Listing with owner, paid booked ranges (for the calendar) and rating."""
    prop = get_property_or_404(db, property_id)
    booked = db.query(Booking).filter(
        Booking.property_id == prop.id,
        Booking.payment_status == True
    ).order_by(Booking.check_in).all()
    rating, count = rating_summary(db, [prop.id]).get(prop.id, (None, 0))
    return PropertyDetails(
        **PropertyResponse.model_validate(prop).model_dump(),
        profile=PropertyOwner.model_validate(prop.profile),
        bookings=[BookedRange.model_validate(b) for b in booked],
        rating=rating or 0.0,
        count=count,
    )


@router.get("/{property_id}/rating", response_model=PropertyRating)
async def fetch_property_rating(property_id: int, db: Session = Depends(get_db)):
    rating, count = rating_summary(db, [property_id]).get(property_id, (None, 0))
    return PropertyRating(rating=rating or 0.0, count=count)


@router.put("/{property_id}", response_model=ActionResult)
async def update_property(
    property_id: int,
    body: PropertyUpdate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    prop = get_owned_property(db, property_id, profile)
    with db_transaction(db):
        for field, value in body.model_dump().items():
            setattr(prop, field, value)
    return ActionResult(message="Update Successful")


@router.put("/{property_id}/image", response_model=ActionResult)
async def update_property_image(
    property_id: int,
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    storage: ImageStorage = Depends(get_image_storage),
):
    prop = get_owned_property(db, property_id, profile)
    full_path = await storage.save(image, "properties")
    old_image = prop.image
    try:
        with db_transaction(db):
            prop.image = full_path
    except Exception:
        storage.delete(full_path)
        raise
    storage.delete(old_image)
    return ActionResult(message="Property Image Updated Successful")


@router.get("/{property_id}/favorite", response_model=FavoriteId)
async def fetch_favorite_id(
    property_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    favorite = db.query(Favorite.id).filter(
        Favorite.property_id == property_id,
        Favorite.profile_id == profile.id
    ).first()
    return FavoriteId(favorite_id=favorite[0] if favorite else None)


@router.post("/{property_id}/favorite", response_model=FavoriteToggleResult)
async def toggle_favorite(
    property_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    get_property_or_404(db, property_id)
    favorite = db.query(Favorite).filter(
        Favorite.property_id == property_id,
        Favorite.profile_id == profile.id
    ).first()
    with db_transaction(db):
        if favorite:
            db.delete(favorite)
            new_favorite = None
        else:
            new_favorite = Favorite(profile_id=profile.id, property_id=property_id)
            db.add(new_favorite)
    if new_favorite is None:
        return FavoriteToggleResult(message="Removed from your Favorite")
    return FavoriteToggleResult(message="Added to your Favorite", favorite_id=new_favorite.id)
