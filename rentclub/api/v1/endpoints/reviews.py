from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import NotFound
from rentclub.core.logging_config import get_logger
from rentclub.core.validators import get_property_or_404
from rentclub.models.profile import Profile
from rentclub.models.review import Review
from rentclub.api.v1.endpoints.auth import get_current_profile
from rentclub.schemas.common import ActionResult
from rentclub.schemas.review import ExistingReview, MyReviewResponse, ReviewCreate, ReviewResponse

logger = get_logger("reviews")

router = APIRouter()


@router.post("/", response_model=ActionResult, status_code=201)
async def create_review(
    body: ReviewCreate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    get_property_or_404(db, body.property_id)
    with db_transaction(db):
        db.add(Review(
            profile_id=profile.id,
            property_id=body.property_id,
            rating=body.rating,
            comment=body.comment,
        ))
    return ActionResult(message="Review submitted successfully")


@router.get("/mine", response_model=List[MyReviewResponse])
async def fetch_my_reviews(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    return db.query(Review).options(joinedload(Review.property)).filter(
        Review.profile_id == profile.id
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()


@router.get("/five-star", response_model=List[ReviewResponse])
async def fetch_five_star_reviews(db: Session = Depends(get_db)):
    """Testimonials for the landing page."""
    return db.query(Review).options(joinedload(Review.profile)).filter(
        Review.rating == 5
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()


@router.get("/property/{property_id}", response_model=List[ReviewResponse])
async def fetch_property_reviews(property_id: int, db: Session = Depends(get_db)):
    return db.query(Review).options(joinedload(Review.profile)).filter(
        Review.property_id == property_id
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()


@router.get("/property/{property_id}/existing", response_model=ExistingReview)
async def find_existing_review(
    property_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    review = db.query(Review.id).filter(
        Review.property_id == property_id,
        Review.profile_id == profile.id
    ).first()
    return ExistingReview(review_id=review[0] if review else None)


@router.delete("/{review_id}", response_model=ActionResult)
async def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    review = db.query(Review).filter(
        Review.id == review_id,
        Review.profile_id == profile.id
    ).first()
    if not review:
        raise NotFound("Review not found")
    with db_transaction(db):
        db.delete(review)
    return ActionResult(message="Review deleted successfully")
