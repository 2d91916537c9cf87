from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from rentclub.schemas.profile import ProfilePublic


class ReviewCreate(BaseModel):
    property_id: int
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=10, max_length=1000)


class ReviewResponse(BaseModel):
    id: int
    rating: int
    comment: str
    profile: ProfilePublic

    class Config:
        from_attributes = True


class ReviewedProperty(BaseModel):
    name: str
    image: str

    class Config:
        from_attributes = True


class MyReviewResponse(BaseModel):
    id: int
    rating: int
    comment: str
    property: ReviewedProperty

    class Config:
        from_attributes = True


class ExistingReview(BaseModel):
    review_id: Optional[int] = None
