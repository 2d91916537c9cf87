from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from rentclub.schemas.profile import ProfilePublic


class PropertyCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    tagline: str = Field(min_length=2, max_length=100)
    category: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=1, max_length=100)
    city: str = Field(default="", max_length=100)
    description: str
    price: int = Field(ge=0)
    guests: int = Field(ge=0)
    bedrooms: int = Field(ge=0)
    beds: int = Field(ge=0)
    baths: int = Field(ge=0)
    amenities: str = ""

    @field_validator("description")
    @classmethod
    def description_words(cls, v: str) -> str:
        words = len(v.split())
        if words < 10 or words > 1000:
            raise ValueError("description must be between 10 and 1000 words")
        return v


class PropertyUpdate(PropertyCreate):
    pass


class PropertyCard(BaseModel):
    id: int
    name: str
    tagline: str
    city: str
    image: str
    price: int
    created_at: datetime
    rating: Optional[float] = None
    count: int = 0


class BookedRange(BaseModel):
    check_in: date
    check_out: date

    class Config:
        from_attributes = True


class PropertyOwner(BaseModel):
    id: int
    first_name: str
    last_name: str
    username: str
    profile_image: str

    class Config:
        from_attributes = True


class PropertyResponse(BaseModel):
    id: int
    profile_id: int
    name: str
    tagline: str
    category: str
    image: str
    country: str
    city: str
    description: str
    price: int
    guests: int
    bedrooms: int
    beds: int
    baths: int
    amenities: str
    created_at: datetime

    class Config:
        from_attributes = True


class PropertyDetails(PropertyResponse):
    profile: PropertyOwner
    bookings: List[BookedRange] = []
    rating: float = 0.0
    count: int = 0


class PropertyRating(BaseModel):
    rating: float
    count: int


class FavoriteToggleResult(BaseModel):
    message: str
    favorite_id: Optional[int] = None


class FavoriteId(BaseModel):
    favorite_id: Optional[int] = None


class RentalSummary(BaseModel):
    id: int
    name: str
    price: int
    created_at: datetime
    total_nights_sum: Optional[int] = None
    order_total_sum: Optional[Decimal] = None


class ReservationStats(BaseModel):
    properties: int
    nights: int
    amount: Decimal
