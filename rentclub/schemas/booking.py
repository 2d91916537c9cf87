from pydantic import BaseModel, model_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

from rentclub.schemas.profile import ProfileName


class BookingCreate(BaseModel):
    property_id: int
    check_in: date
    check_out: date
    referral_code: str = ""

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingCreated(BaseModel):
    message: str
    booking_id: int
    total_nights: int
    order_total: Decimal
    discount: Decimal
    checkout_path: str


class BookingProperty(BaseModel):
    id: int
    name: str
    city: str

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: int
    property_id: int
    check_in: date
    check_out: date
    total_nights: int
    order_total: Decimal
    payment_status: bool
    created_at: datetime
    property: BookingProperty

    class Config:
        from_attributes = True


class ReservationProperty(BookingProperty):
    price: int


class ReservationResponse(BaseModel):
    id: int
    check_in: date
    check_out: date
    total_nights: int
    order_total: Decimal
    created_at: datetime
    profile: ProfileName
    property: ReservationProperty

    class Config:
        from_attributes = True


class BookingTotals(BaseModel):
    total_nights: int
    subtotal: Decimal
    discount: Decimal
    order_total: Decimal
    referral_code: Optional[str] = None
