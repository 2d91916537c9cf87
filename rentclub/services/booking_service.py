"""
Booking Service for RentClub

Totals, overlap checks and booking creation.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from rentclub.core.config import settings
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import Conflict, NotFound, ValidationFailed
from rentclub.core.logging_config import get_logger
from rentclub.models.booking import Booking
from rentclub.models.commission import BookingCommissionTransaction
from rentclub.models.profile import Profile
from rentclub.models.property import Property
from rentclub.schemas.booking import BookingCreate, BookingTotals
from rentclub.services.membership_service import calculate_commission, validate_referral_code

logger = get_logger("booking_service")


def calculate_totals(check_in: date, check_out: date, price: int, referral_code: Optional[str] = None) -> BookingTotals:
    total_nights = (check_out - check_in).days
    if total_nights <= 0:
        raise ValidationFailed("Check-out must be after check-in")
    subtotal = Decimal(price) * total_nights
    discount = Decimal(0)
    if referral_code:
        discount = subtotal * Decimal(settings.BOOKING_REFERRAL_DISCOUNT_PERCENT) / Decimal(100)
    return BookingTotals(
        total_nights=total_nights,
        subtotal=subtotal,
        discount=discount,
        order_total=subtotal - discount,
        referral_code=referral_code or None,
    )


def has_paid_overlap(db: Session, property_id: int, check_in: date, check_out: date, exclude_booking_id: Optional[int] = None) -> bool:
    """True when [check_in, check_out) intersects a paid booking of the property."""
    query = db.query(Booking.id).filter(
        Booking.property_id == property_id,
        Booking.payment_status == True,
        Booking.check_in < check_out,
        Booking.check_out > check_in,
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    return query.first() is not None


def create_booking(db: Session, profile: Profile, data: BookingCreate):
    """
    Replace the caller's unpaid bookings with a new one.

    The booking commission transaction is written alongside; the referrer is
    credited only once the booking is paid.

    Returns:
        Tuple of (booking, totals)
    """
    with db_transaction(db):
        unpaid = db.query(Booking).filter(
            Booking.profile_id == profile.id,
            Booking.payment_status == False
        ).all()
        for stale in unpaid:
            db.delete(stale)
        db.flush()

        prop = db.query(Property).filter(Property.id == data.property_id).first()
        if not prop:
            raise NotFound("Property not found")

        referral_code = data.referral_code.strip()
        if referral_code and not validate_referral_code(db, referral_code, profile):
            raise ValidationFailed("Referal code not valid")

        if has_paid_overlap(db, prop.id, data.check_in, data.check_out):
            raise Conflict("Property is already booked for the selected dates")

        totals = calculate_totals(data.check_in, data.check_out, prop.price, referral_code)

        booking = Booking(
            profile_id=profile.id,
            property_id=prop.id,
            check_in=data.check_in,
            check_out=data.check_out,
            total_nights=totals.total_nights,
            order_total=totals.order_total,
            payment_status=False,
        )
        db.add(booking)
        db.flush()

        commission = Decimal(0)
        if referral_code:
            commission = calculate_commission(db, referral_code, totals.order_total)
        db.add(BookingCommissionTransaction(
            profile_id=profile.id,
            booking_id=booking.id,
            referral_code=referral_code or None,
            commission=commission,
            payment_status=False,
        ))
        db.flush()

    logger.info(f"Booking {booking.id} created for property {prop.id} by profile {profile.id}")
    return booking, totals
