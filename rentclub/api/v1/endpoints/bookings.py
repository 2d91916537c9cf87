from typing import List
from decimal import Decimal
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import NotFound
from rentclub.core.logging_config import get_logger
from rentclub.models.booking import Booking
from rentclub.models.profile import Profile
from rentclub.models.property import Property
from rentclub.api.v1.endpoints.auth import get_current_profile
from rentclub.schemas.booking import BookingCreate, BookingCreated, BookingResponse, ReservationResponse
from rentclub.schemas.common import ActionResult
from rentclub.schemas.property import ReservationStats
from rentclub.services.booking_service import create_booking

logger = get_logger("bookings")

router = APIRouter()


@router.post("/", response_model=BookingCreated, status_code=201)
async def create_booking_endpoint(
    body: BookingCreate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    booking, totals = create_booking(db, profile, body)
    return BookingCreated(
        message="Booking created, continue to checkout",
        booking_id=booking.id,
        total_nights=totals.total_nights,
        order_total=totals.order_total,
        discount=totals.discount,
        checkout_path=f"/checkout?bookingId={booking.id}",
    )


@router.get("/", response_model=List[BookingResponse])
async def fetch_bookings(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Caller's paid bookings, newest first."""
    return db.query(Booking).options(joinedload(Booking.property)).filter(
        Booking.profile_id == profile.id,
        Booking.payment_status == True
    ).order_by(Booking.created_at.desc(), Booking.id.desc()).all()


@router.get("/reservations", response_model=List[ReservationResponse])
async def fetch_reservations(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    """Paid bookings made by others on the caller's listings."""
    return db.query(Booking).join(Property, Booking.property_id == Property.id).options(
        joinedload(Booking.profile),
        joinedload(Booking.property)
    ).filter(
        Property.profile_id == profile.id,
        Booking.payment_status == True
    ).order_by(Booking.created_at.desc(), Booking.id.desc()).all()


@router.get("/reservations/stats", response_model=ReservationStats)
async def fetch_reservation_stats(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    properties = db.query(func.count(Property.id)).filter(Property.profile_id == profile.id).scalar() or 0
    nights, amount = db.query(
        func.sum(Booking.total_nights),
        func.sum(Booking.order_total)
    ).join(Property, Booking.property_id == Property.id).filter(
        Property.profile_id == profile.id,
        Booking.payment_status == True
    ).one()
    return ReservationStats(
        properties=properties,
        nights=nights or 0,
        amount=Decimal(str(amount)) if amount is not None else Decimal(0),
    )


@router.delete("/{booking_id}", response_model=ActionResult)
async def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    booking = db.query(Booking).filter(
        Booking.id == booking_id,
        Booking.profile_id == profile.id
    ).first()
    if not booking:
        raise NotFound("Booking not found")
    with db_transaction(db):
        db.delete(booking)
    logger.info(f"Booking {booking_id} deleted by profile {profile.id}")
    return ActionResult(message="Booking deleted successfully")
