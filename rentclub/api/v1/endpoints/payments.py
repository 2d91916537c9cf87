"""
Checkout and confirmation for bookings and memberships.

The provider redirects the browser to the confirm endpoints with
``session_id``; a successful confirmation answers with a 303 to the page the
user should land on.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from rentclub.core.config import settings
from rentclub.core.database import get_db
from rentclub.models.profile import Profile
from rentclub.api.v1.endpoints.auth import get_current_profile
from rentclub.schemas.payment import CheckoutSessionResponse
from rentclub.services.payment_service import (
    PaymentGateway,
    confirm_booking_payment,
    confirm_membership_payment,
    create_booking_checkout,
    create_membership_checkout,
    get_payment_gateway,
)

router = APIRouter()


class BookingCheckoutRequest(BaseModel):
    booking_id: int


@router.post("/booking/checkout", response_model=CheckoutSessionResponse)
async def booking_checkout(
    body: BookingCheckoutRequest,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    session = create_booking_checkout(db, gateway, profile, body.booking_id)
    return CheckoutSessionResponse(session_id=session.id, url=session.url)


@router.get("/booking/confirm")
async def booking_confirm(
    session_id: str = Query(""),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    confirm_booking_payment(db, gateway, session_id)
    return RedirectResponse(url=settings.BOOKINGS_PATH, status_code=303)


@router.post("/membership/checkout", response_model=CheckoutSessionResponse)
async def membership_checkout(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    session = create_membership_checkout(db, gateway, profile)
    return CheckoutSessionResponse(session_id=session.id, url=session.url)


@router.get("/membership/confirm")
async def membership_confirm(
    session_id: str = Query(""),
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    confirm_membership_payment(db, gateway, session_id)
    return RedirectResponse(url=settings.MEMBER_DASHBOARD_PATH, status_code=303)
