"""
Payment Service for RentClub

Hosted checkout through a Stripe-compatible REST API, plus the confirmation
flows that mark bookings / memberships paid and propagate commissions.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

import requests
from sqlalchemy.orm import Session

from rentclub.core.config import settings
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import Conflict, ExternalServiceError, NotFound, ValidationFailed
from rentclub.core.logging_config import get_logger
from rentclub.models.booking import Booking
from rentclub.models.commission import CommissionKindEnum, MembershipCommissionTransaction
from rentclub.models.member import Member
from rentclub.models.profile import Profile
from rentclub.services.booking_service import has_paid_overlap
from rentclub.services.membership_service import (
    apply_commission,
    credit_closer,
    get_member_by_code,
    get_member_by_profile,
    record_referral_point,
    update_member_tier,
)

logger = get_logger("payment_service")

SESSION_COMPLETE = "complete"


class PaymentGatewayError(ExternalServiceError):
    default_message = "Payment provider is unavailable, please try again later"


class PaymentNotCompleted(ValidationFailed):
    default_message = "Payment has not been completed"


@dataclass
class CheckoutSession:
    id: str
    status: Optional[str]
    url: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "CheckoutSession":
        return cls(
            id=data.get("id", ""),
            status=data.get("status"),
            url=data.get("url"),
            metadata=data.get("metadata") or {},
        )


class PaymentGateway:
    """Thin client for hosted checkout sessions."""

    def __init__(self, secret_key: str, api_base: str, currency: str, amount_multiplier: int, timeout: int = 10):
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.currency = currency
        self.amount_multiplier = amount_multiplier
        self.timeout = timeout

    def _request(self, method: str, path: str, data: Optional[dict] = None) -> dict:
        if not self.secret_key:
            logger.warning("Payment provider secret key not configured. Cannot reach checkout API.")
            raise PaymentGatewayError("Payment provider is not configured")
        url = f"{self.api_base}{path}"
        try:
            response = requests.request(method, url, data=data, auth=(self.secret_key, ""), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Payment API request failed: {method} {path}: {e}", exc_info=True)
            raise PaymentGatewayError()
        if response.status_code >= 400:
            logger.error(
                f"Payment API error: {response.status_code} - {response.text}",
                extra={"path": path, "status_code": response.status_code},
            )
            raise PaymentGatewayError()
        return response.json()

    def create_session(
        self,
        amount: Decimal,
        product_name: str,
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        unit_amount = int(Decimal(str(amount)) * self.amount_multiplier)
        data = {
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "line_items[0][quantity]": 1,
            "line_items[0][price_data][currency]": self.currency,
            "line_items[0][price_data][unit_amount]": unit_amount,
            "line_items[0][price_data][product_data][name]": product_name,
        }
        for key, value in metadata.items():
            data[f"metadata[{key}]"] = value
        session = CheckoutSession.from_api(self._request("POST", "/checkout/sessions", data))
        logger.info(f"Checkout session {session.id} created for {product_name} ({unit_amount} {self.currency})")
        return session

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        return CheckoutSession.from_api(self._request("GET", f"/checkout/sessions/{session_id}"))


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway(
        secret_key=settings.STRIPE_SECRET_KEY,
        api_base=settings.STRIPE_API_BASE,
        currency=settings.PAYMENT_CURRENCY,
        amount_multiplier=settings.PAYMENT_AMOUNT_MULTIPLIER,
        timeout=settings.PAYMENT_TIMEOUT_SECONDS,
    )


def _confirm_url(kind: str) -> str:
    return f"{settings.SITE_URL}/api/v1/payments/{kind}/confirm?session_id={{CHECKOUT_SESSION_ID}}"


def create_booking_checkout(db: Session, gateway: PaymentGateway, profile: Profile, booking_id: int) -> CheckoutSession:
    booking = db.query(Booking).filter(
        Booking.id == booking_id,
        Booking.profile_id == profile.id
    ).first()
    if not booking:
        raise NotFound("Booking not found")
    if booking.payment_status:
        raise Conflict("Booking is already paid")
    prop = booking.property
    return gateway.create_session(
        amount=booking.order_total,
        product_name=f"{prop.name} ({booking.total_nights} nights)",
        metadata={"bookingId": str(booking.id)},
        success_url=_confirm_url("booking"),
        cancel_url=f"{settings.SITE_URL}/checkout?bookingId={booking.id}",
    )


def create_membership_checkout(db: Session, gateway: PaymentGateway, profile: Profile) -> CheckoutSession:
    member = get_member_by_profile(db, profile.id)
    if member is None:
        raise NotFound("Member not found")
    if member.is_active:
        raise Conflict("Membership is already active")
    transaction = db.query(MembershipCommissionTransaction).filter(
        MembershipCommissionTransaction.member_id == member.id,
        MembershipCommissionTransaction.payment_status == False
    ).order_by(MembershipCommissionTransaction.id.desc()).first()
    if transaction is None:
        raise NotFound("Membership transaction not found")
    return gateway.create_session(
        amount=transaction.order_total,
        product_name="Exclusive membership",
        metadata={"memberId": str(member.id), "transactionId": str(transaction.id)},
        success_url=_confirm_url("membership"),
        cancel_url=f"{settings.SITE_URL}/member/register",
    )


def _completed_session(gateway: PaymentGateway, session_id: str, *required_keys: str) -> CheckoutSession:
    if not session_id:
        raise ValidationFailed("session_id is required")
    session = gateway.retrieve_session(session_id)
    missing = [key for key in required_keys if not session.metadata.get(key)]
    if session.status != SESSION_COMPLETE or missing:
        logger.warning(f"Checkout session {session_id} not usable: status={session.status}, missing={missing}")
        raise PaymentNotCompleted()
    return session


def _metadata_id(session: CheckoutSession, key: str) -> int:
    try:
        return int(session.metadata[key])
    except (TypeError, ValueError):
        raise ValidationFailed(f"Invalid {key} in payment session")


def confirm_booking_payment(db: Session, gateway: PaymentGateway, session_id: str) -> Booking:
    """Mark the booking paid and credit its referrer. Confirming twice is a no-op."""
    session = _completed_session(gateway, session_id, "bookingId")
    booking = db.query(Booking).filter(Booking.id == _metadata_id(session, "bookingId")).first()
    if booking is None:
        raise NotFound("Booking not found")
    if booking.payment_status:
        logger.info(f"Booking {booking.id} already confirmed (session {session_id})")
        return booking

    with db_transaction(db):
        if has_paid_overlap(db, booking.property_id, booking.check_in, booking.check_out, exclude_booking_id=booking.id):
            raise Conflict("Property is already booked for the selected dates")
        booking.payment_status = True
        transaction = booking.commission_transaction
        if transaction is not None and not transaction.payment_status:
            if transaction.referral_code:
                apply_commission(db, transaction.referral_code, transaction.commission, CommissionKindEnum.BOOKING)
            transaction.payment_status = True

    logger.info(f"Booking {booking.id} confirmed via session {session_id}")
    return booking


def confirm_membership_payment(db: Session, gateway: PaymentGateway, session_id: str) -> Member:
    """
    Activate the member, mark its transaction paid, then credit the referrer
    (commission, one point, tier check) and the closer, all in one unit of work.
    """
    session = _completed_session(gateway, session_id, "memberId", "transactionId")
    transaction = db.query(MembershipCommissionTransaction).filter(
        MembershipCommissionTransaction.id == _metadata_id(session, "transactionId")
    ).first()
    if transaction is None:
        raise NotFound("Membership transaction not found")
    member = transaction.member
    if member is None or member.id != _metadata_id(session, "memberId"):
        raise ValidationFailed("Payment session does not match the membership transaction")
    if transaction.payment_status:
        logger.info(f"Membership transaction {transaction.id} already confirmed (session {session_id})")
        return member

    with db_transaction(db):
        member.is_active = True
        db.flush()
        if transaction.referral_code:
            apply_commission(db, transaction.referral_code, transaction.commission, CommissionKindEnum.MEMBERSHIP)
            record_referral_point(db, get_member_by_code(db, transaction.referral_code), transaction.profile_id)
            update_member_tier(db, transaction.referral_code)
        if transaction.closer_code:
            credit_closer(db, transaction.closer_code, transaction.closer_commission)
        transaction.payment_status = True

    logger.info(f"Membership {member.member_code} activated via session {session_id}")
    return member
