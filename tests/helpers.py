from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Optional

from rentclub.core.security import create_access_token
from rentclub.models import Booking, BookingCommissionTransaction, Member, Profile, Property, Tier
from rentclub.services.payment_service import CheckoutSession, PaymentGateway, PaymentGatewayError

DESCRIPTION = "A bright and quiet place close to the beach with a large garden and fast wifi."


class FakePaymentGateway(PaymentGateway):
    """Keeps checkout sessions in memory instead of calling the provider."""

    def __init__(self):
        super().__init__(secret_key="sk_test", api_base="https://payments.invalid", currency="idr", amount_multiplier=100)
        self.sessions: Dict[str, CheckoutSession] = {}
        self.created = []

    def create_session(self, amount, product_name, metadata, success_url, cancel_url):
        session_id = f"cs_test_{len(self.sessions) + 1}"
        session = CheckoutSession(
            id=session_id,
            status="open",
            url=f"https://checkout.invalid/{session_id}",
            metadata=dict(metadata),
        )
        self.sessions[session_id] = session
        self.created.append({"amount": amount, "product_name": product_name, "metadata": dict(metadata)})
        return session

    def retrieve_session(self, session_id):
        if session_id not in self.sessions:
            raise PaymentGatewayError()
        return self.sessions[session_id]

    def complete(self, session_id: str) -> None:
        self.sessions[session_id].status = "complete"

    def add_session(self, metadata: Dict[str, str], status: str = "complete") -> str:
        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.sessions[session_id] = CheckoutSession(id=session_id, status=status, metadata=metadata)
        return session_id


# ---------- TEST DATA HELPERS ----------

def auth_headers(subject: str, email: Optional[str] = None) -> Dict[str, str]:
    token = create_access_token({"sub": subject, "email": email or f"{subject}@example.com"})
    return {"Authorization": f"Bearer {token}"}


def make_profile(db, auth_id="user-1", first_name="Alice", last_name="Smith", with_bank=False) -> Profile:
    profile = Profile(
        auth_id=auth_id,
        first_name=first_name,
        last_name=last_name,
        username=f"{first_name.lower()}_{auth_id}",
        email=f"{auth_id}@example.com",
        profile_image="",
    )
    if with_bank:
        profile.bank_name = "BCA"
        profile.bank_acc_num = "1234567890"
        profile.bank_acc_name = f"{first_name} {last_name}"
    db.add(profile)
    db.commit()
    return profile


def make_tier(db, tier_name="Tier 1", commission="10", min_referrals=0) -> Tier:
    tier = Tier(tier_name=tier_name, commission=Decimal(commission), min_referrals=min_referrals)
    db.add(tier)
    db.commit()
    return tier


def make_member(db, profile, tier, member_code, parent_code=None, is_active=True, point=0, commission="0") -> Member:
    member = Member(
        profile_id=profile.id,
        member_code=member_code,
        parent_code=parent_code,
        tier_id=tier.id,
        commission=Decimal(commission),
        point=point,
        is_active=is_active,
    )
    db.add(member)
    db.commit()
    return member


def make_property(db, owner, name="Beach House", price=500000, category="villa") -> Property:
    prop = Property(
        profile_id=owner.id,
        name=name,
        tagline="Sea view retreat",
        category=category,
        image="/uploads/properties/test.jpg",
        country="ID",
        city="Bali",
        description=DESCRIPTION,
        price=price,
        guests=4,
        bedrooms=2,
        beds=2,
        baths=1,
        amenities="wifi",
    )
    db.add(prop)
    db.commit()
    return prop


def make_booking(db, profile, prop, check_in=date(2024, 1, 1), nights=2, paid=True, referral_code=None, commission="0") -> Booking:
    booking = Booking(
        profile_id=profile.id,
        property_id=prop.id,
        check_in=check_in,
        check_out=check_in + timedelta(days=nights),
        total_nights=nights,
        order_total=Decimal(prop.price) * nights,
        payment_status=paid,
    )
    db.add(booking)
    db.flush()
    db.add(BookingCommissionTransaction(
        profile_id=profile.id,
        booking_id=booking.id,
        referral_code=referral_code,
        commission=Decimal(commission),
        payment_status=paid,
    ))
    db.commit()
    return booking
