from datetime import date
from decimal import Decimal

import pytest

from rentclub.models import Member, MembershipCommissionTransaction, PointTransaction
from rentclub.services.payment_service import CheckoutSession, PaymentGateway, PaymentGatewayError

from tests.helpers import auth_headers, make_booking, make_member, make_profile, make_property, make_tier


def booked_with_referral(db_session, paid=False):
    tier = make_tier(db_session, commission="10")
    referrer = make_member(db_session, make_profile(db_session, "ref"), tier, "REF001", point=3)
    owner = make_profile(db_session, "owner")
    guest = make_profile(db_session, "guest")
    prop = make_property(db_session, owner, price=500000)
    booking = make_booking(
        db_session, guest, prop, check_in=date(2024, 1, 1), nights=2, paid=paid,
        referral_code="REF001", commission="100000",
    )
    return referrer, booking


# ---------- BOOKINGS ----------

def test_booking_checkout_creates_session(client, db_session, gateway):
    _, booking = booked_with_referral(db_session)

    response = client.post(
        "/api/v1/payments/booking/checkout",
        json={"booking_id": booking.id},
        headers=auth_headers("guest"),
    )

    assert response.status_code == 200
    assert response.json()["session_id"] == "cs_test_1"
    assert gateway.created[0]["metadata"] == {"bookingId": str(booking.id)}
    assert Decimal(str(gateway.created[0]["amount"])) == Decimal("1000000")


def test_booking_confirmation_credits_referrer_once(client, db_session, gateway):
    referrer, booking = booked_with_referral(db_session)
    session_id = gateway.add_session({"bookingId": str(booking.id)})

    response = client.get(
        "/api/v1/payments/booking/confirm",
        params={"session_id": session_id},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/bookings"
    db_session.refresh(referrer)
    db_session.refresh(booking)
    assert booking.payment_status is True
    assert booking.commission_transaction.payment_status is True
    assert referrer.commission == Decimal("100000")
    assert referrer.point == 3

    again = client.get(
        "/api/v1/payments/booking/confirm",
        params={"session_id": session_id},
        follow_redirects=False,
    )
    assert again.status_code == 303
    db_session.refresh(referrer)
    assert referrer.commission == Decimal("100000")


def test_booking_confirmation_requires_complete_session(client, db_session, gateway):
    referrer, booking = booked_with_referral(db_session)
    session_id = gateway.add_session({"bookingId": str(booking.id)}, status="open")

    response = client.get("/api/v1/payments/booking/confirm", params={"session_id": session_id}, follow_redirects=False)

    assert response.status_code == 400
    assert response.json() == {"message": "Payment has not been completed"}
    db_session.refresh(booking)
    db_session.refresh(referrer)
    assert booking.payment_status is False
    assert referrer.commission == Decimal("0")


def test_booking_confirmation_rejects_overlap_taken_meanwhile(client, db_session, gateway):
    referrer, booking = booked_with_referral(db_session)
    other = make_profile(db_session, "other")
    make_booking(db_session, other, booking.property, check_in=date(2024, 1, 2), nights=1)
    session_id = gateway.add_session({"bookingId": str(booking.id)})

    response = client.get("/api/v1/payments/booking/confirm", params={"session_id": session_id}, follow_redirects=False)

    assert response.status_code == 409
    db_session.refresh(booking)
    db_session.refresh(referrer)
    assert booking.payment_status is False
    assert referrer.commission == Decimal("0")


def test_booking_confirmation_unknown_session_is_bad_gateway(client, db_session):
    response = client.get("/api/v1/payments/booking/confirm", params={"session_id": "cs_missing"}, follow_redirects=False)
    assert response.status_code == 502
    assert "message" in response.json()


def test_booking_checkout_rejects_paid_booking(client, db_session):
    _, booking = booked_with_referral(db_session, paid=True)
    response = client.post(
        "/api/v1/payments/booking/checkout",
        json={"booking_id": booking.id},
        headers=auth_headers("guest"),
    )
    assert response.status_code == 409


# ---------- MEMBERSHIP ----------

def registered_member(client, db_session, referral_code="REF001", closer_code="", auth_id="new", create_profile=True):
    if create_profile:
        make_profile(db_session, auth_id, "Nina")
    response = client.post(
        "/api/v1/members/",
        json={
            "first_name": "Nina",
            "last_name": "Wijaya",
            "email": f"{auth_id}@example.com",
            "citizen": "Indonesia",
            "phone": "0811111111",
            "address": "Jl. Kenanga 2",
            "gender": "female",
            "bank_name": "BNI",
            "bank_acc_num": "555000111",
            "bank_acc_name": "Nina Wijaya",
            "birth_date": "1995-03-02",
            "referral_code": referral_code,
            "closer_code": closer_code,
        },
        headers=auth_headers(auth_id),
    )
    assert response.status_code == 201, response.json()
    return response.json()


def test_referrer_registering_again_keeps_referees_confirmable(client, db_session, gateway):
    make_tier(db_session, "Tier 1", "10", 0)
    alice = registered_member(client, db_session, referral_code="", auth_id="alice")
    registered_member(client, db_session, referral_code=alice["member_code"], auth_id="bob")

    # alice has not paid yet and fills in the form again
    again = registered_member(client, db_session, referral_code="", auth_id="alice", create_profile=False)
    assert again["member_code"] == alice["member_code"]

    checkout = client.post("/api/v1/payments/membership/checkout", headers=auth_headers("bob"))
    session_id = checkout.json()["session_id"]
    gateway.complete(session_id)
    response = client.get("/api/v1/payments/membership/confirm", params={"session_id": session_id}, follow_redirects=False)

    assert response.status_code == 303
    bob = db_session.query(Member).filter(Member.parent_code == alice["member_code"]).one()
    assert bob.is_active is True
    referrer = db_session.query(Member).filter(Member.member_code == alice["member_code"]).one()
    assert referrer.commission == Decimal("1500000")
    assert referrer.point == 1


def test_membership_confirmation_activates_and_rewards(client, db_session, gateway):
    tier1 = make_tier(db_session, "Tier 1", "10", 0)
    tier2 = make_tier(db_session, "Tier 2", "12.5", 1)
    referrer = make_member(db_session, make_profile(db_session, "ref"), tier1, "REF001")
    closer = make_member(db_session, make_profile(db_session, "closer"), tier1, "CLS001")
    registered = registered_member(client, db_session, closer_code="CLS001")

    checkout = client.post("/api/v1/payments/membership/checkout", headers=auth_headers("new"))
    assert checkout.status_code == 200
    session_id = checkout.json()["session_id"]
    assert gateway.created[0]["metadata"]["transactionId"] == str(registered["transaction_id"])
    gateway.complete(session_id)

    response = client.get(
        "/api/v1/payments/membership/confirm",
        params={"session_id": session_id},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"] == "/member/dashboard"
    member = db_session.query(Member).filter(Member.member_code == registered["member_code"]).one()
    assert member.is_active is True
    db_session.refresh(referrer)
    db_session.refresh(closer)
    assert referrer.commission == Decimal("1500000")
    assert referrer.point == 1
    assert referrer.tier_id == tier2.id
    assert closer.commission == Decimal("450000")
    assert closer.point == 0
    entry = db_session.query(PointTransaction).one()
    assert entry.member_id == referrer.id
    assert entry.description == "Membership Referral"
    transaction = db_session.query(MembershipCommissionTransaction).one()
    assert transaction.payment_status is True

    # confirming again must not credit twice
    client.get("/api/v1/payments/membership/confirm", params={"session_id": session_id}, follow_redirects=False)
    db_session.refresh(referrer)
    assert referrer.commission == Decimal("1500000")
    assert referrer.point == 1
    assert db_session.query(PointTransaction).count() == 1


def test_membership_confirmation_without_referrer(client, db_session, gateway):
    make_tier(db_session, "Tier 1", "10", 0)
    registered = registered_member(client, db_session, referral_code="")
    session_id = gateway.add_session({
        "memberId": str(db_session.query(Member).one().id),
        "transactionId": str(registered["transaction_id"]),
    })

    response = client.get("/api/v1/payments/membership/confirm", params={"session_id": session_id}, follow_redirects=False)

    assert response.status_code == 303
    assert db_session.query(Member).one().is_active is True
    assert db_session.query(PointTransaction).count() == 0


def test_membership_confirmation_rejects_mismatched_member(client, db_session, gateway):
    make_tier(db_session, "Tier 1", "10", 0)
    registered = registered_member(client, db_session, referral_code="")
    session_id = gateway.add_session({"memberId": "999", "transactionId": str(registered["transaction_id"])})

    response = client.get("/api/v1/payments/membership/confirm", params={"session_id": session_id}, follow_redirects=False)

    assert response.status_code == 400
    assert db_session.query(Member).one().is_active is False


# ---------- GATEWAY CLIENT ----------

class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


def test_gateway_sends_form_encoded_session(monkeypatch):
    captured = {}

    def fake_request(method, url, data=None, auth=None, timeout=None):
        captured.update(method=method, url=url, data=data, auth=auth)
        return FakeResponse(200, {"id": "cs_1", "status": "open", "url": "https://pay", "metadata": {"bookingId": "7"}})

    monkeypatch.setattr("rentclub.services.payment_service.requests.request", fake_request)
    gateway = PaymentGateway("sk_live", "https://api.example.com/v1/", "idr", 100)

    session = gateway.create_session(Decimal("1000000"), "Beach House", {"bookingId": "7"}, "https://ok", "https://cancel")

    assert isinstance(session, CheckoutSession)
    assert session.id == "cs_1"
    assert captured["method"] == "POST"
    assert captured["url"] == "https://api.example.com/v1/checkout/sessions"
    assert captured["auth"] == ("sk_live", "")
    assert captured["data"]["line_items[0][price_data][unit_amount]"] == 100000000
    assert captured["data"]["metadata[bookingId]"] == "7"


def test_gateway_maps_provider_errors(monkeypatch):
    monkeypatch.setattr(
        "rentclub.services.payment_service.requests.request",
        lambda *a, **k: FakeResponse(500, {"error": "boom"}),
    )
    gateway = PaymentGateway("sk_live", "https://api.example.com/v1", "idr", 100)
    with pytest.raises(PaymentGatewayError) as exc_info:
        gateway.retrieve_session("cs_1")
    assert exc_info.value.status_code == 502


def test_gateway_without_key_is_not_configured():
    gateway = PaymentGateway("", "https://api.example.com/v1", "idr", 100)
    with pytest.raises(PaymentGatewayError) as exc_info:
        gateway.retrieve_session("cs_1")
    assert exc_info.value.message == "Payment provider is not configured"
