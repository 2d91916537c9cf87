from datetime import date, datetime
from decimal import Decimal

from rentclub.models import Booking, GeneralVariable, Member, PointTransaction, Reward, Tier, WithdrawalRequest
from rentclub.services.stats_service import fetch_charts_data, subtract_months

from tests.helpers import auth_headers, make_booking, make_member, make_profile, make_property, make_tier

ADMIN = auth_headers("admin-user")


# ---------- REFERRAL CODES AND REGISTRATION ----------

def test_referral_validate_endpoint(client, db_session):
    tier = make_tier(db_session)
    make_member(db_session, make_profile(db_session, "ref"), tier, "REF001")

    assert client.post("/api/v1/members/referral/validate", json={"code": "REF001"}).json() == {"valid": True}
    assert client.post("/api/v1/members/referral/validate", json={"code": " NOPE00 "}).json() == {"valid": False}
    own = client.post("/api/v1/members/referral/validate", json={"code": "REF001"}, headers=auth_headers("ref"))
    assert own.json() == {"valid": False}


def test_registration_details_follow_general_variable(client, db_session):
    assert Decimal(str(client.get("/api/v1/members/registration-details").json()["order_total"])) == Decimal("15000000")

    response = client.put(
        "/api/v1/admin/general-variables",
        json={"variable_name": "exclusiveMemberPrice", "variable_value": "2000000", "variable_type": "number"},
        headers=ADMIN,
    )
    assert response.status_code == 200
    assert Decimal(str(client.get("/api/v1/members/registration-details").json()["order_total"])) == Decimal("2000000")


def test_general_variable_type_is_checked(client, db_session):
    response = client.put(
        "/api/v1/admin/general-variables",
        json={"variable_name": "exclusiveMemberPrice", "variable_value": "lots", "variable_type": "number"},
        headers=ADMIN,
    )
    assert response.status_code == 422
    assert "variable_value must be numeric" in response.json()["message"]
    assert db_session.query(GeneralVariable).count() == 0


# ---------- DASHBOARD AND DOWNLINE ----------

def test_member_dashboard(client, db_session):
    tier = make_tier(db_session, "Tier 1", "10")
    ref_profile = make_profile(db_session, "ref", "Rita")
    referrer = make_member(db_session, ref_profile, tier, "REF001", point=2)
    guest = make_profile(db_session, "guest", "Gina")
    prop = make_property(db_session, make_profile(db_session, "owner"))
    make_booking(db_session, guest, prop, referral_code="REF001", commission="100000")
    db_session.add(PointTransaction(member_id=referrer.id, profile_id=guest.id, point=1, description="Membership Referral"))
    db_session.add(Reward(reward_name="Spa Voucher", point_req=3))
    db_session.commit()

    response = client.get("/api/v1/members/me/dashboard", headers=auth_headers("ref"))

    assert response.status_code == 200
    body = response.json()
    assert body["member"]["member_code"] == "REF001"
    assert body["tier"]["tier_name"] == "Tier 1"
    assert [r["reward_name"] for r in body["rewards"]] == ["Spa Voucher"]
    assert len(body["referral_details"]) == 1
    assert body["referral_details"][0]["type"] == "Booking"
    assert body["referral_details"][0]["profile"]["first_name"] == "Gina"
    assert body["loyalty_point_details"][0]["type"] == "Membership Referral"


def test_dashboard_without_membership_is_not_found(client, db_session):
    make_profile(db_session, "plain")
    response = client.get("/api/v1/members/me/dashboard", headers=auth_headers("plain"))
    assert response.status_code == 404
    assert response.json() == {"message": "Member not found"}


def test_downline_visible_to_owner_and_admin_only(client, db_session):
    tier = make_tier(db_session)
    make_member(db_session, make_profile(db_session, "root", "Root"), tier, "ROOT01")
    make_member(db_session, make_profile(db_session, "kid", "Kid"), tier, "KID001", parent_code="ROOT01")
    make_profile(db_session, "stranger")

    own = client.get("/api/v1/members/ROOT01/downline", headers=auth_headers("root"))
    assert own.status_code == 200
    assert [node["member_code"] for node in own.json()] == ["KID001"]

    assert client.get("/api/v1/members/ROOT01/downline", headers=ADMIN).status_code == 200

    denied = client.get("/api/v1/members/ROOT01/downline", headers=auth_headers("stranger"), follow_redirects=False)
    assert denied.status_code == 303
    assert denied.headers["location"] == "/"


def test_update_member_details(client, db_session):
    tier = make_tier(db_session)
    profile = make_profile(db_session, "ref")
    member = make_member(db_session, profile, tier, "REF001")
    payload = {
        "email": "rita@example.com",
        "citizen": "Indonesia",
        "phone": "0812000000",
        "address": "Jl. Melati 3",
        "gender": "female",
        "bank_name": "Mandiri",
        "bank_acc_num": "998877",
        "bank_acc_name": "Rita Smith",
        "birth_date": "1988-07-09",
    }

    response = client.put(f"/api/v1/members/{member.id}", json=payload, headers=auth_headers("ref"))

    assert response.status_code == 200
    db_session.refresh(profile)
    assert profile.bank_name == "Mandiri"
    assert profile.dob == "1988-07-09"


# ---------- REWARDS ----------

def member_with_points(db_session, point):
    tier = make_tier(db_session)
    member = make_member(db_session, make_profile(db_session, "ref"), tier, "REF001", point=point)
    reward = Reward(reward_name="Spa Voucher", point_req=3)
    db_session.add(reward)
    db_session.commit()
    return member, reward


def test_redeem_reward_deducts_points(client, db_session):
    member, reward = member_with_points(db_session, 5)

    response = client.post(f"/api/v1/rewards/{reward.id}/redeem", headers=auth_headers("ref"))

    assert response.status_code == 200
    assert response.json() == {"message": "Reward redeemed successfully", "remaining_points": 2}
    db_session.refresh(member)
    assert member.point == 2
    entry = db_session.query(PointTransaction).one()
    assert entry.point == -3
    assert entry.description == "Redeem Reward: Spa Voucher"
    assert entry.reward_id == reward.id


def test_redeem_reward_without_enough_points(client, db_session):
    member, reward = member_with_points(db_session, 2)

    response = client.post(f"/api/v1/rewards/{reward.id}/redeem", headers=auth_headers("ref"))

    assert response.status_code == 400
    assert response.json() == {"message": "Not enough points to redeem this reward"}
    db_session.refresh(member)
    assert member.point == 2
    assert db_session.query(PointTransaction).count() == 0


def test_redeem_unknown_reward(client, db_session):
    member_with_points(db_session, 5)
    response = client.post("/api/v1/rewards/999/redeem", headers=auth_headers("ref"))
    assert response.status_code == 404
    assert response.json() == {"message": "Reward not found"}


def test_deleting_reward_keeps_ledger(client, db_session):
    member, reward = member_with_points(db_session, 5)
    client.post(f"/api/v1/rewards/{reward.id}/redeem", headers=auth_headers("ref"))

    assert client.delete(f"/api/v1/admin/rewards/{reward.id}", headers=ADMIN).status_code == 200

    entry = db_session.query(PointTransaction).one()
    db_session.refresh(entry)
    assert entry.reward_id is None
    assert entry.description == "Redeem Reward: Spa Voucher"


# ---------- WITHDRAWALS ----------

def member_with_commission(db_session, commission="100000", with_bank=True):
    tier = make_tier(db_session)
    profile = make_profile(db_session, "ref", with_bank=with_bank)
    return make_member(db_session, profile, tier, "REF001", commission=commission)


def test_withdrawal_request_and_approval(client, db_session):
    member = member_with_commission(db_session)
    headers = auth_headers("ref")

    created = client.post("/api/v1/members/me/withdrawals", json={"amount": "60000"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["status"] == "Pending"
    assert created.json()["bank_name"] == "BCA"

    # pending requests count against the available balance
    too_much = client.post("/api/v1/members/me/withdrawals", json={"amount": "50000"}, headers=headers)
    assert too_much.status_code == 400
    assert too_much.json() == {"message": "Withdrawal amount exceeds available commission"}

    withdrawal_id = created.json()["id"]
    pending = client.get("/api/v1/admin/withdrawals", params={"status": "Pending"}, headers=ADMIN).json()
    assert [w["id"] for w in pending] == [withdrawal_id]

    approved = client.post(f"/api/v1/admin/withdrawals/{withdrawal_id}/approve", headers=ADMIN)
    assert approved.status_code == 200
    assert approved.json()["status"] == "Approved"
    db_session.refresh(member)
    assert member.commission == Decimal("40000")

    again = client.post(f"/api/v1/admin/withdrawals/{withdrawal_id}/approve", headers=ADMIN)
    assert again.status_code == 409
    assert again.json() == {"message": "Withdrawal request is already Approved"}


def test_withdrawal_rejection_keeps_balance(client, db_session):
    member = member_with_commission(db_session)
    created = client.post("/api/v1/members/me/withdrawals", json={"amount": "30000"}, headers=auth_headers("ref"))

    rejected = client.post(f"/api/v1/admin/withdrawals/{created.json()['id']}/reject", headers=ADMIN)

    assert rejected.json()["status"] == "Rejected"
    db_session.refresh(member)
    assert member.commission == Decimal("100000")


def test_withdrawal_requires_bank_details(client, db_session):
    member_with_commission(db_session, with_bank=False)
    response = client.post("/api/v1/members/me/withdrawals", json={"amount": "10"}, headers=auth_headers("ref"))
    assert response.status_code == 400
    assert db_session.query(WithdrawalRequest).count() == 0


def test_withdrawal_amount_must_be_positive(client, db_session):
    member_with_commission(db_session)
    response = client.post("/api/v1/members/me/withdrawals", json={"amount": "0"}, headers=auth_headers("ref"))
    assert response.status_code == 422
    assert response.json()["message"].startswith("amount:")


# ---------- ADMIN ----------

def test_admin_stats_are_cached_until_refresh(client, db_session):
    owner = make_profile(db_session, "owner")
    guest = make_profile(db_session, "guest")
    prop = make_property(db_session, owner)
    make_booking(db_session, guest, prop)
    make_booking(db_session, guest, prop, check_in=date(2024, 3, 1), paid=False)

    stats = client.get("/api/v1/admin/stats", headers=ADMIN).json()
    assert stats == {"users_count": 2, "properties_count": 1, "bookings_count": 1, "members_count": 0}

    make_profile(db_session, "late")
    assert client.get("/api/v1/admin/stats", headers=ADMIN).json()["users_count"] == 2
    assert client.get("/api/v1/admin/stats", params={"refresh": True}, headers=ADMIN).json()["users_count"] == 3


def test_subtract_months_crosses_year():
    assert subtract_months(datetime(2024, 3, 10, 15, 30), 6) == datetime(2023, 9, 1)
    assert subtract_months(datetime(2024, 12, 31), 12) == datetime(2023, 12, 1)


def test_charts_group_paid_bookings_by_month(db_session):
    owner = make_profile(db_session, "owner")
    guest = make_profile(db_session, "guest")
    prop = make_property(db_session, owner)
    for created_at, paid in [
        (datetime(2023, 6, 1), True),
        (datetime(2024, 1, 15), True),
        (datetime(2024, 1, 20), True),
        (datetime(2024, 2, 5), False),
        (datetime(2024, 3, 2), True),
    ]:
        booking = make_booking(db_session, guest, prop, paid=paid)
        booking.created_at = created_at
    db_session.commit()

    points = fetch_charts_data(db_session, now=datetime(2024, 3, 10))

    assert [(p.date, p.count) for p in points] == [("January 2024", 2), ("March 2024", 1)]


def test_tier_management(client, db_session):
    created = client.post(
        "/api/v1/admin/tiers",
        json={"tier_name": "Gold", "commission": "15", "min_referrals": 10},
        headers=ADMIN,
    )
    assert created.status_code == 201
    duplicate = client.post("/api/v1/admin/tiers", json={"tier_name": "Gold", "commission": "5"}, headers=ADMIN)
    assert duplicate.status_code == 409

    updated = client.put(f"/api/v1/admin/tiers/{created.json()['id']}", json={"commission": "17.5"}, headers=ADMIN)
    assert updated.status_code == 200
    assert Decimal(str(updated.json()["commission"])) == Decimal("17.5")
    assert db_session.query(Tier).one().min_referrals == 10


def test_admin_members_list_counts_active_downline(client, db_session):
    tier = make_tier(db_session)
    make_member(db_session, make_profile(db_session, "root"), tier, "ROOT01")
    make_member(db_session, make_profile(db_session, "a"), tier, "CHILDA", parent_code="ROOT01")
    make_member(db_session, make_profile(db_session, "b"), tier, "CHILDB", parent_code="ROOT01", is_active=False)

    everyone = client.get("/api/v1/admin/members", headers=ADMIN).json()
    counts = {m["member"]["member_code"]: m["downline_count"] for m in everyone}
    assert counts == {"ROOT01": 1, "CHILDA": 0, "CHILDB": 0}

    inactive = client.get("/api/v1/admin/members", params={"active": False}, headers=ADMIN).json()
    assert [m["member"]["member_code"] for m in inactive] == ["CHILDB"]


def test_member_requests_list_registrations(client, db_session):
    make_tier(db_session, "Tier 1")
    make_profile(db_session, "new", "Nina")
    client.post(
        "/api/v1/members/",
        json={
            "first_name": "Nina",
            "last_name": "Wijaya",
            "email": "nina@example.com",
            "citizen": "Indonesia",
            "phone": "0811111111",
            "address": "Jl. Kenanga 2",
            "gender": "female",
            "bank_name": "BNI",
            "bank_acc_num": "555000111",
            "bank_acc_name": "Nina Wijaya",
            "birth_date": "1995-03-02",
        },
        headers=auth_headers("new"),
    )

    requests = client.get("/api/v1/admin/member-requests", headers=ADMIN).json()

    assert len(requests) == 1
    assert requests[0]["first_name"] == "Nina"
    assert requests[0]["is_active"] is False
    assert requests[0]["payment_status"] is False
    assert db_session.query(Member).count() == 1
    assert db_session.query(Booking).count() == 0
