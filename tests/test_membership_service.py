from datetime import date
from decimal import Decimal

import pytest

from rentclub.core.errors import Conflict, NotFound, ValidationFailed
from rentclub.models import GeneralVariable, Member, MembershipCommissionTransaction, PointTransaction
from rentclub.models.commission import CommissionKindEnum
from rentclub.schemas.member import MemberCreate
from rentclub.services import membership_service
from rentclub.services.membership_service import (
    CODE_ALPHABET,
    MemberCodeExhausted,
    apply_commission,
    build_downline,
    calculate_closer_commission,
    calculate_commission,
    calculate_registration_totals,
    generate_code,
    generate_unique_member_code,
    record_referral_point,
    register_member,
    update_member_tier,
    validate_referral_code,
)

from tests.helpers import make_member, make_profile, make_tier


def member_payload(**overrides):
    payload = {
        "first_name": "Budi",
        "last_name": "Santoso",
        "email": "budi@example.com",
        "citizen": "Indonesia",
        "phone": "08123456789",
        "address": "Jl. Sunset 1",
        "gender": "male",
        "bank_name": "BCA",
        "bank_acc_num": "1234567890",
        "bank_acc_name": "Budi Santoso",
        "birth_date": date(1990, 5, 17),
    }
    payload.update(overrides)
    return MemberCreate(**payload)


# ---------- CODE GENERATION ----------

def test_generate_code_uses_uppercase_alphanumerics():
    for _ in range(50):
        code = generate_code(6)
        assert len(code) == 6
        assert all(ch in CODE_ALPHABET for ch in code)


def test_generate_unique_member_code_gives_up_after_max_attempts(db_session, monkeypatch):
    tier = make_tier(db_session)
    make_member(db_session, make_profile(db_session), tier, "TAKEN1")
    calls = []

    def colliding(length=6):
        calls.append(length)
        return "TAKEN1"

    monkeypatch.setattr(membership_service, "generate_code", colliding)
    with pytest.raises(MemberCodeExhausted):
        generate_unique_member_code(db_session, max_attempts=10)
    assert len(calls) == 10


def test_generate_unique_member_code_skips_collisions(db_session, monkeypatch):
    tier = make_tier(db_session)
    make_member(db_session, make_profile(db_session), tier, "TAKEN1")
    codes = iter(["TAKEN1", "FRESH2"])
    monkeypatch.setattr(membership_service, "generate_code", lambda length=6: next(codes))
    assert generate_unique_member_code(db_session) == "FRESH2"


# ---------- REFERRAL CODES ----------

def test_validate_referral_code(db_session):
    tier = make_tier(db_session)
    alice = make_profile(db_session, "alice", "Alice")
    bob = make_profile(db_session, "bob", "Bob")
    make_member(db_session, alice, tier, "ALICE1")

    assert validate_referral_code(db_session, "", bob) is False
    assert validate_referral_code(db_session, "NOPE00", bob) is False
    assert validate_referral_code(db_session, "ALICE1", alice) is False
    assert validate_referral_code(db_session, "ALICE1", bob) is True
    assert validate_referral_code(db_session, "ALICE1", None) is True


# ---------- COMMISSION ----------

def test_calculate_commission_uses_referrer_tier_rate(db_session):
    tier = make_tier(db_session, commission="10")
    make_member(db_session, make_profile(db_session), tier, "REF001")
    assert calculate_commission(db_session, "REF001", Decimal("1000000")) == Decimal("100000")


def test_calculate_commission_is_exact(db_session):
    tier = make_tier(db_session, commission="12.5")
    make_member(db_session, make_profile(db_session), tier, "REF001")
    assert calculate_commission(db_session, "REF001", 333) == Decimal("41.625")


def test_calculate_commission_unknown_referrer(db_session):
    with pytest.raises(NotFound):
        calculate_commission(db_session, "NOPE00", 1000)


def test_calculate_closer_commission_is_three_percent():
    assert calculate_closer_commission(Decimal("15000000")) == Decimal("450000")


def test_apply_commission_booking_does_not_add_points(db_session):
    tier = make_tier(db_session)
    referrer = make_member(db_session, make_profile(db_session), tier, "REF001", point=4)
    apply_commission(db_session, "REF001", Decimal("100000"), CommissionKindEnum.BOOKING)
    db_session.commit()
    db_session.refresh(referrer)
    assert referrer.commission == Decimal("100000")
    assert referrer.point == 4


def test_apply_commission_membership_adds_one_point(db_session):
    tier = make_tier(db_session)
    referrer = make_member(db_session, make_profile(db_session), tier, "REF001", point=4, commission="50")
    apply_commission(db_session, "REF001", Decimal("1500000"), CommissionKindEnum.MEMBERSHIP)
    db_session.commit()
    db_session.refresh(referrer)
    assert referrer.commission == Decimal("1500050")
    assert referrer.point == 5


def test_apply_commission_unknown_member(db_session):
    with pytest.raises(NotFound):
        apply_commission(db_session, "NOPE00", 10, CommissionKindEnum.BOOKING)


def test_record_referral_point_writes_ledger_entry(db_session):
    tier = make_tier(db_session)
    referrer = make_member(db_session, make_profile(db_session, "alice"), tier, "REF001")
    referred = make_profile(db_session, "bob", "Bob")
    entry = record_referral_point(db_session, referrer, referred.id)
    db_session.commit()
    assert entry.point == 1
    assert entry.description == "Membership Referral"
    assert db_session.query(PointTransaction).count() == 1


# ---------- TIERS ----------

def test_update_member_tier_promotes_to_best_qualifying_tier(db_session):
    tier1 = make_tier(db_session, "Tier 1", "10", 0)
    tier2 = make_tier(db_session, "Tier 2", "12.5", 2)
    make_tier(db_session, "Tier 3", "15", 5)
    referrer = make_member(db_session, make_profile(db_session, "ref"), tier1, "REF001")
    for i in range(2):
        make_member(db_session, make_profile(db_session, f"child-{i}"), tier1, f"CHILD{i}", parent_code="REF001")

    assert update_member_tier(db_session, "REF001").id == tier2.id
    db_session.commit()
    db_session.refresh(referrer)
    assert referrer.tier_id == tier2.id


def test_update_member_tier_ignores_inactive_referrals(db_session):
    tier1 = make_tier(db_session, "Tier 1", "10", 0)
    make_tier(db_session, "Tier 2", "12.5", 2)
    referrer = make_member(db_session, make_profile(db_session, "ref"), tier1, "REF001")
    make_member(db_session, make_profile(db_session, "a"), tier1, "CHILDA", parent_code="REF001")
    make_member(db_session, make_profile(db_session, "b"), tier1, "CHILDB", parent_code="REF001", is_active=False)

    assert update_member_tier(db_session, "REF001").id == tier1.id
    assert referrer.tier_id == tier1.id


def test_update_member_tier_never_demotes(db_session):
    make_tier(db_session, "Tier 1", "10", 0)
    tier3 = make_tier(db_session, "Tier 3", "15", 5)
    referrer = make_member(db_session, make_profile(db_session, "ref"), tier3, "REF001")
    assert update_member_tier(db_session, "REF001").id == tier3.id
    assert referrer.tier_id == tier3.id


# ---------- REGISTRATION ----------

def test_registration_totals_default_price(db_session):
    totals = calculate_registration_totals(db_session)
    assert totals.sub_total == Decimal("15000000")
    assert totals.tax == Decimal("0")
    assert totals.order_total == Decimal("15000000")


def test_registration_totals_read_general_variable(db_session):
    db_session.add(GeneralVariable(variable_name="exclusiveMemberPrice", variable_value="2000000", variable_type="number"))
    db_session.commit()
    assert calculate_registration_totals(db_session).order_total == Decimal("2000000")


def test_register_member_without_referrer(db_session):
    make_tier(db_session, "Tier 1")
    profile = make_profile(db_session, "new")

    member, transaction = register_member(db_session, profile, member_payload())

    assert member.is_active is False
    assert member.parent_code is None
    assert len(member.member_code) == 6
    assert transaction.referral_code is None
    assert transaction.commission == Decimal("0")
    assert transaction.payment_status is False
    assert profile.first_name == "Budi"
    assert profile.dob == "1990-05-17"


def test_register_member_computes_pending_commissions(db_session):
    tier = make_tier(db_session, "Tier 1", "10")
    referrer = make_member(db_session, make_profile(db_session, "ref"), tier, "REF001")
    make_member(db_session, make_profile(db_session, "closer"), tier, "CLS001")
    profile = make_profile(db_session, "new")

    member, transaction = register_member(
        db_session, profile, member_payload(referral_code="REF001", closer_code="CLS001")
    )

    assert member.parent_code == "REF001"
    assert transaction.commission == Decimal("1500000")
    assert transaction.closer_commission == Decimal("450000")
    db_session.refresh(referrer)
    # credited only once payment is confirmed
    assert referrer.commission == Decimal("0")
    assert referrer.point == 0


def test_register_member_rejects_invalid_referral(db_session):
    make_tier(db_session, "Tier 1")
    profile = make_profile(db_session, "new")
    with pytest.raises(ValidationFailed):
        register_member(db_session, profile, member_payload(referral_code="NOPE00"))
    assert db_session.query(Member).count() == 0
    assert db_session.query(MembershipCommissionTransaction).count() == 0


def test_register_member_rejects_own_code_on_reregistration(db_session):
    tier = make_tier(db_session, "Tier 1")
    profile = make_profile(db_session, "ref")
    make_member(db_session, profile, tier, "REF001")
    with pytest.raises(ValidationFailed):
        register_member(db_session, profile, member_payload(referral_code="REF001"))


def test_register_member_again_keeps_code_and_replaces_transaction(db_session):
    make_tier(db_session, "Tier 1")
    profile = make_profile(db_session, "new")
    first, first_transaction = register_member(db_session, profile, member_payload())
    code = first.member_code

    again, transaction = register_member(db_session, profile, member_payload(first_name="Budiman"))

    assert again.id == first.id
    assert again.member_code == code
    assert db_session.query(Member).count() == 1
    assert db_session.query(MembershipCommissionTransaction).one().id == transaction.id
    assert profile.first_name == "Budiman"


def test_register_member_active_member_conflicts(db_session):
    tier = make_tier(db_session, "Tier 1")
    profile = make_profile(db_session, "ref")
    make_member(db_session, profile, tier, "REF001")
    with pytest.raises(Conflict):
        register_member(db_session, profile, member_payload())


def test_register_member_requires_default_tier(db_session):
    profile = make_profile(db_session, "new")
    with pytest.raises(NotFound):
        register_member(db_session, profile, member_payload())


# ---------- DOWNLINE ----------

def test_build_downline_nests_referrals(db_session):
    tier = make_tier(db_session)
    make_member(db_session, make_profile(db_session, "root", "Root"), tier, "ROOT01")
    make_member(db_session, make_profile(db_session, "kid", "Kid"), tier, "KID001", parent_code="ROOT01")
    make_member(db_session, make_profile(db_session, "grand", "Grand"), tier, "GRAND1", parent_code="KID001")

    tree = build_downline(db_session, "ROOT01")

    assert [node.member_code for node in tree] == ["KID001"]
    assert tree[0].name == "Kid Smith"
    assert [node.member_code for node in tree[0].downlines] == ["GRAND1"]


def test_build_downline_respects_depth_and_cycles(db_session):
    tier = make_tier(db_session)
    make_member(db_session, make_profile(db_session, "a"), tier, "AAAAAA", parent_code="BBBBBB")
    make_member(db_session, make_profile(db_session, "b"), tier, "BBBBBB", parent_code="AAAAAA")

    tree = build_downline(db_session, "AAAAAA")
    assert [node.member_code for node in tree] == ["BBBBBB"]
    assert tree[0].downlines == []

    assert build_downline(db_session, "AAAAAA", max_depth=0) == []
