from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import AuthRedirect, NotFound
from rentclub.core.logging_config import get_logger
from rentclub.core.security import AdminPolicy, Identity
from rentclub.core.validators import get_member_by_code_or_404
from rentclub.models.commission import BookingCommissionTransaction, MembershipCommissionTransaction
from rentclub.models.member import Member
from rentclub.models.profile import Profile
from rentclub.models.reward import PointTransaction, Reward
from rentclub.models.withdrawal import WithdrawalRequest
from rentclub.api.v1.endpoints.auth import (
    get_admin_policy,
    get_current_identity,
    get_current_profile,
    get_optional_profile,
)
from rentclub.schemas.common import ActionResult
from rentclub.schemas.member import (
    BookingCommissionDetail,
    DownlineNode,
    LoyaltyPointDetail,
    MemberCreate,
    MemberDashboard,
    MemberRegistered,
    MemberResponse,
    MemberUpdate,
    ReferralCodeCheck,
    ReferralCodeValidity,
    ReferralDetail,
    RegistrationDetails,
    RewardItem,
    TierResponse,
)
from rentclub.schemas.profile import ProfileName, ProfileResponse
from rentclub.schemas.withdrawal import WithdrawalCreate, WithdrawalResponse
from rentclub.services.membership_service import (
    apply_member_details,
    build_downline,
    calculate_registration_totals,
    get_member_by_profile,
    register_member,
    validate_referral_code,
)
from rentclub.services.withdrawal_service import request_withdrawal

logger = get_logger("members")

router = APIRouter()


def get_current_member(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
) -> Member:
    member = get_member_by_profile(db, profile.id)
    if member is None:
        raise NotFound("Member not found")
    return member


def ensure_owner_or_admin(member: Member, profile: Optional[Profile], identity: Identity, policy: AdminPolicy) -> None:
    if profile is not None and member.profile_id == profile.id:
        return
    if policy.is_admin(identity):
        return
    logger.warning(f"Member {member.member_code} access denied for subject {identity.subject}")
    raise AuthRedirect("forbidden")


@router.get("/registration-details", response_model=RegistrationDetails)
async def fetch_registration_details(db: Session = Depends(get_db)):
    return calculate_registration_totals(db)


@router.post("/", response_model=MemberRegistered, status_code=201)
async def create_member(
    body: MemberCreate,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    member, transaction = register_member(db, profile, body)
    return MemberRegistered(
        message="Member created, continue to payment",
        member_code=member.member_code,
        transaction_id=transaction.id,
        order_total=transaction.order_total,
    )


@router.post("/referral/validate", response_model=ReferralCodeValidity)
async def check_referral_code(
    body: ReferralCodeCheck,
    db: Session = Depends(get_db),
    profile: Optional[Profile] = Depends(get_optional_profile),
):
    return ReferralCodeValidity(valid=validate_referral_code(db, body.code.strip(), profile))


@router.get("/me/dashboard", response_model=MemberDashboard)
async def fetch_member_dashboard(
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    member: Member = Depends(get_current_member),
):
    """Everything the member dashboard renders, in one response."""
    rewards = db.query(Reward).order_by(Reward.point_req, Reward.id).all()

    membership_referrals = db.query(MembershipCommissionTransaction).options(
        joinedload(MembershipCommissionTransaction.profile)
    ).filter(MembershipCommissionTransaction.referral_code == member.member_code).all()
    booking_referrals = db.query(BookingCommissionTransaction).options(
        joinedload(BookingCommissionTransaction.profile)
    ).filter(BookingCommissionTransaction.referral_code == member.member_code).all()

    referral_details = [
        ReferralDetail(
            id=t.id,
            profile=ProfileName.model_validate(t.profile),
            commission=t.commission,
            created_at=t.created_at,
            payment_status=t.payment_status,
            type="Membership",
        )
        for t in membership_referrals
    ] + [
        ReferralDetail(
            id=t.id,
            profile=ProfileName.model_validate(t.profile),
            commission=t.commission,
            created_at=t.created_at,
            payment_status=t.payment_status,
            type="Booking",
        )
        for t in booking_referrals
    ]
    referral_details.sort(key=lambda d: d.created_at, reverse=True)

    point_transactions = db.query(PointTransaction).options(
        joinedload(PointTransaction.profile)
    ).filter(
        PointTransaction.member_id == member.id
    ).order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc()).all()

    return MemberDashboard(
        profile=ProfileResponse.model_validate(profile),
        member=MemberResponse.model_validate(member),
        tier=TierResponse.model_validate(member.tier),
        rewards=[RewardItem.model_validate(r) for r in rewards],
        referral_details=referral_details,
        loyalty_point_details=[
            LoyaltyPointDetail(
                id=t.id,
                created_at=t.created_at,
                profile=ProfileName.model_validate(t.profile),
                type=t.description,
                point=t.point,
            )
            for t in point_transactions
        ],
    )


@router.get("/me/withdrawals", response_model=List[WithdrawalResponse])
async def fetch_my_withdrawals(
    db: Session = Depends(get_db),
    member: Member = Depends(get_current_member),
):
    return db.query(WithdrawalRequest).filter(
        WithdrawalRequest.member_id == member.id
    ).order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc()).all()


@router.post("/me/withdrawals", response_model=WithdrawalResponse, status_code=201)
async def create_withdrawal(
    body: WithdrawalCreate,
    db: Session = Depends(get_db),
    member: Member = Depends(get_current_member),
):
    return request_withdrawal(db, member, body.amount)


@router.get("/{member_code}/downline", response_model=List[DownlineNode])
async def fetch_downline(
    member_code: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    profile: Optional[Profile] = Depends(get_optional_profile),
    policy: AdminPolicy = Depends(get_admin_policy),
):
    member = get_member_by_code_or_404(db, member_code)
    ensure_owner_or_admin(member, profile, identity, policy)
    return build_downline(db, member.member_code)


@router.get("/{member_code}/commissions", response_model=List[BookingCommissionDetail])
async def fetch_booking_commissions(
    member_code: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    profile: Optional[Profile] = Depends(get_optional_profile),
    policy: AdminPolicy = Depends(get_admin_policy),
):
    """Booking commission transactions attributed to this member's referral code."""
    member = get_member_by_code_or_404(db, member_code)
    ensure_owner_or_admin(member, profile, identity, policy)
    transactions = db.query(BookingCommissionTransaction).options(
        joinedload(BookingCommissionTransaction.profile)
    ).filter(
        BookingCommissionTransaction.referral_code == member.member_code
    ).order_by(BookingCommissionTransaction.created_at.desc(), BookingCommissionTransaction.id.desc()).all()
    return [
        BookingCommissionDetail(
            id=t.id,
            profile_id=t.profile_id,
            booking_id=t.booking_id,
            referral_code=t.referral_code,
            commission=t.commission,
            created_at=t.created_at,
            payment_status=t.payment_status,
            profile=ProfileName.model_validate(t.profile),
        )
        for t in transactions
    ]


@router.put("/{member_id}", response_model=ActionResult)
async def update_member(
    member_id: int,
    body: MemberUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    profile: Optional[Profile] = Depends(get_optional_profile),
    policy: AdminPolicy = Depends(get_admin_policy),
):
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        raise NotFound("Member not found")
    ensure_owner_or_admin(member, profile, identity, policy)
    with db_transaction(db):
        apply_member_details(member.profile, body)
    return ActionResult(message="Member updated successfully")
