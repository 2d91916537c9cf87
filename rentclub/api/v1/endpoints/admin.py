"""
Admin endpoints. Every handler sits behind ``require_admin``.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func

from rentclub.core.database import get_db
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import Conflict, NotFound
from rentclub.core.logging_config import get_logger
from rentclub.core.security import Identity
from rentclub.core.validators import get_member_by_code_or_404
from rentclub.models.commission import MembershipCommissionTransaction
from rentclub.models.general_variable import GeneralVariable
from rentclub.models.member import Member, Tier
from rentclub.models.reward import Reward
from rentclub.models.withdrawal import WithdrawalRequest, WithdrawalStatusEnum
from rentclub.api.v1.endpoints.auth import require_admin
from rentclub.schemas.common import ActionResult
from rentclub.schemas.general_variable import GeneralVariableResponse, GeneralVariableUpsert
from rentclub.schemas.member import (
    MemberOverview,
    MemberRequest,
    MemberResponse,
    MemberUpdate,
    TierCreate,
    TierResponse,
    TierUpdate,
)
from rentclub.schemas.profile import ProfileResponse
from rentclub.schemas.reward import RewardCreate, RewardResponse
from rentclub.schemas.stats import AppStats, ChartPoint
from rentclub.schemas.withdrawal import WithdrawalResponse
from rentclub.services.membership_service import apply_member_details
from rentclub.services.stats_service import fetch_charts_data, fetch_stats, reset_stats_cache
from rentclub.services.withdrawal_service import approve_withdrawal, reject_withdrawal

logger = get_logger("admin")

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=AppStats)
async def get_stats(refresh: bool = Query(False), db: Session = Depends(get_db)):
    if refresh:
        reset_stats_cache()
    return fetch_stats(db)


@router.get("/charts", response_model=List[ChartPoint])
async def get_charts(db: Session = Depends(get_db)):
    return fetch_charts_data(db)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

@router.get("/member-requests", response_model=List[MemberRequest])
async def list_member_requests(db: Session = Depends(get_db)):
    """Registrations with their membership transaction, newest first."""
    transactions = db.query(MembershipCommissionTransaction).options(
        joinedload(MembershipCommissionTransaction.member).joinedload(Member.tier),
        joinedload(MembershipCommissionTransaction.profile)
    ).order_by(MembershipCommissionTransaction.created_at.desc(), MembershipCommissionTransaction.id.desc()).all()
    return [
        MemberRequest(
            id=t.id,
            member_code=t.member.member_code,
            first_name=t.profile.first_name,
            last_name=t.profile.last_name,
            email=t.profile.email,
            tier_name=t.member.tier.tier_name,
            is_active=t.member.is_active,
            referral_code=t.referral_code,
            closer_code=t.closer_code,
            payment_method=t.payment_method,
            proof_of_payment=t.proof_of_payment,
            payment_status=t.payment_status,
            order_total=t.order_total,
            created_at=t.created_at,
        )
        for t in transactions
    ]


@router.get("/members", response_model=List[MemberOverview])
async def list_members(
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Member).options(joinedload(Member.profile), joinedload(Member.tier))
    if active is not None:
        query = query.filter(Member.is_active == active)
    members = query.order_by(Member.created_at.desc(), Member.id.desc()).all()

    downline_counts = dict(
        db.query(Member.parent_code, func.count(Member.id)).filter(
            Member.parent_code.isnot(None),
            Member.is_active == True
        ).group_by(Member.parent_code).all()
    )
    return [
        MemberOverview(
            member=MemberResponse.model_validate(m),
            profile=ProfileResponse.model_validate(m.profile),
            tier_name=m.tier.tier_name,
            downline_count=downline_counts.get(m.member_code, 0),
        )
        for m in members
    ]


@router.put("/members/{member_code}", response_model=ActionResult)
async def edit_member(member_code: str, body: MemberUpdate, db: Session = Depends(get_db)):
    member = get_member_by_code_or_404(db, member_code)
    with db_transaction(db):
        apply_member_details(member.profile, body)
    logger.info(f"Admin updated member {member_code}")
    return ActionResult(message="Member profile updated successfully")


# ---------------------------------------------------------------------------
# Tiers
# ---------------------------------------------------------------------------

@router.get("/tiers", response_model=List[TierResponse])
async def list_tiers(db: Session = Depends(get_db)):
    return db.query(Tier).order_by(Tier.min_referrals, Tier.id).all()


@router.post("/tiers", response_model=TierResponse, status_code=201)
async def create_tier(body: TierCreate, db: Session = Depends(get_db)):
    if db.query(Tier).filter(Tier.tier_name == body.tier_name).first():
        raise Conflict(f"Tier '{body.tier_name}' already exists")
    with db_transaction(db):
        tier = Tier(**body.model_dump())
        db.add(tier)
    db.refresh(tier)
    return tier


@router.put("/tiers/{tier_id}", response_model=TierResponse)
async def update_tier(tier_id: int, body: TierUpdate, db: Session = Depends(get_db)):
    tier = db.query(Tier).filter(Tier.id == tier_id).first()
    if not tier:
        raise NotFound("Tier not found")
    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    new_name = update_data.get("tier_name")
    if new_name and new_name != tier.tier_name:
        if db.query(Tier).filter(Tier.tier_name == new_name).first():
            raise Conflict(f"Tier '{new_name}' already exists")
    with db_transaction(db):
        for field, value in update_data.items():
            setattr(tier, field, value)
    db.refresh(tier)
    return tier


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------

@router.post("/rewards", response_model=RewardResponse, status_code=201)
async def create_reward(body: RewardCreate, db: Session = Depends(get_db)):
    with db_transaction(db):
        reward = Reward(**body.model_dump())
        db.add(reward)
    db.refresh(reward)
    return reward


@router.delete("/rewards/{reward_id}", response_model=ActionResult)
async def delete_reward(reward_id: int, db: Session = Depends(get_db)):
    """Ledger rows keep their description; their reward link is cleared."""
    reward = db.query(Reward).filter(Reward.id == reward_id).first()
    if not reward:
        raise NotFound("Reward not found")
    with db_transaction(db):
        db.delete(reward)
    return ActionResult(message="Reward deleted successfully")


# ---------------------------------------------------------------------------
# General variables
# ---------------------------------------------------------------------------

@router.get("/general-variables", response_model=List[GeneralVariableResponse])
async def list_general_variables(db: Session = Depends(get_db)):
    return db.query(GeneralVariable).order_by(GeneralVariable.variable_name).all()


@router.get("/general-variables/{variable_name}", response_model=GeneralVariableResponse)
async def get_general_variable(variable_name: str, db: Session = Depends(get_db)):
    variable = db.query(GeneralVariable).filter(GeneralVariable.variable_name == variable_name).first()
    if not variable:
        raise NotFound("General variable not found")
    return variable


@router.put("/general-variables", response_model=GeneralVariableResponse)
async def upsert_general_variable(
    body: GeneralVariableUpsert,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_admin),
):
    variable = db.query(GeneralVariable).filter(GeneralVariable.variable_name == body.variable_name).first()
    with db_transaction(db):
        if variable is None:
            variable = GeneralVariable(variable_name=body.variable_name)
            db.add(variable)
        variable.variable_value = body.variable_value
        variable.variable_type = body.variable_type
    db.refresh(variable)
    logger.info(f"General variable {body.variable_name} set to {body.variable_value!r} by {identity.subject}")
    return variable


# ---------------------------------------------------------------------------
# Withdrawals
# ---------------------------------------------------------------------------

@router.get("/withdrawals", response_model=List[WithdrawalResponse])
async def list_withdrawals(
    status: Optional[WithdrawalStatusEnum] = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(WithdrawalRequest)
    if status is not None:
        query = query.filter(WithdrawalRequest.status == status)
    return query.order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc()).all()


@router.post("/withdrawals/{withdrawal_id}/approve", response_model=WithdrawalResponse)
async def approve(withdrawal_id: int, db: Session = Depends(get_db)):
    return approve_withdrawal(db, withdrawal_id)


@router.post("/withdrawals/{withdrawal_id}/reject", response_model=WithdrawalResponse)
async def reject(withdrawal_id: int, db: Session = Depends(get_db)):
    return reject_withdrawal(db, withdrawal_id)
