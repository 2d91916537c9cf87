from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rentclub.core.database import get_db
from rentclub.models.profile import Profile
from rentclub.models.reward import Reward
from rentclub.api.v1.endpoints.auth import get_current_profile
from rentclub.schemas.reward import RedeemResult, RewardResponse
from rentclub.services.reward_service import redeem_reward

router = APIRouter()


@router.get("/", response_model=List[RewardResponse])
async def list_rewards(db: Session = Depends(get_db)):
    return db.query(Reward).order_by(Reward.point_req, Reward.id).all()


@router.post("/{reward_id}/redeem", response_model=RedeemResult)
async def redeem(
    reward_id: int,
    db: Session = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
):
    entry = redeem_reward(db, profile, reward_id)
    return RedeemResult(
        message="Reward redeemed successfully",
        remaining_points=entry.member.point,
    )
