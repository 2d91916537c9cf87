from sqlalchemy.orm import Session

from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import NotFound, ValidationFailed
from rentclub.core.logging_config import get_logger
from rentclub.models.profile import Profile
from rentclub.models.reward import PointTransaction, Reward, REDEEM_POINT_PREFIX
from rentclub.services.membership_service import get_member_by_profile

logger = get_logger("reward_service")


def redeem_reward(db: Session, profile: Profile, reward_id: int) -> PointTransaction:
    """Spend ``point_req`` points on a reward, writing one ledger row. Nothing is written on failure."""
    if profile is None:
        raise NotFound("Profile not found")
    member = get_member_by_profile(db, profile.id)
    if member is None:
        raise NotFound("Member not found")
    reward = db.query(Reward).filter(Reward.id == reward_id).first()
    if reward is None:
        raise NotFound("Reward not found")

    if member.point < reward.point_req:
        logger.info(f"Member {member.member_code} has {member.point} points, reward {reward.id} needs {reward.point_req}")
        raise ValidationFailed("Not enough points to redeem this reward")

    with db_transaction(db):
        entry = PointTransaction(
            member_id=member.id,
            profile_id=profile.id,
            reward_id=reward.id,
            point=-reward.point_req,
            description=f"{REDEEM_POINT_PREFIX}{reward.reward_name}",
        )
        db.add(entry)
        member.point = member.point - reward.point_req

    logger.info(f"Member {member.member_code} redeemed reward {reward.id} for {reward.point_req} points")
    return entry
