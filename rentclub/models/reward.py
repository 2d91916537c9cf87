from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rentclub.core.database import Base

REFERRAL_POINT_DESCRIPTION = "Membership Referral"
REDEEM_POINT_PREFIX = "Redeem Reward: "


class Reward(Base):
    __tablename__ = "rewards"

    id = Column(Integer, primary_key=True, index=True)
    reward_name = Column(String(255), nullable=False)
    point_req = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    point_transactions = relationship("PointTransaction", back_populates="reward")


class PointTransaction(Base):
    __tablename__ = "point_transactions"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)  # whose balance moved
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)  # referred profile or redeemer
    reward_id = Column(Integer, ForeignKey("rewards.id", ondelete="SET NULL"), nullable=True, index=True)
    point = Column(Integer, nullable=False)  # signed
    description = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    member = relationship("Member", back_populates="point_transactions")
    profile = relationship("Profile")
    reward = relationship("Reward", back_populates="point_transactions")
