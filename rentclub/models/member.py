from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rentclub.core.database import Base


class Tier(Base):
    __tablename__ = "tiers"

    id = Column(Integer, primary_key=True, index=True)
    tier_name = Column(String(100), unique=True, nullable=False, index=True)
    commission = Column(Numeric(5, 2), nullable=False)  # percent of the referred total
    min_referrals = Column(Integer, nullable=False, default=0)  # active direct referrals needed
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("Member", back_populates="tier")


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, unique=True, index=True)
    member_code = Column(String(16), unique=True, nullable=False, index=True)
    parent_code = Column(String(16), nullable=True, index=True)  # referrer's member_code
    tier_id = Column(Integer, ForeignKey("tiers.id"), nullable=False, index=True)
    commission = Column(Numeric(18, 4), nullable=False, default=0)
    point = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profile = relationship("Profile", back_populates="member")
    tier = relationship("Tier", back_populates="members")
    membership_transactions = relationship(
        "MembershipCommissionTransaction",
        back_populates="member",
        cascade="all, delete-orphan",
    )
    point_transactions = relationship("PointTransaction", back_populates="member", cascade="all, delete-orphan")
    withdrawal_requests = relationship("WithdrawalRequest", back_populates="member", cascade="all, delete-orphan")
