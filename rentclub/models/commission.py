from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Boolean, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from rentclub.core.database import Base


class CommissionKindEnum(str, enum.Enum):
    BOOKING = "booking"
    MEMBERSHIP = "membership"


class BookingCommissionTransaction(Base):
    __tablename__ = "booking_commission_transactions"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)  # the guest
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, unique=True)
    referral_code = Column(String(16), nullable=True, index=True)
    commission = Column(Numeric(18, 4), nullable=False, default=0)
    payment_status = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile")
    booking = relationship("Booking", back_populates="commission_transaction")


class MembershipCommissionTransaction(Base):
    __tablename__ = "membership_commission_transactions"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)  # the new member
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    referral_code = Column(String(16), nullable=True, index=True)
    commission = Column(Numeric(18, 4), nullable=False, default=0)
    closer_code = Column(String(16), nullable=True, index=True)
    closer_commission = Column(Numeric(18, 4), nullable=False, default=0)
    order_total = Column(Numeric(16, 2), nullable=False)
    payment_method = Column(String(50), nullable=False, default="card")
    proof_of_payment = Column(Text, nullable=True)
    payment_status = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile")
    member = relationship("Member", back_populates="membership_transactions")
