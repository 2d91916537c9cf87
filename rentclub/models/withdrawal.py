from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from rentclub.core.database import Base


class WithdrawalStatusEnum(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 4), nullable=False)
    bank_name = Column(String(100), nullable=False)
    bank_acc_number = Column(String(50), nullable=False)
    bank_acc_name = Column(String(255), nullable=False)
    status = Column(
        SQLEnum(WithdrawalStatusEnum, values_callable=lambda x: [e.value for e in x], native_enum=False),
        nullable=False,
        default=WithdrawalStatusEnum.PENDING,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    member = relationship("Member", back_populates="withdrawal_requests")
