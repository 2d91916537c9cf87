from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Numeric, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rentclub.core.database import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False, index=True)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)  # exclusive
    total_nights = Column(Integer, nullable=False)
    order_total = Column(Numeric(16, 2), nullable=False)
    payment_status = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    profile = relationship("Profile", back_populates="bookings")
    property = relationship("Property", back_populates="bookings")
    commission_transaction = relationship(
        "BookingCommissionTransaction",
        back_populates="booking",
        uselist=False,
        cascade="all, delete-orphan",
    )
