from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from rentclub.core.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    auth_id = Column(String(255), unique=True, nullable=False, index=True)  # subject id from the auth provider
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    profile_image = Column(String(500), nullable=False, default="")
    # Personal and bank details, filled in at membership registration
    citizen = Column(String(100), nullable=True)
    dob = Column(String(10), nullable=True)  # YYYY-MM-DD
    phone = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    gender = Column(String(20), nullable=True)
    bank_name = Column(String(100), nullable=True)
    bank_acc_num = Column(String(50), nullable=True)
    bank_acc_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    properties = relationship("Property", back_populates="profile", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="profile", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="profile", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="profile", cascade="all, delete-orphan")
    member = relationship("Member", back_populates="profile", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
