from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Literal, Optional
from datetime import date, datetime
from decimal import Decimal

from rentclub.schemas.profile import ProfileName, ProfileResponse


class TierCreate(BaseModel):
    tier_name: str = Field(min_length=1, max_length=100)
    commission: Decimal = Field(ge=0, le=100)
    min_referrals: int = Field(default=0, ge=0)


class TierUpdate(BaseModel):
    tier_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    commission: Optional[Decimal] = Field(default=None, ge=0, le=100)
    min_referrals: Optional[int] = Field(default=None, ge=0)


class TierResponse(BaseModel):
    id: int
    tier_name: str
    commission: Decimal
    min_referrals: int

    class Config:
        from_attributes = True


class MemberDetails(BaseModel):
    """Personal and bank details captured at registration and on member edit."""
    email: EmailStr
    citizen: str
    phone: str
    address: str
    gender: str
    bank_name: str
    bank_acc_num: str
    bank_acc_name: str
    birth_date: date


class MemberCreate(MemberDetails):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    referral_code: str = ""
    closer_code: str = ""
    payment_method: str = "card"
    proof_of_payment: Optional[str] = None

    @field_validator("referral_code", "closer_code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        return v.strip() if v else ""


class MemberUpdate(MemberDetails):
    pass


class MemberRegistered(BaseModel):
    message: str
    member_code: str
    transaction_id: int
    order_total: Decimal


class MemberResponse(BaseModel):
    id: int
    profile_id: int
    member_code: str
    parent_code: Optional[str]
    tier_id: int
    commission: Decimal
    point: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RegistrationDetails(BaseModel):
    sub_total: Decimal
    tax: Decimal
    order_total: Decimal


class ReferralCodeCheck(BaseModel):
    code: str = ""


class ReferralCodeValidity(BaseModel):
    valid: bool


class ReferralDetail(BaseModel):
    id: int
    profile: ProfileName
    commission: Decimal
    created_at: datetime
    payment_status: bool
    type: Literal["Membership", "Booking"]


class LoyaltyPointDetail(BaseModel):
    id: int
    created_at: datetime
    profile: ProfileName
    type: str
    point: int


class RewardItem(BaseModel):
    id: int
    reward_name: str
    point_req: int

    class Config:
        from_attributes = True


class MemberDashboard(BaseModel):
    profile: ProfileResponse
    member: MemberResponse
    tier: TierResponse
    rewards: List[RewardItem]
    referral_details: List[ReferralDetail]
    loyalty_point_details: List[LoyaltyPointDetail]


class DownlineNode(BaseModel):
    id: int
    member_code: str
    name: str
    downlines: List["DownlineNode"] = []


DownlineNode.model_rebuild()


class BookingCommissionDetail(BaseModel):
    id: int
    profile_id: int
    booking_id: int
    referral_code: Optional[str]
    commission: Decimal
    created_at: datetime
    payment_status: bool
    profile: ProfileName


class MemberRequest(BaseModel):
    id: int
    member_code: str
    first_name: str
    last_name: str
    email: str
    tier_name: str
    is_active: bool
    referral_code: Optional[str]
    closer_code: Optional[str]
    payment_method: str
    proof_of_payment: Optional[str]
    payment_status: bool
    order_total: Decimal
    created_at: datetime


class MemberOverview(BaseModel):
    member: MemberResponse
    profile: ProfileResponse
    tier_name: str
    downline_count: int
