from rentclub.models.profile import Profile
from rentclub.models.property import Property, Favorite
from rentclub.models.booking import Booking
from rentclub.models.review import Review
from rentclub.models.member import Member, Tier
from rentclub.models.commission import (
    BookingCommissionTransaction,
    MembershipCommissionTransaction,
    CommissionKindEnum,
)
from rentclub.models.reward import Reward, PointTransaction
from rentclub.models.withdrawal import WithdrawalRequest, WithdrawalStatusEnum
from rentclub.models.content import Promotion, Gallery
from rentclub.models.general_variable import GeneralVariable

__all__ = [
    "Profile",
    "Property",
    "Favorite",
    "Booking",
    "Review",
    "Member",
    "Tier",
    "BookingCommissionTransaction",
    "MembershipCommissionTransaction",
    "CommissionKindEnum",
    "Reward",
    "PointTransaction",
    "WithdrawalRequest",
    "WithdrawalStatusEnum",
    "Promotion",
    "Gallery",
    "GeneralVariable",
]
