"""
Reusable lookups that validate existence and ownership
"""
from sqlalchemy.orm import Session

from rentclub.core.errors import NotFound
from rentclub.core.logging_config import get_logger
from rentclub.models.content import Promotion
from rentclub.models.member import Member
from rentclub.models.profile import Profile
from rentclub.models.property import Property

logger = get_logger("validators")


def get_property_or_404(db: Session, property_id: int) -> Property:
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise NotFound("Property not found")
    return prop


def get_owned_property(db: Session, property_id: int, owner: Profile) -> Property:
    """
    Fetch a property the caller owns.

    Raises:
        NotFound: missing, or owned by someone else (not distinguished on purpose)
    """
    prop = db.query(Property).filter(
        Property.id == property_id,
        Property.profile_id == owner.id
    ).first()
    if not prop:
        logger.warning(f"Property access denied: property_id={property_id}, profile_id={owner.id}")
        raise NotFound("Property not found")
    return prop


def get_promotion_or_404(db: Session, promotion_id: int) -> Promotion:
    promotion = db.query(Promotion).filter(Promotion.id == promotion_id).first()
    if not promotion:
        raise NotFound("Promotion not found")
    return promotion


def get_member_by_code_or_404(db: Session, member_code: str) -> Member:
    member = db.query(Member).filter(Member.member_code == member_code).first()
    if not member:
        raise NotFound("Member not found")
    return member
