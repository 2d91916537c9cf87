"""
Membership Service for RentClub

Referral program rules:
- member code generation (6 chars, [A-Z0-9], bounded retries)
- referral code validation
- commission calculation, crediting and tier promotion
- member registration and the referral (downline) tree
"""
import secrets
import string
from decimal import Decimal
from typing import List, Optional, Set

from sqlalchemy.orm import Session
from sqlalchemy import func

from rentclub.core.config import settings
from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import ActionError, Conflict, NotFound, ValidationFailed
from rentclub.core.logging_config import get_logger
from rentclub.models.commission import CommissionKindEnum, MembershipCommissionTransaction
from rentclub.models.general_variable import GeneralVariable
from rentclub.models.member import Member, Tier
from rentclub.models.profile import Profile
from rentclub.models.reward import PointTransaction, REFERRAL_POINT_DESCRIPTION
from rentclub.schemas.member import DownlineNode, MemberCreate, RegistrationDetails

logger = get_logger("membership_service")

CODE_ALPHABET = string.ascii_uppercase + string.digits


class MemberCodeExhausted(ActionError):
    default_message = "Failed to generate unique member ID, Please try again"
    status_code = 503


def generate_code(length: int = 6) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def member_code_exists(db: Session, code: str) -> bool:
    return db.query(Member.id).filter(Member.member_code == code).first() is not None


def generate_unique_member_code(
    db: Session,
    max_attempts: Optional[int] = None,
    length: Optional[int] = None,
) -> str:
    """
    Draw codes until one is unused.

    Raises:
        MemberCodeExhausted: every one of ``max_attempts`` draws collided.
    """
    max_attempts = max_attempts if max_attempts is not None else settings.MEMBER_CODE_MAX_ATTEMPTS
    length = length or settings.MEMBER_CODE_LENGTH
    for attempt in range(max_attempts):
        code = generate_code(length)
        if not member_code_exists(db, code):
            return code
        logger.debug(f"Member code collision on attempt {attempt + 1}: {code}")
    logger.error(f"Could not generate a unique member code after {max_attempts} attempts")
    raise MemberCodeExhausted()


def get_member_by_code(db: Session, code: str) -> Optional[Member]:
    if not code:
        return None
    return db.query(Member).filter(Member.member_code == code).first()


def get_member_by_profile(db: Session, profile_id: int) -> Optional[Member]:
    return db.query(Member).filter(Member.profile_id == profile_id).first()


def get_tier_by_name(db: Session, tier_name: str) -> Optional[Tier]:
    return db.query(Tier).filter(Tier.tier_name == tier_name).first()


def validate_referral_code(db: Session, code: str, caller: Optional[Profile]) -> bool:
    """A code is usable when it names an existing member other than the caller."""
    if not code:
        return False
    member = get_member_by_code(db, code)
    if member is None:
        return False
    if caller is not None and member.profile_id == caller.id:
        return False
    return True


def calculate_commission(db: Session, referral_code: str, total) -> Decimal:
    referrer = get_member_by_code(db, referral_code)
    if referrer is None:
        raise NotFound("Member not found")
    tier = db.query(Tier).filter(Tier.id == referrer.tier_id).first()
    if tier is None:
        raise NotFound("Tier not found")
    return Decimal(str(total)) * Decimal(str(tier.commission)) / Decimal(100)


def calculate_closer_commission(total) -> Decimal:
    return Decimal(str(total)) * Decimal(settings.CLOSER_COMMISSION_PERCENT) / Decimal(100)


def apply_commission(db: Session, code: str, amount, kind: CommissionKindEnum) -> Member:
    """Credit a referrer. Membership credits also earn exactly one loyalty point."""
    member = get_member_by_code(db, code)
    if member is None:
        raise NotFound("Member Not Found!")
    member.commission = Decimal(str(member.commission or 0)) + Decimal(str(amount))
    if kind == CommissionKindEnum.MEMBERSHIP:
        member.point = (member.point or 0) + 1
    db.flush()
    logger.info(f"Credited {amount} ({kind.value}) to member {code}")
    return member


def credit_closer(db: Session, closer_code: str, amount) -> Member:
    closer = get_member_by_code(db, closer_code)
    if closer is None:
        raise NotFound("Closer member not found")
    closer.commission = Decimal(str(closer.commission or 0)) + Decimal(str(amount))
    db.flush()
    logger.info(f"Credited closer commission {amount} to member {closer_code}")
    return closer


def count_active_referrals(db: Session, code: str) -> int:
    return db.query(func.count(Member.id)).filter(
        Member.parent_code == code,
        Member.is_active == True
    ).scalar() or 0


def update_member_tier(db: Session, code: str) -> Tier:
    """
    Promote a member to the best tier its active direct referrals qualify for.

    Tiers are ranked by ``min_referrals``; a member is never demoted.
    """
    member = get_member_by_code(db, code)
    if member is None:
        raise NotFound("Member not found")
    current = db.query(Tier).filter(Tier.id == member.tier_id).first()
    if current is None:
        raise NotFound("Tier not found")

    referrals = count_active_referrals(db, code)
    best = db.query(Tier).filter(
        Tier.min_referrals <= referrals,
        Tier.min_referrals > current.min_referrals
    ).order_by(Tier.min_referrals.desc(), Tier.commission.desc()).first()
    if best is None:
        return current

    member.tier_id = best.id
    db.flush()
    logger.info(f"Member {code} promoted from {current.tier_name} to {best.tier_name} ({referrals} referrals)")
    return best


def record_referral_point(db: Session, referrer: Member, referred_profile_id: int) -> PointTransaction:
    entry = PointTransaction(
        member_id=referrer.id,
        profile_id=referred_profile_id,
        point=1,
        description=REFERRAL_POINT_DESCRIPTION,
    )
    db.add(entry)
    db.flush()
    return entry


def get_membership_price(db: Session) -> Decimal:
    variable = db.query(GeneralVariable).filter(
        GeneralVariable.variable_name == settings.MEMBERSHIP_PRICE_VARIABLE
    ).first()
    if variable is None:
        return Decimal(settings.DEFAULT_MEMBERSHIP_PRICE)
    try:
        return Decimal(variable.variable_value)
    except ArithmeticError:
        logger.error(f"General variable {variable.variable_name} is not numeric: {variable.variable_value!r}")
        raise ValidationFailed("Membership price is misconfigured")


def calculate_registration_totals(db: Session) -> RegistrationDetails:
    sub_total = get_membership_price(db)
    tax = sub_total * Decimal(settings.MEMBERSHIP_TAX_PERCENT) / Decimal(100)
    return RegistrationDetails(sub_total=sub_total, tax=tax, order_total=sub_total + tax)


def reset_incomplete_member(db: Session, profile_id: int) -> Optional[Member]:
    """
    Reuse an earlier registration that was never paid.

    The member row keeps its code, which referees may already hold; only its
    unpaid transactions are dropped.
    """
    member = get_member_by_profile(db, profile_id)
    if member is None:
        return None
    if member.is_active or any(t.payment_status for t in member.membership_transactions):
        raise Conflict("Member already exist")
    for transaction in list(member.membership_transactions):
        member.membership_transactions.remove(transaction)
    db.flush()
    return member


def register_member(db: Session, profile: Profile, data: MemberCreate):
    """
    Create the caller's (inactive) membership and its pending transaction.

    Registering again before paying keeps the member code and replaces the
    pending transaction. Commission is calculated now and credited when the
    payment is confirmed.

    Returns:
        Tuple of (member, transaction)
    """
    with db_transaction(db):
        if data.referral_code and not validate_referral_code(db, data.referral_code, profile):
            raise ValidationFailed("Invalid referral code")
        if data.closer_code and not validate_referral_code(db, data.closer_code, profile):
            raise ValidationFailed("Invalid closer code")

        member = reset_incomplete_member(db, profile.id)
        if member is None:
            tier = get_tier_by_name(db, settings.DEFAULT_TIER_NAME)
            if tier is None:
                raise NotFound(f"Tier '{settings.DEFAULT_TIER_NAME}' not found")
            member = Member(
                profile_id=profile.id,
                member_code=generate_unique_member_code(db),
                tier_id=tier.id,
                commission=Decimal(0),
                point=0,
                is_active=False,
            )
            db.add(member)
        member.parent_code = data.referral_code or None

        profile.first_name = data.first_name
        profile.last_name = data.last_name
        apply_member_details(profile, data)
        db.flush()

        totals = calculate_registration_totals(db)
        commission = Decimal(0)
        if data.referral_code:
            commission = calculate_commission(db, data.referral_code, totals.order_total)
        closer_commission = Decimal(0)
        if data.closer_code:
            closer_commission = calculate_closer_commission(totals.order_total)

        transaction = MembershipCommissionTransaction(
            profile_id=profile.id,
            member_id=member.id,
            referral_code=data.referral_code or None,
            commission=commission,
            closer_code=data.closer_code or None,
            closer_commission=closer_commission,
            order_total=totals.order_total,
            payment_method=data.payment_method,
            proof_of_payment=data.proof_of_payment,
            payment_status=False,
        )
        db.add(transaction)
        db.flush()

    logger.info(f"Registered member {member.member_code} for profile {profile.id} (referrer={member.parent_code})")
    return member, transaction


def apply_member_details(profile: Profile, data) -> None:
    profile.email = data.email
    profile.citizen = data.citizen
    profile.dob = data.birth_date.isoformat()[:10]
    profile.phone = data.phone
    profile.address = data.address
    profile.gender = data.gender
    profile.bank_name = data.bank_name
    profile.bank_acc_num = data.bank_acc_num
    profile.bank_acc_name = data.bank_acc_name


def build_downline(db: Session, member_code: str, max_depth: Optional[int] = None) -> List[DownlineNode]:
    """Nested referral tree under ``member_code``, bounded by depth and safe against cycles."""
    max_depth = max_depth if max_depth is not None else settings.MAX_DOWNLINE_DEPTH
    return _downline_level(db, member_code, 1, max_depth, {member_code})


def _downline_level(db: Session, parent_code: str, depth: int, max_depth: int, seen: Set[str]) -> List[DownlineNode]:
    if depth > max_depth:
        return []
    children = db.query(Member).filter(Member.parent_code == parent_code).order_by(Member.created_at, Member.id).all()
    nodes = []
    for child in children:
        if child.member_code in seen:
            logger.warning(f"Referral cycle detected at member {child.member_code}")
            continue
        seen.add(child.member_code)
        nodes.append(DownlineNode(
            id=child.id,
            member_code=child.member_code,
            name=child.profile.full_name if child.profile else "",
            downlines=_downline_level(db, child.member_code, depth + 1, max_depth, seen),
        ))
    return nodes
