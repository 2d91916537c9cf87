from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import func

from rentclub.core.db_transaction import db_transaction
from rentclub.core.errors import Conflict, NotFound, ValidationFailed
from rentclub.core.logging_config import get_logger
from rentclub.models.member import Member
from rentclub.models.withdrawal import WithdrawalRequest, WithdrawalStatusEnum

logger = get_logger("withdrawal_service")


def pending_withdrawal_total(db: Session, member_id: int) -> Decimal:
    total = db.query(func.sum(WithdrawalRequest.amount)).filter(
        WithdrawalRequest.member_id == member_id,
        WithdrawalRequest.status == WithdrawalStatusEnum.PENDING
    ).scalar()
    return Decimal(str(total or 0))


def request_withdrawal(db: Session, member: Member, amount: Decimal) -> WithdrawalRequest:
    profile = member.profile
    if not member.is_active:
        raise ValidationFailed("Membership is not active")
    if not (profile.bank_name and profile.bank_acc_num and profile.bank_acc_name):
        raise ValidationFailed("Bank details are required before requesting a withdrawal")

    available = Decimal(str(member.commission or 0)) - pending_withdrawal_total(db, member.id)
    if amount > available:
        raise ValidationFailed("Withdrawal amount exceeds available commission")

    with db_transaction(db):
        withdrawal = WithdrawalRequest(
            member_id=member.id,
            amount=amount,
            bank_name=profile.bank_name,
            bank_acc_number=profile.bank_acc_num,
            bank_acc_name=profile.bank_acc_name,
            status=WithdrawalStatusEnum.PENDING,
        )
        db.add(withdrawal)
    logger.info(f"Withdrawal {withdrawal.id} of {amount} requested by member {member.member_code}")
    return withdrawal


def _pending_withdrawal(db: Session, withdrawal_id: int) -> WithdrawalRequest:
    withdrawal = db.query(WithdrawalRequest).filter(WithdrawalRequest.id == withdrawal_id).first()
    if withdrawal is None:
        raise NotFound("Withdrawal request not found")
    if withdrawal.status != WithdrawalStatusEnum.PENDING:
        raise Conflict(f"Withdrawal request is already {withdrawal.status.value}")
    return withdrawal


def approve_withdrawal(db: Session, withdrawal_id: int) -> WithdrawalRequest:
    """Approve and pay out: the amount leaves the member's commission balance."""
    withdrawal = _pending_withdrawal(db, withdrawal_id)
    member = withdrawal.member
    balance = Decimal(str(member.commission or 0))
    if withdrawal.amount > balance:
        raise ValidationFailed("Member commission balance is lower than the requested amount")
    with db_transaction(db):
        member.commission = balance - Decimal(str(withdrawal.amount))
        withdrawal.status = WithdrawalStatusEnum.APPROVED
    logger.info(f"Withdrawal {withdrawal.id} approved for member {member.member_code}")
    return withdrawal


def reject_withdrawal(db: Session, withdrawal_id: int) -> WithdrawalRequest:
    withdrawal = _pending_withdrawal(db, withdrawal_id)
    with db_transaction(db):
        withdrawal.status = WithdrawalStatusEnum.REJECTED
    logger.info(f"Withdrawal {withdrawal.id} rejected")
    return withdrawal
