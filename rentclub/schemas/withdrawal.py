from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal

from rentclub.models.withdrawal import WithdrawalStatusEnum


class WithdrawalCreate(BaseModel):
    amount: Decimal = Field(gt=0)


class WithdrawalResponse(BaseModel):
    id: int
    member_id: int
    amount: Decimal
    bank_name: str
    bank_acc_number: str
    bank_acc_name: str
    status: WithdrawalStatusEnum
    created_at: datetime

    class Config:
        from_attributes = True
