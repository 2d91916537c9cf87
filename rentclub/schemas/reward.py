from pydantic import BaseModel, Field
from datetime import datetime


class RewardCreate(BaseModel):
    reward_name: str = Field(min_length=1, max_length=255)
    point_req: int = Field(ge=1)


class RewardResponse(BaseModel):
    id: int
    reward_name: str
    point_req: int
    created_at: datetime

    class Config:
        from_attributes = True


class RedeemResult(BaseModel):
    message: str
    remaining_points: int
