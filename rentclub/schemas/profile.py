from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class ProfileCreate(BaseModel):
    first_name: str
    last_name: str
    username: str

    @field_validator("first_name", "last_name", "username")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("must be at least 2 characters")
        if len(v) > 100:
            raise ValueError("must be at most 100 characters")
        return v


class ProfileUpdate(ProfileCreate):
    pass


class ProfileResponse(BaseModel):
    id: int
    auth_id: str
    first_name: str
    last_name: str
    username: str
    email: str
    profile_image: str
    citizen: Optional[str] = None
    dob: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    bank_name: Optional[str] = None
    bank_acc_num: Optional[str] = None
    bank_acc_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileName(BaseModel):
    first_name: str
    last_name: str

    class Config:
        from_attributes = True


class ProfilePublic(BaseModel):
    username: str
    profile_image: str

    class Config:
        from_attributes = True
