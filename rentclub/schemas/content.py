from pydantic import BaseModel, Field
from datetime import datetime


class PromotionUpdate(BaseModel):
    title: str = Field(min_length=2, max_length=100)
    subtitle: str = Field(min_length=2, max_length=100)
    category: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=2, max_length=2000)


class PromotionCreate(PromotionUpdate):
    pass


class PromotionResponse(BaseModel):
    id: int
    title: str
    subtitle: str
    category: str
    description: str
    media: str
    created_at: datetime

    class Config:
        from_attributes = True


class GalleryCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class GalleryResponse(BaseModel):
    id: int
    title: str
    media: str
    created_at: datetime

    class Config:
        from_attributes = True
