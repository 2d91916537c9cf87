from pydantic import BaseModel
from typing import Optional


class CheckoutSessionResponse(BaseModel):
    session_id: str
    url: Optional[str] = None
