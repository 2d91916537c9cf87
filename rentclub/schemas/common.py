from pydantic import BaseModel


class ActionResult(BaseModel):
    message: str
