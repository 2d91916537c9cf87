from pydantic import BaseModel, Field, model_validator
from typing import Literal
from datetime import datetime


class GeneralVariableUpsert(BaseModel):
    variable_name: str = Field(min_length=1, max_length=100)
    variable_value: str = Field(max_length=500)
    variable_type: Literal["string", "number", "boolean"] = "string"

    @model_validator(mode="after")
    def value_matches_type(self):
        if self.variable_type == "number":
            try:
                float(self.variable_value)
            except ValueError:
                raise ValueError("variable_value must be numeric for type 'number'")
        if self.variable_type == "boolean" and self.variable_value.lower() not in ("true", "false"):
            raise ValueError("variable_value must be 'true' or 'false' for type 'boolean'")
        return self


class GeneralVariableResponse(BaseModel):
    id: int
    variable_name: str
    variable_value: str
    variable_type: str
    created_at: datetime

    class Config:
        from_attributes = True
