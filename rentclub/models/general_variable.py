from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from rentclub.core.database import Base


class GeneralVariable(Base):
    __tablename__ = "general_variables"

    id = Column(Integer, primary_key=True, index=True)
    variable_name = Column(String(100), unique=True, nullable=False, index=True)
    variable_value = Column(String(500), nullable=False)
    variable_type = Column(String(20), nullable=False, default="string")  # string | number | boolean
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
