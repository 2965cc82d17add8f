# app/schemas/base.py
from pydantic import BaseModel, ConfigDict


class Payload(BaseModel):
    """Incoming write payload; enum members are stored as their values."""
    model_config = ConfigDict(use_enum_values=True, extra="forbid")


class ReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)
