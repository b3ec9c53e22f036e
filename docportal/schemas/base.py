# docportal/schemas/base.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator

from ..utils.time import ensure_utc

class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

class TimestampMixin(BaseModel):
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def _utc(cls, value):
        return ensure_utc(value)
