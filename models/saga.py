# models/saga.py

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class SagaRead(BaseModel):
    """Row of the onboarding_sagas table."""

    id: str
    operation: str
    status: str
    target_email: Optional[str] = None
    target_user_id: Optional[str] = None
    building_id: Optional[str] = None
    requested_by: Optional[str] = None
    current_step: Optional[str] = None
    completed_steps: List[str] = Field(default_factory=list)
    compensations: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at", mode="before")
    def normalize_timestamps(cls, v):
        if isinstance(v, str) and v.endswith("Z"):
            return v.replace("Z", "+00:00")
        return v

    @field_validator("completed_steps", "compensations", mode="before")
    def none_to_list(cls, v):
        return v or []
