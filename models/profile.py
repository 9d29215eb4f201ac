# models/profile.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator


class ProfileRead(BaseModel):
    id: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None

    # Parse trailing Z timestamps
    @field_validator("created_at", mode="before")
    def normalize_created_at(cls, v):
        if isinstance(v, str) and v.endswith("Z"):
            return v.replace("Z", "+00:00")
        return v


class ProfileUpdate(BaseModel):
    """Self-service edit: name and phone only."""
    full_name: Optional[str] = None
    phone: Optional[str] = None
