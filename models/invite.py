# models/invite.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from models.enums import MemberRole


def _parse_timestamp(value):
    if isinstance(value, str) and value.endswith("Z"):
        return value.replace("Z", "+00:00")
    return value


# -------------------------------------------------
# Building invite (shareable code)
# -------------------------------------------------
class InviteCreate(BaseModel):
    default_role: MemberRole = MemberRole.tenant
    max_uses: Optional[int] = Field(None, ge=1, description="Empty = unlimited")
    expires_days: Optional[int] = Field(None, ge=1, description="Empty = never expires")


class InviteRead(BaseModel):
    id: str
    building_id: str
    code: str
    default_role: str = MemberRole.tenant.value
    is_active: bool = True
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = None
    uses_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("expires_at", "created_at", mode="before")
    def normalize_timestamps(cls, v):
        return _parse_timestamp(v)


# -------------------------------------------------
# Pending invite (staged before first login)
# -------------------------------------------------
class PendingInviteCreate(BaseModel):
    """
    Body for POST /api/pending-invite.
    Required fields are checked in the route so the error is a 400.
    """

    user_email: Optional[EmailStr] = None
    building_id: Optional[str] = None
    invite_id: Optional[str] = None
    apartment_number: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    default_role: Optional[MemberRole] = None

    @field_validator("apartment_number", mode="before")
    def apartment_as_text(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("user_email", mode="before")
    def normalize_email(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    def missing_required(self) -> list:
        return [
            name
            for name in ("user_email", "building_id", "invite_id", "apartment_number", "full_name")
            if not getattr(self, name)
        ]
