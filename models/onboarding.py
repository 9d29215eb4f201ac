# models/onboarding.py

from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class AdminCreateUser(BaseModel):
    """
    Payload for POST /api/admin/create-user.

    Required fields are checked by the route (so a missing field is a
    400 with a readable message, raised before any Supabase call):
        email, full_name, building_id, apartment_number

    role is the per-building role (committee | tenant); the profile's
    system role is derived from it for new users.
    """

    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    phone2: Optional[str] = None
    building_id: Optional[str] = None
    apartment_number: Optional[str] = None
    role: str = "committee"

    @field_validator("full_name", "phone", "phone2", "building_id", "apartment_number", mode="before")
    def strip_blank(cls, v):
        # apartment numbers arrive as int from some forms
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        return _blank_to_none(v)

    @field_validator("email", mode="before")
    def normalize_email(cls, v):
        v = _blank_to_none(v)
        return v.lower() if isinstance(v, str) else v

    def missing_required(self) -> list:
        return [
            name
            for name in ("email", "full_name", "building_id", "apartment_number")
            if not getattr(self, name)
        ]


class AdminUpdateRole(BaseModel):
    """Payload for POST /api/admin/update-role."""

    userId: Optional[str] = Field(None, description="Target profile / auth user id")
    role: Optional[str] = Field(None, description="admin | tenant")


class OnboardingResult(BaseModel):
    success: bool = True
    userId: str
    isNewUser: bool
    message: str
    sagaId: Optional[str] = None


class ActionResult(BaseModel):
    success: bool = True
    message: str
