# models/contact.py

from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class ContactRequestCreate(BaseModel):
    """Public 'get in touch' form from the landing page."""
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: str = Field(..., min_length=1)
    city: Optional[str] = None
    message: Optional[str] = None
