"""
Contact form schema.
"""

from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

ContactInterest = Literal["buy", "rent", "sell", "invest", "other"]


class ContactMessage(BaseModel):
    """A submission of the public contact form."""

    full_name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(min_length=5, max_length=30)
    interest: ContactInterest
    message: str = Field(min_length=10, max_length=5000)
    consent: bool

    @field_validator("full_name", "phone", "message")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("consent")
    @classmethod
    def consent_given(cls, value: bool) -> bool:
        if not value:
            raise ValueError("consent is required")
        return value
