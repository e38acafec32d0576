"""
User schemas for API request/response validation.
Separates internal models from API contracts using Pydantic.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from realty.models.user import UserRole

MIN_PASSWORD_LENGTH = 8


class UserBase(BaseModel):
    """Base user schema with common fields."""

    email: EmailStr
    name: str = Field(min_length=1, max_length=255)


class UserCreate(UserBase):
    """Schema for creating a user with a known password."""

    password: str


class AdminUserCreate(UserBase):
    """
    Schema for an admin creating an account.
    Leaving ``password`` empty generates a temporary one.
    """

    role: UserRole = UserRole.AGENT
    password: Optional[str] = Field(default=None, min_length=MIN_PASSWORD_LENGTH)


class AdminUserUpdate(UserBase):
    """Schema for an admin editing an account."""

    role: UserRole


class PasswordChange(BaseModel):
    """Schema for a user changing their own password."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)
    confirm_password: str = Field(min_length=1)

    @model_validator(mode="after")
    def check_new_password(self) -> "PasswordChange":
        if self.new_password != self.confirm_password:
            raise ValueError("New password and confirmation do not match")
        if len(self.new_password) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if self.current_password == self.new_password:
            raise ValueError("New password must be different from current password")
        return self


class UserResponse(UserBase):
    """
    Schema for user data in API responses.
    Excludes sensitive information like hashed_password.
    """

    id: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserWithPassword(BaseModel):
    """Response carrying a one-time temporary password."""

    user: UserResponse
    temporary_password: Optional[str] = None
    message: str
