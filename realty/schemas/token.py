"""
Session token schemas.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from realty.models.user import UserRole


class SessionClaims(BaseModel):
    """Decoded session token claims as read by the session gate."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    last_activity: Optional[int] = Field(default=None, alias="lastActivity", strict=True)
    server_start_time: Optional[int] = Field(default=None, alias="serverStartTime", strict=True)
    exp: Optional[int] = None


class Identity(BaseModel):
    """Minimal caller identity returned by the token reader."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: UserRole


class AdminCheck(BaseModel):
    """Result of the admin role verification."""

    is_admin: bool
    user_id: Optional[str] = None
