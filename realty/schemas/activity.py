"""
Activity schemas for the audit log viewer.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from realty.models.activity import ActivityAction, ActivityItemType
from realty.schemas.listing import OwnerSummary


class ActivityEntry(BaseModel):
    """An audit record waiting to be written."""

    user_id: Optional[str]
    action: ActivityAction
    item_type: ActivityItemType
    item_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class ActivityResponse(BaseModel):
    """An audit record as shown to admins."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    user_id: Optional[str] = None
    action: ActivityAction
    item_type: ActivityItemType
    item_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="details")
    ip_address: Optional[str] = None
    timestamp: datetime
    user: Optional[OwnerSummary] = None
