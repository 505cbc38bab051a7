"""
Pydantic schemas for activity log entries.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ActivityLogCreate(BaseModel):
    """An activity entry as supplied by the caller after its action succeeded."""
    user_id: str = Field(..., min_length=1, description="Acting user")
    organization_id: Optional[str] = Field(None, description="Organization context")
    action: str = Field(..., min_length=1, max_length=100, description="Action, e.g. 'member.removed'")
    resource_type: Optional[str] = Field(None, max_length=50)
    resource_id: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = Field(None, max_length=45)
    user_agent: Optional[str] = Field(None, max_length=255)


class ActivityLogResponse(BaseModel):
    """Schema for activity log response."""
    id: str
    user_id: str
    organization_id: Optional[str]
    action: str
    resource_type: Optional[str]
    resource_id: Optional[str]
    description: Optional[str]
    metadata: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


class ActivityLogPage(BaseModel):
    """One page of activity entries plus the total matching the filter."""
    items: List[ActivityLogResponse]
    total: int


class ActivityLogListResponse(ActivityLogPage):
    """Schema for paginated activity log list."""
    page: int
    page_size: int
    pages: int
