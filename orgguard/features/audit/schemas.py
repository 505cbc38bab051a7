"""
Pydantic schemas for audit trail entries.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


AuditAction = Literal["create", "update", "delete"]


class AuditChanges(BaseModel):
    """Snapshots of the resource before and after the mutation."""
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None


class AuditTrailCreate(BaseModel):
    """An audit entry as supplied by the caller after its mutation succeeded."""
    user_id: str = Field(..., min_length=1, description="Acting user")
    organization_id: Optional[str] = Field(None, description="Organization context")
    action: AuditAction
    resource_type: str = Field(..., min_length=1, max_length=50)
    resource_id: str = Field(..., min_length=1, max_length=64)
    changes: Optional[AuditChanges] = None
    reason: Optional[str] = None
    ip_address: Optional[str] = Field(None, max_length=45)
    user_agent: Optional[str] = Field(None, max_length=255)


class AuditTrailResponse(BaseModel):
    """Schema for audit trail response."""
    id: str
    user_id: str
    organization_id: Optional[str]
    action: str
    resource_type: str
    resource_id: str
    changes: Optional[AuditChanges]
    reason: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


class AuditTrailPage(BaseModel):
    """One page of audit entries plus the total matching the filter."""
    items: List[AuditTrailResponse]
    total: int


class AuditTrailListResponse(AuditTrailPage):
    """Schema for paginated audit trail list."""
    page: int
    page_size: int
    pages: int
