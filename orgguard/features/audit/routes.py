"""
Audit trail routes.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core import config
from orgguard.core.database.engine import get_db
from orgguard.core.database.pagination import page_meta
from orgguard.features.audit.recorder import get_audit_trails
from orgguard.features.audit.schemas import AuditTrailListResponse
from orgguard.features.permissions.dependencies import permission_required


router = APIRouter()


@router.get("/{organization_id}/audit", response_model=AuditTrailListResponse)
async def list_audit_trails(
    organization_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _user_id: Annotated[str, Depends(permission_required("audit", "read"))],
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """List an organization's audit trail, newest first."""
    page = await get_audit_trails(
        db,
        organization_id=organization_id,
        resource_type=resource_type,
        resource_id=resource_id,
        limit=limit,
        offset=offset,
    )
    return AuditTrailListResponse(items=page.items, total=page.total, **page_meta(page.total, limit, offset))
