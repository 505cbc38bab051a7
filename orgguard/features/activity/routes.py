"""
Activity log routes.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core import config
from orgguard.core.database.engine import get_db
from orgguard.core.database.pagination import page_meta
from orgguard.features.activity.recorder import get_activity_logs
from orgguard.features.activity.schemas import ActivityLogListResponse
from orgguard.features.permissions.dependencies import permission_required


router = APIRouter()


@router.get("/{organization_id}/activity", response_model=ActivityLogListResponse)
async def list_activity_logs(
    organization_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    _user_id: Annotated[str, Depends(permission_required("activity", "read"))],
    user_id: Optional[str] = None,
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """List an organization's activity, newest first."""
    page = await get_activity_logs(db, organization_id=organization_id, user_id=user_id, limit=limit, offset=offset)
    return ActivityLogListResponse(items=page.items, total=page.total, **page_meta(page.total, limit, offset))
