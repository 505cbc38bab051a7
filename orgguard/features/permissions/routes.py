"""
Permission check API routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core.database.engine import get_db
from orgguard.features.permissions.resolver import has_permission
from orgguard.features.permissions.schemas import PermissionCheckRequest, PermissionCheckResponse
from orgguard.features.users.dependencies import get_current_user_id


router = APIRouter()


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    check_request: PermissionCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[str, Depends(get_current_user_id)],
):
    """Check if the current user has a specific permission."""
    has_perm = await has_permission(
        db,
        user_id,
        check_request.organization_id,
        check_request.resource,
        check_request.action,
    )

    return PermissionCheckResponse(
        has_permission=has_perm,
        reason=None if has_perm else f"Permission denied: {check_request.resource}.{check_request.action}"
    )
