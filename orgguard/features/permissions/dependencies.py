"""
FastAPI dependencies for route protection.

Routes that act inside an organization take `organization_id` as a path
parameter; the dependency resolves the caller's permission there before the
route body runs.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core.database.engine import get_db
from orgguard.features.permissions.resolver import require_permission
from orgguard.features.users.dependencies import get_current_user_id


def permission_required(resource: str, action: str):
    """
    FastAPI dependency to require a permission in the path's organization.

    Usage:
        @router.get("/{organization_id}/audit")
        async def list_audit(
            organization_id: str,
            user_id: str = Depends(permission_required("audit", "read")),
        ):
            ...

    Returns:
        Dependency function that returns the current user id if permitted

    Raises:
        PermissionDenied: mapped to 403 by the app's exception handler
    """
    async def permission_dependency(
        organization_id: str,
        db: Annotated[AsyncSession, Depends(get_db)],
        user_id: Annotated[str, Depends(get_current_user_id)],
    ) -> str:
        await require_permission(db, user_id, organization_id, resource, action)
        return user_id

    return permission_dependency
