"""
Permission resolution for organization members.

`has_permission` answers "may this user perform resource.action in this
organization?" from the user's membership role and the role's grants:

1. No organization, no membership, or an unrecognized role: deny.
2. A grant of `resource.action` to the role at the checked scope: allow.
3. A grant of the wildcard `resource.manage` at the checked scope: allow.
4. Anything else: deny.

The checked scopes are the organization itself and, when global inheritance
is on (the default), the global scope. Each lookup is an exact match on its
scope column; a grant for one organization never applies to another.

Resolution only reads the store, so it needs no locking and always gives the
same answer for the same catalog and memberships.
"""
from typing import Iterable, Optional, Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core import config
from orgguard.core.errors import PermissionDenied
from orgguard.features.organizations.models import OrganizationMember
from orgguard.features.permissions.models import Permission, RolePermission, normalize_scope
from orgguard.utils import get_logger


log = get_logger(__name__)

MANAGE_ACTION = "manage"


# ============================================================================
# Store lookups
# ============================================================================

async def get_member_role(db: AsyncSession, user_id: str, organization_id: str) -> Optional[str]:
    """The user's role in the organization, or None if not a member."""
    result = await db.execute(
        select(OrganizationMember.role).where(
            OrganizationMember.user_id == user_id,
            OrganizationMember.organization_id == organization_id,
        )
    )
    return result.scalar_one_or_none()


async def find_permission(db: AsyncSession, name: str) -> Optional[Permission]:
    result = await db.execute(select(Permission).where(Permission.name == name))
    return result.scalar_one_or_none()


async def find_grant(
    db: AsyncSession,
    role: str,
    permission_id: str,
    organization_id: Optional[str],
) -> Optional[RolePermission]:
    """Exact-match lookup of one (role, permission, scope) grant."""
    scope = normalize_scope(organization_id)
    stmt = select(RolePermission).where(
        RolePermission.role == role,
        RolePermission.permission_id == permission_id,
    )
    if scope is None:
        stmt = stmt.where(RolePermission.organization_id.is_(None))
    else:
        stmt = stmt.where(RolePermission.organization_id == scope)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


# ============================================================================
# Permission Checking Functions
# ============================================================================

def _scopes(organization_id: Optional[str], inherit_global: bool) -> list[Optional[str]]:
    scope = normalize_scope(organization_id)
    if scope is None:
        return [None]
    return [scope, None] if inherit_global else [scope]


async def _role_has(
    db: AsyncSession,
    role: str,
    permission_name: str,
    scopes: Sequence[Optional[str]],
) -> Optional[str]:
    """
    Find the first scope at which `role` holds `permission_name`.

    Returns:
        The organization id or "global" for the matching grant, None if the
        permission does not exist or no scope grants it
    """
    permission = await find_permission(db, permission_name)
    if permission is None:
        return None
    for scope in scopes:
        if await find_grant(db, role, permission.id, scope) is not None:
            return scope or "global"
    return None


async def has_permission(
    db: AsyncSession,
    user_id: str,
    organization_id: Optional[str],
    resource: str,
    action: str,
    *,
    recognized_roles: Optional[Iterable[str]] = None,
    inherit_global: Optional[bool] = None,
) -> bool:
    """
    Check if user has permission to perform an action on a resource.

    Args:
        db: Database session
        user_id: Acting user
        organization_id: Organization context (None means no membership, so deny)
        resource: Resource type (e.g., "member", "organization")
        action: Action (e.g., "read", "delete")
        recognized_roles: Roles to honour (defaults to config.RECOGNIZED_ROLES)
        inherit_global: Also accept global grants inside an organization
            (defaults to config.INHERIT_GLOBAL_GRANTS)

    Returns:
        True if granted, False otherwise. Missing memberships and unknown
        permissions are denials, never errors.

    Global grants are inherited inside an organization by default, so the
    globally seeded catalog applies in every organization. Pass
    `inherit_global=False` or set INHERIT_GLOBAL_GRANTS=0 to match grants
    against the organization scope only.
    """
    roles = set(config.RECOGNIZED_ROLES if recognized_roles is None else recognized_roles)
    inherit = config.INHERIT_GLOBAL_GRANTS if inherit_global is None else inherit_global

    role = None
    if organization_id:
        role = await get_member_role(db, user_id, organization_id)

    if not role:
        log.debug(f"User {user_id} has no role in org {organization_id} - denied {resource}.{action}")
        return False

    if role not in roles:
        log.warning(f"User {user_id} has unrecognized role {role!r} in org {organization_id} - denied")
        return False

    scopes = _scopes(organization_id, inherit)

    granted_at = await _role_has(db, role, f"{resource}.{action}", scopes)
    if granted_at is not None:
        log.debug(f"User {user_id} ({role}) granted {resource}.{action} in org {organization_id} via {granted_at} grant")
        return True

    if action != MANAGE_ACTION:
        granted_at = await _role_has(db, role, f"{resource}.{MANAGE_ACTION}", scopes)
        if granted_at is not None:
            log.debug(
                f"User {user_id} ({role}) granted {resource}.{action} in org {organization_id} "
                f"via {resource}.{MANAGE_ACTION} ({granted_at})"
            )
            return True

    log.debug(f"User {user_id} ({role}) denied {resource}.{action} in org {organization_id}")
    return False


async def has_any_permission(
    db: AsyncSession,
    user_id: str,
    organization_id: Optional[str],
    permissions: Iterable[tuple[str, str]],
    **kwargs,
) -> bool:
    """True if any of the (resource, action) pairs is granted."""
    for resource, action in permissions:
        if await has_permission(db, user_id, organization_id, resource, action, **kwargs):
            return True
    return False


async def require_permission(
    db: AsyncSession,
    user_id: str,
    organization_id: Optional[str],
    resource: str,
    action: str,
    **kwargs,
) -> None:
    """
    Gate a mutation: return normally if granted, else raise.

    Must be awaited before any state change it protects.

    Raises:
        PermissionDenied: if the user lacks resource.action
    """
    if not await has_permission(db, user_id, organization_id, resource, action, **kwargs):
        raise PermissionDenied(resource, action)
