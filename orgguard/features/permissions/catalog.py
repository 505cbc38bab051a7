"""
Permission catalog: default definitions and idempotent seeding.

`ensure_seeded` creates missing permissions and global role grants. Running it
any number of times, from any number of processes, leaves the same catalog as
running it once: existing rows are left untouched, and a uniqueness violation
from a concurrent writer counts as "already present".

Usage:
    async with AsyncSessionLocal() as db:
        await ensure_seeded(db, default_catalog())
"""
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core.errors import SeedConflict
from orgguard.features.permissions.models import Permission, RolePermission, normalize_scope
from orgguard.features.permissions.resolver import find_grant, find_permission
from orgguard.features.permissions.schemas import CatalogConfig, PermissionDefinition
from orgguard.utils import get_logger


log = get_logger(__name__)


DEFAULT_PERMISSIONS = [
    # Organization permissions
    ("organization", "create", "Create organizations"),
    ("organization", "read", "View organization details"),
    ("organization", "update", "Update organization settings"),
    ("organization", "delete", "Delete organizations"),
    ("organization", "manage", "Full organization management"),

    # Team permissions
    ("team", "create", "Create teams"),
    ("team", "read", "View teams"),
    ("team", "update", "Update teams"),
    ("team", "delete", "Delete teams"),
    ("team", "manage", "Full team management"),

    # Member permissions
    ("member", "create", "Invite members"),
    ("member", "read", "View members"),
    ("member", "update", "Update member roles"),
    ("member", "delete", "Remove members"),
    ("member", "manage", "Full member management"),

    # Invitation permissions
    ("invitation", "create", "Create invitations"),
    ("invitation", "read", "View invitations"),
    ("invitation", "delete", "Cancel invitations"),

    # Log access
    ("activity", "read", "View organization activity logs"),
    ("audit", "read", "View organization audit trails"),
]


DEFAULT_ROLE_PERMISSIONS = {
    "owner": [
        "organization.manage",
        "team.manage",
        "member.manage",
        "invitation.create", "invitation.read", "invitation.delete",
        "activity.read",
        "audit.read",
    ],
    "admin": [
        "organization.read", "organization.update",
        "team.manage",
        "member.create", "member.read", "member.update", "member.delete",
        "invitation.create", "invitation.read", "invitation.delete",
        "activity.read",
        "audit.read",
    ],
    "member": [
        "organization.read",
        "team.read",
        "member.read",
    ],
}


def default_catalog() -> CatalogConfig:
    """The built-in catalog for owner/admin/member organizations."""
    return CatalogConfig(
        permissions=[
            PermissionDefinition.of(resource, action, description)
            for resource, action, description in DEFAULT_PERMISSIONS
        ],
        role_permissions={role: list(names) for role, names in DEFAULT_ROLE_PERMISSIONS.items()},
        roles=list(DEFAULT_ROLE_PERMISSIONS),
    )


class SeedReport(BaseModel):
    """Counts from one `ensure_seeded` run."""
    permissions_created: int = 0
    permissions_existing: int = 0
    grants_created: int = 0
    grants_existing: int = 0
    grants_skipped: int = 0


async def _insert_or_conflict(db: AsyncSession, row, kind: str, key: str) -> None:
    """Commit a single new row; a uniqueness violation becomes SeedConflict."""
    db.add(row)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise SeedConflict(kind, key) from e


async def ensure_permission(db: AsyncSession, definition: PermissionDefinition) -> tuple[str, bool]:
    """
    Create the permission if no row with its name exists.

    An existing row is never modified (its description is kept).

    Returns:
        (permission_id, created)
    """
    existing = await find_permission(db, definition.name)
    if existing is not None:
        log.debug(f"Permission '{definition.name}' already exists, skipping")
        return existing.id, False

    permission = Permission(
        name=definition.name,
        resource=definition.resource,
        action=definition.action,
        description=definition.description,
    )
    try:
        await _insert_or_conflict(db, permission, "permission", definition.name)
    except SeedConflict as e:
        log.debug(f"Seed conflict: {e}; treating as present")
        existing = await find_permission(db, definition.name)
        if existing is None:
            raise
        return existing.id, False

    log.info(f"Created permission: {definition.name}")
    return permission.id, True


async def ensure_grant(
    db: AsyncSession,
    role: str,
    permission_id: str,
    organization_id: Optional[str] = None,
) -> bool:
    """
    Create the (role, permission, scope) grant if absent.

    Returns:
        True if a row was created, False if it was already present
    """
    scope = normalize_scope(organization_id)
    if await find_grant(db, role, permission_id, scope) is not None:
        return False

    grant = RolePermission(role=role, permission_id=permission_id, organization_id=scope)
    try:
        await _insert_or_conflict(db, grant, "role permission", f"{role}:{permission_id}:{scope or 'global'}")
    except SeedConflict as e:
        log.debug(f"Seed conflict: {e}; treating as present")
        return False
    return True


async def grant_role_permission(
    db: AsyncSession,
    role: str,
    permission_name: str,
    organization_id: Optional[str] = None,
) -> bool:
    """
    Grant a catalog permission to a role, globally or for one organization.

    Raises:
        LookupError: if no permission has that name
    """
    permission = await find_permission(db, permission_name)
    if permission is None:
        raise LookupError(f"Unknown permission {permission_name!r}")
    created = await ensure_grant(db, role, permission.id, organization_id)
    if created:
        log.info(f"Granted '{permission_name}' to role '{role}' at scope {organization_id or 'global'}")
    return created


async def ensure_seeded(db: AsyncSession, catalog: CatalogConfig) -> SeedReport:
    """
    Idempotently seed permissions and global role grants.

    Role-map entries naming a permission that does not exist are skipped with
    a warning. Commits as it goes.
    """
    report = SeedReport()
    log.info(f"Seeding {len(catalog.permissions)} permissions...")

    for definition in catalog.permissions:
        _, created = await ensure_permission(db, definition)
        if created:
            report.permissions_created += 1
        else:
            report.permissions_existing += 1

    for role, permission_names in catalog.role_permissions.items():
        for name in permission_names:
            permission = await find_permission(db, name)
            if permission is None:
                log.warning(f"Permission '{name}' not found for role '{role}'")
                report.grants_skipped += 1
                continue
            if await ensure_grant(db, role, permission.id):
                report.grants_created += 1
            else:
                report.grants_existing += 1

    log.info(
        f"Seeding done: {report.permissions_created} permissions created, "
        f"{report.grants_created} grants created, {report.grants_skipped} skipped"
    )
    return report
