from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy import delete

from orgguard.core.errors import PermissionDenied
from orgguard.features.permissions.catalog import (
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLE_PERMISSIONS,
    grant_role_permission,
)
from orgguard.features.permissions.models import RolePermission
from orgguard.features.permissions.resolver import (
    find_permission,
    get_member_role,
    has_any_permission,
    has_permission,
    require_permission,
)

from conftest import ORG_A, ORG_B


OWNER = "01USEROWNER000000000000000"
ADMIN = "01USERADMIN000000000000000"
MEMBER = "01USERMEMBER00000000000000"
STRANGER = "01USERSTRANGER000000000000"


@pytest_asyncio.fixture
async def members(seeded_db, add_member):
    await add_member(OWNER, ORG_A, "owner")
    await add_member(ADMIN, ORG_A, "admin")
    await add_member(MEMBER, ORG_A, "member")
    return seeded_db


@pytest.mark.asyncio
async def test_owner_gets_update_through_manage_wildcard(members) -> None:
    # owner holds organization.manage but not organization.update directly
    assert await has_permission(members, OWNER, ORG_A, "organization", "update") is True
    assert await has_permission(members, OWNER, ORG_A, "member", "delete") is True
    assert await has_permission(members, OWNER, ORG_A, "team", "create") is True


@pytest.mark.asyncio
async def test_direct_grants_and_default_deny(members) -> None:
    assert await has_permission(members, MEMBER, ORG_A, "organization", "read") is True
    assert await has_permission(members, MEMBER, ORG_A, "member", "delete") is False
    assert await has_permission(members, MEMBER, ORG_A, "team", "create") is False

    assert await has_permission(members, ADMIN, ORG_A, "member", "delete") is True
    assert await has_permission(members, ADMIN, ORG_A, "organization", "delete") is False
    assert await has_permission(members, ADMIN, ORG_A, "team", "delete") is True


@pytest.mark.asyncio
async def test_unknown_permission_is_denied(members) -> None:
    assert await has_permission(members, OWNER, ORG_A, "billing", "read") is False
    assert await has_permission(members, OWNER, ORG_A, "invitation", "update") is False


@pytest.mark.asyncio
async def test_missing_membership_is_denied(members) -> None:
    assert await get_member_role(members, STRANGER, ORG_A) is None
    assert await has_permission(members, STRANGER, ORG_A, "organization", "read") is False
    # Owner of ORG_A has no role in ORG_B.
    assert await has_permission(members, OWNER, ORG_B, "organization", "read") is False


@pytest.mark.asyncio
async def test_no_organization_context_is_denied(members) -> None:
    assert await has_permission(members, OWNER, None, "organization", "read") is False


@pytest.mark.asyncio
async def test_unrecognized_role_is_denied(members, add_member) -> None:
    await add_member(STRANGER, ORG_A, "guest")
    await grant_role_permission(members, "guest", "organization.read")

    assert await has_permission(members, STRANGER, ORG_A, "organization", "read") is False
    assert await has_permission(
        members, STRANGER, ORG_A, "organization", "read",
        recognized_roles=["owner", "admin", "member", "guest"],
    ) is True


@pytest.mark.asyncio
async def test_organization_grant_applies_only_to_that_organization(members, add_member) -> None:
    await add_member(MEMBER, ORG_B, "member")
    await grant_role_permission(members, "member", "member.delete", ORG_A)

    assert await has_permission(members, MEMBER, ORG_A, "member", "delete") is True
    assert await has_permission(members, MEMBER, ORG_B, "member", "delete") is False


@pytest.mark.asyncio
async def test_strict_scope_ignores_global_grants(members) -> None:
    assert await has_permission(members, OWNER, ORG_A, "organization", "update", inherit_global=False) is False

    await grant_role_permission(members, "owner", "organization.manage", ORG_A)
    assert await has_permission(members, OWNER, ORG_A, "organization", "update", inherit_global=False) is True


@pytest.mark.asyncio
async def test_revoked_grant_is_denied(members) -> None:
    permission = await find_permission(members, "organization.read")
    await members.execute(
        delete(RolePermission).where(
            RolePermission.role == "member",
            RolePermission.permission_id == permission.id,
        )
    )
    await members.commit()

    assert await has_permission(members, MEMBER, ORG_A, "organization", "read") is False


@pytest.mark.asyncio
async def test_has_any_permission(members) -> None:
    assert await has_any_permission(members, MEMBER, ORG_A, [("member", "delete"), ("member", "read")]) is True
    assert await has_any_permission(members, MEMBER, ORG_A, [("member", "delete"), ("team", "update")]) is False


@pytest.mark.asyncio
async def test_require_permission(members) -> None:
    assert await require_permission(members, ADMIN, ORG_A, "member", "delete") is None

    with pytest.raises(PermissionDenied) as exc_info:
        await require_permission(members, MEMBER, ORG_A, "member", "delete")
    assert exc_info.value.resource == "member"
    assert exc_info.value.action == "delete"
    assert str(exc_info.value) == "Permission denied: member.delete"


ROLE_USERS = {"owner": OWNER, "admin": ADMIN, "member": MEMBER}

# Catalog pairs plus pairs with no permission row at all.
CHECKED_PAIRS = [(resource, action) for resource, action, _ in DEFAULT_PERMISSIONS] + [
    ("invitation", "update"),
    ("team", "archive"),
    ("billing", "read"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("role", sorted(DEFAULT_ROLE_PERMISSIONS))
@pytest.mark.parametrize("resource,action", CHECKED_PAIRS)
async def test_default_catalog_grants_exactly_the_role_map(members, role, resource, action) -> None:
    granted = set(DEFAULT_ROLE_PERMISSIONS[role])
    expected = f"{resource}.{action}" in granted or f"{resource}.manage" in granted

    assert await has_permission(members, ROLE_USERS[role], ORG_A, resource, action) is expected
