from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy import delete, func, select

from orgguard.core.errors import PermissionDenied
from orgguard.features.activity.models import ActivityLog
from orgguard.features.activity.recorder import record_activity
from orgguard.features.activity.schemas import ActivityLogCreate
from orgguard.features.audit.models import AuditTrail
from orgguard.features.audit.recorder import record_audit
from orgguard.features.audit.schemas import AuditChanges, AuditTrailCreate
from orgguard.features.organizations.models import OrganizationMember
from orgguard.features.permissions.resolver import get_member_role, require_permission

from conftest import ORG_A


ADMIN = "01USERADMIN000000000000000"
MEMBER = "01USERMEMBER00000000000000"
TARGET = "01USERTARGET00000000000000"


async def remove_member(db, session_factory, actor_id: str, organization_id: str, target_id: str) -> None:
    """A typical consumer: check, mutate, commit, then log."""
    await require_permission(db, actor_id, organization_id, "member", "delete")

    role = await get_member_role(db, target_id, organization_id)
    await db.execute(
        delete(OrganizationMember).where(
            OrganizationMember.user_id == target_id,
            OrganizationMember.organization_id == organization_id,
        )
    )
    await db.commit()

    await record_activity(
        ActivityLogCreate(
            user_id=actor_id,
            organization_id=organization_id,
            action="member.removed",
            resource_type="member",
            resource_id=target_id,
        ),
        session_factory=session_factory,
    )
    await record_audit(
        AuditTrailCreate(
            user_id=actor_id,
            organization_id=organization_id,
            action="delete",
            resource_type="member",
            resource_id=target_id,
            changes=AuditChanges(before={"user_id": target_id, "role": role}),
        ),
        session_factory=session_factory,
    )


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


@pytest_asyncio.fixture
async def org(seeded_db, add_member):
    await add_member(ADMIN, ORG_A, "admin")
    await add_member(MEMBER, ORG_A, "member")
    await add_member(TARGET, ORG_A, "member")
    return seeded_db


@pytest.mark.asyncio
async def test_denied_removal_writes_nothing(org, session_factory) -> None:
    with pytest.raises(PermissionDenied) as exc_info:
        await remove_member(org, session_factory, MEMBER, ORG_A, TARGET)

    assert (exc_info.value.resource, exc_info.value.action) == ("member", "delete")
    assert await get_member_role(org, TARGET, ORG_A) == "member"
    assert await _count(org, ActivityLog) == 0
    assert await _count(org, AuditTrail) == 0


@pytest.mark.asyncio
async def test_permitted_removal_is_logged_once(org, session_factory) -> None:
    await remove_member(org, session_factory, ADMIN, ORG_A, TARGET)

    assert await get_member_role(org, TARGET, ORG_A) is None
    assert await _count(org, ActivityLog) == 1
    assert await _count(org, AuditTrail) == 1

    audit = (await org.execute(select(AuditTrail))).scalar_one()
    assert audit.action == "delete"
    assert audit.user_id == ADMIN
