from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from orgguard.core.errors import LogPersistenceFailure
from orgguard.features.audit.models import AuditTrail
from orgguard.features.audit.recorder import get_audit_trails, record_audit, write_audit
from orgguard.features.audit.schemas import AuditChanges, AuditTrailCreate

from conftest import ORG_A, ORG_B


ACTOR = "01USERAUDITOR0000000000000"


def _entry(**overrides) -> AuditTrailCreate:
    fields = {
        "user_id": ACTOR,
        "organization_id": ORG_A,
        "action": "update",
        "resource_type": "team",
        "resource_id": "team-1",
    }
    fields.update(overrides)
    return AuditTrailCreate(**fields)


def _unreachable_store():
    raise OperationalError("INSERT INTO audit_trails", {}, ConnectionRefusedError("audit store down"))


@pytest.mark.asyncio
async def test_before_and_after_round_trip(db, session_factory) -> None:
    await record_audit(
        _entry(changes=AuditChanges(before={"a": 1}, after={"a": 2}), reason="rename"),
        session_factory=session_factory,
    )

    page = await get_audit_trails(db, organization_id=ORG_A)

    assert page.total == 1
    (item,) = page.items
    assert item.changes.before == {"a": 1}
    assert item.changes.after == {"a": 2}
    assert item.reason == "rename"
    assert item.action == "update"


@pytest.mark.asyncio
async def test_create_with_only_after_snapshot(db, session_factory) -> None:
    await record_audit(
        _entry(action="create", changes=AuditChanges(after={"name": "Ops"})),
        session_factory=session_factory,
    )

    (item,) = (await get_audit_trails(db)).items
    assert item.changes.before is None
    assert item.changes.after == {"name": "Ops"}

    stored = await db.get(AuditTrail, item.id)
    assert stored.changes == '{"after": {"name": "Ops"}}'


@pytest.mark.asyncio
async def test_failing_store_never_raises(caplog) -> None:
    with caplog.at_level(logging.ERROR):
        assert await record_audit(_entry(), session_factory=_unreachable_store) is None

    result = await write_audit(_entry(), session_factory=_unreachable_store)
    assert result.ok is False
    assert isinstance(result.error, LogPersistenceFailure)
    assert result.error.kind == "audit"
    assert "Failed to write audit entry" in caplog.text


@pytest.mark.asyncio
async def test_filters_by_organization_and_resource(db, session_factory) -> None:
    await record_audit(_entry(resource_type="team", resource_id="t1"), session_factory=session_factory)
    await record_audit(_entry(resource_type="team", resource_id="t2"), session_factory=session_factory)
    await record_audit(_entry(resource_type="member", resource_id="m1", action="delete"), session_factory=session_factory)
    await record_audit(_entry(organization_id=ORG_B, resource_type="team", resource_id="t1"), session_factory=session_factory)

    teams_in_a = await get_audit_trails(db, organization_id=ORG_A, resource_type="team")
    assert teams_in_a.total == 2

    history = await get_audit_trails(db, resource_type="team", resource_id="t1")
    assert history.total == 2
    assert {item.organization_id for item in history.items} == {ORG_A, ORG_B}

    paged = await get_audit_trails(db, organization_id=ORG_A, limit=2, offset=2)
    assert paged.total == 3
    assert len(paged.items) == 1
    # Oldest entry in ORG_A lands on the last page.
    assert paged.items[0].resource_id == "t1"


@pytest.mark.asyncio
async def test_corrupt_changes_only_affect_their_row(db, session_factory, caplog) -> None:
    await record_audit(_entry(resource_id="good", changes=AuditChanges(after={"x": 1})), session_factory=session_factory)
    db.add(AuditTrail(user_id=ACTOR, organization_id=ORG_A, action="update",
                      resource_type="team", resource_id="broken", changes="{oops"))
    db.add(AuditTrail(user_id=ACTOR, organization_id=ORG_A, action="update",
                      resource_type="team", resource_id="scalar", changes="42"))
    await db.commit()

    with caplog.at_level(logging.WARNING):
        page = await get_audit_trails(db, organization_id=ORG_A)

    by_resource = {item.resource_id: item for item in page.items}
    assert page.total == 3
    assert by_resource["good"].changes.after == {"x": 1}
    assert by_resource["broken"].changes is None
    assert by_resource["scalar"].changes is None
    assert "Undecodable changes" in caplog.text


def test_action_outside_create_update_delete_is_rejected() -> None:
    with pytest.raises(ValidationError):
        _entry(action="archive")
