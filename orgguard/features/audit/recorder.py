"""
Audit trail recording and retrieval.

Callers capture the before/after snapshots themselves and record them once
the mutation has committed. Like activity logging, `record_audit` absorbs
every persistence failure.
"""
from typing import Any, Optional
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core.database.pagination import paginate
from orgguard.core.errors import QueryDecodeFailure
from orgguard.core.recording import RecordResult, SessionFactory, decode_json, encode_json, write_entry
from orgguard.features.audit.models import AuditTrail
from orgguard.features.audit.schemas import AuditChanges, AuditTrailCreate, AuditTrailPage, AuditTrailResponse
from orgguard.utils import get_logger


log = get_logger(__name__)

KIND = "audit"


def _encode_changes(changes: Optional[AuditChanges]) -> Optional[str]:
    if changes is None:
        return None
    payload = {}
    if changes.before is not None:
        payload["before"] = changes.before
    if changes.after is not None:
        payload["after"] = changes.after
    return encode_json(payload)


async def write_audit(
    entry: AuditTrailCreate,
    session_factory: Optional[SessionFactory] = None,
) -> RecordResult:
    """Insert one audit row and report the outcome."""
    def build() -> AuditTrail:
        return AuditTrail(
            user_id=entry.user_id,
            organization_id=entry.organization_id,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            changes=_encode_changes(entry.changes),
            reason=entry.reason,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
        )

    result = await write_entry(KIND, build, session_factory)
    if result.ok:
        log.info(
            f"Audit: user={entry.user_id} action={entry.action} "
            f"resource={entry.resource_type}:{entry.resource_id} org={entry.organization_id}"
        )
    return result


async def record_audit(
    entry: AuditTrailCreate,
    session_factory: Optional[SessionFactory] = None,
) -> None:
    """
    Record a mutation; failures are logged and dropped.

    Usage:
        before = team_snapshot(team)
        team.name = new_name
        await db.commit()
        await record_audit(AuditTrailCreate(
            user_id=user_id, organization_id=org_id, action="update",
            resource_type="team", resource_id=team.id,
            changes=AuditChanges(before=before, after=team_snapshot(team)),
        ))
    """
    await write_audit(entry, session_factory)


def _decode_changes(row: AuditTrail) -> Optional[AuditChanges]:
    raw: Any = decode_json(row.changes, KIND, row.id, "changes")
    if raw is None:
        return None
    try:
        if not isinstance(raw, dict):
            raise TypeError(f"expected object, got {type(raw).__name__}")
        return AuditChanges(before=raw.get("before"), after=raw.get("after"))
    except (TypeError, ValidationError) as e:
        log.warning(str(QueryDecodeFailure(KIND, row.id, "changes", e)))
        return None


def _to_response(row: AuditTrail) -> AuditTrailResponse:
    return AuditTrailResponse(
        id=row.id,
        user_id=row.user_id,
        organization_id=row.organization_id,
        action=row.action,
        resource_type=row.resource_type,
        resource_id=row.resource_id,
        changes=_decode_changes(row),
        reason=row.reason,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        created_at=row.created_at,
    )


async def get_audit_trails(
    db: AsyncSession,
    organization_id: Optional[str] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> AuditTrailPage:
    """List audit entries newest first, with the total matching the filters."""
    stmt = select(AuditTrail)

    if organization_id:
        stmt = stmt.where(AuditTrail.organization_id == organization_id)
    if resource_type:
        stmt = stmt.where(AuditTrail.resource_type == resource_type)
    if resource_id:
        stmt = stmt.where(AuditTrail.resource_id == resource_id)

    rows, total = await paginate(
        db,
        stmt,
        order_by=[AuditTrail.created_at.desc(), AuditTrail.id.desc()],
        limit=limit,
        offset=offset,
    )
    return AuditTrailPage(items=[_to_response(row) for row in rows], total=total)
