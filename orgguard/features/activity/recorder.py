"""
Activity recording and retrieval.

Activity logging is diagnostic: `record_activity` never raises, whatever the
state of the store.
"""
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core.database.pagination import paginate
from orgguard.core.recording import RecordResult, SessionFactory, decode_json, encode_json, write_entry
from orgguard.features.activity.models import ActivityLog
from orgguard.features.activity.schemas import ActivityLogCreate, ActivityLogPage, ActivityLogResponse
from orgguard.utils import get_logger


log = get_logger(__name__)

KIND = "activity"


async def write_activity(
    entry: ActivityLogCreate,
    session_factory: Optional[SessionFactory] = None,
) -> RecordResult:
    """Insert one activity row and report the outcome."""
    def build() -> ActivityLog:
        return ActivityLog(
            user_id=entry.user_id,
            organization_id=entry.organization_id,
            action=entry.action,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            description=entry.description,
            metadata_=encode_json(entry.metadata),
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
        )

    return await write_entry(KIND, build, session_factory)


async def record_activity(
    entry: ActivityLogCreate,
    session_factory: Optional[SessionFactory] = None,
) -> None:
    """
    Log an activity; failures are logged and dropped.

    Usage:
        await require_permission(db, user_id, org_id, "team", "create")
        team = await create_team(...)
        await record_activity(ActivityLogCreate(
            user_id=user_id, organization_id=org_id, action="team.created",
            resource_type="team", resource_id=team.id,
        ))
    """
    await write_activity(entry, session_factory)


def _to_response(row: ActivityLog) -> ActivityLogResponse:
    metadata = decode_json(row.metadata_, KIND, row.id, "metadata")
    if metadata is not None and not isinstance(metadata, dict):
        log.warning(f"Activity {row.id} metadata is not an object; reporting as absent")
        metadata = None
    return ActivityLogResponse(
        id=row.id,
        user_id=row.user_id,
        organization_id=row.organization_id,
        action=row.action,
        resource_type=row.resource_type,
        resource_id=row.resource_id,
        description=row.description,
        metadata=metadata,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        created_at=row.created_at,
    )


async def get_activity_logs(
    db: AsyncSession,
    organization_id: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> ActivityLogPage:
    """
    List activity newest first, with the total matching the filters.

    Args:
        db: Database session
        organization_id: Only entries in this organization
        user_id: Only entries by this user
        limit: Page size
        offset: Entries to skip
    """
    stmt = select(ActivityLog)

    if organization_id:
        stmt = stmt.where(ActivityLog.organization_id == organization_id)
    if user_id:
        stmt = stmt.where(ActivityLog.user_id == user_id)

    rows, total = await paginate(
        db,
        stmt,
        order_by=[ActivityLog.created_at.desc(), ActivityLog.id.desc()],
        limit=limit,
        offset=offset,
    )
    return ActivityLogPage(items=[_to_response(row) for row in rows], total=total)
