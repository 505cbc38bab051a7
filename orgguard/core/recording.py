"""
Best-effort writes for append-only log tables.

Activity and audit entries are written after the primary operation has
succeeded, in their own session. A failed write is reported as a
`RecordResult` carrying a `LogPersistenceFailure` and logged at error level;
it never reaches the caller of `record_*` and never touches the caller's
transaction.
"""
import json
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from orgguard.core.database import engine as db_engine
from orgguard.core.database.base import Base
from orgguard.core.errors import LogPersistenceFailure, QueryDecodeFailure
from orgguard.utils import get_logger


log = get_logger(__name__)

SessionFactory = Callable[[], AsyncSession]


@dataclass(frozen=True)
class RecordResult:
    """Outcome of one log write."""
    ok: bool
    entry_id: Optional[str] = None
    error: Optional[LogPersistenceFailure] = None


def encode_json(value: Any) -> Optional[str]:
    """Serialize a structured payload to text; None stays None."""
    if value is None:
        return None
    return json.dumps(value, default=str)


def decode_json(raw: Optional[str], kind: str, row_id: str, field: str) -> Any:
    """
    Parse a stored JSON payload for one row.

    A malformed payload is logged as a QueryDecodeFailure and read as None so
    the rest of the page is unaffected.
    """
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError) as e:
        log.warning(str(QueryDecodeFailure(kind, row_id, field, e)))
        return None


async def write_entry(
    kind: str,
    build_row: Callable[[], Base],
    session_factory: Optional[SessionFactory] = None,
) -> RecordResult:
    """
    Build and insert one row in a dedicated session.

    Any exception from encoding, connecting, or committing is captured in the
    result. Cancellation still propagates.
    """
    factory = session_factory or db_engine.AsyncSessionLocal
    try:
        row = build_row()
        async with factory() as session:
            session.add(row)
            # Read the id before commit; commit may expire the row.
            await session.flush()
            entry_id = row.id
            await session.commit()
    except Exception as e:
        failure = LogPersistenceFailure(kind, e)
        log.error(str(failure), exc_info=e)
        return RecordResult(ok=False, error=failure)
    return RecordResult(ok=True, entry_id=entry_id)
