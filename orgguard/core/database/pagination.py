"""
Paginated, filtered reads with a total count.

Shared by the activity log and audit trail queries: the count covers every row
matching the filter and is independent of limit/offset.
"""
from typing import Any, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(
    db: AsyncSession,
    stmt: Select,
    order_by: Sequence[Any],
    limit: int,
    offset: int,
) -> tuple[list[Any], int]:
    """
    Run `stmt` as one page plus a total count.

    Args:
        db: Database session
        stmt: Filtered select over a single model
        order_by: Ordering clauses applied to the page query
        limit: Maximum rows in the page (must be positive)
        offset: Rows to skip (must be >= 0)

    Returns:
        (rows, total)
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must be >= 0, got {offset}")

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total_result = await db.execute(count_stmt)
    total = total_result.scalar() or 0

    page_stmt = stmt.order_by(*order_by).offset(offset).limit(limit)
    result = await db.execute(page_stmt)
    return list(result.scalars().all()), total


def page_meta(total: int, limit: int, offset: int) -> dict[str, int]:
    """page/page_size/pages numbers for list responses."""
    pages = (total + limit - 1) // limit if limit > 0 else 0
    page = (offset // limit) + 1 if limit > 0 else 1
    return {"page": page, "page_size": limit, "pages": pages}
