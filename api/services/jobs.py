"""Job service functions."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.jobs import JobCreate, JobUpdate
from core.models import Job, Page, Pagination, ReorderResult
from core.ordering import shift_orders
from database.models.records import JobRecord

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "order": (JobRecord.order.asc(),),
    "title": (JobRecord.title.asc(),),
    "createdAt": (JobRecord.created_at.desc(),),
}


def slugify(title: str) -> str:
    """``"Senior Frontend Developer"`` -> ``"senior-frontend-developer"``."""
    slug = re.sub(r"\s+", "-", title.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def _next_job_id(session: AsyncSession) -> str:
    ids = (await session.execute(select(JobRecord.id))).scalars().all()
    suffixes = [int(job_id[4:]) for job_id in ids if job_id[4:].isdigit()]
    return f"job-{max(suffixes, default=0) + 1}"


async def _slug_taken(session: AsyncSession, slug: str, exclude_id: Optional[str] = None) -> bool:
    query = select(JobRecord.id).where(JobRecord.slug == slug)
    if exclude_id:
        query = query.where(JobRecord.id != exclude_id)
    return (await session.execute(query)).first() is not None


async def list_jobs(
    session: AsyncSession,
    search: Optional[str] = None,
    status_filter: Optional[str] = None,
    experience_level: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    sort: str = "order",
) -> Dict[str, Any]:
    """List jobs matching the filters, one page at a time."""
    query = select(JobRecord)

    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(JobRecord.title).like(pattern),
                func.lower(cast(JobRecord.tags, String)).like(pattern),
            )
        )
    if status_filter:
        query = query.where(JobRecord.status == status_filter)
    if experience_level:
        query = query.where(JobRecord.experience_level == experience_level)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await session.execute(count_query)).scalar() or 0

    query = query.order_by(*SORT_COLUMNS.get(sort, SORT_COLUMNS["order"]), JobRecord.id)
    query = query.limit(page_size).offset((page - 1) * page_size)
    records = (await session.execute(query)).scalars().all()

    return Page[Job](
        data=[Job.model_validate(record) for record in records],
        pagination=Pagination.build(page, page_size, total),
    ).to_wire()


async def get_job(session: AsyncSession, job_id: str) -> Optional[Dict[str, Any]]:
    """Get job details."""
    record = await session.get(JobRecord, job_id)
    if record is None:
        return None
    return Job.model_validate(record).to_wire()


async def create_job(session: AsyncSession, data: JobCreate) -> Dict[str, Any]:
    """Append a job to the end of the board."""
    slug = data.slug or slugify(data.title)
    if await _slug_taken(session, slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug must be unique")

    job_count = (await session.execute(select(func.count(JobRecord.id)))).scalar() or 0
    record = JobRecord(
        id=await _next_job_id(session),
        slug=slug,
        order=job_count + 1,
        created_at=_now(),
        updated_at=_now(),
        **data.model_dump(exclude={"slug"}),
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)

    logger.info(f"Created job {record.id} at order {record.order}")
    return Job.model_validate(record).to_wire()


async def update_job(session: AsyncSession, job_id: str, changes: JobUpdate) -> Optional[Dict[str, Any]]:
    """Apply a partial update. Returns None if the job does not exist."""
    record = await session.get(JobRecord, job_id)
    if record is None:
        return None

    updates = changes.model_dump(exclude_unset=True)
    slug = updates.get("slug")
    if slug and await _slug_taken(session, slug, exclude_id=job_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug must be unique")

    for field, value in updates.items():
        if value is not None:
            setattr(record, field, value)
    record.updated_at = _now()

    await session.commit()
    await session.refresh(record)
    return Job.model_validate(record).to_wire()


async def reorder_job(
    session: AsyncSession,
    job_id: str,
    from_order: int,
    to_order: int,
) -> Dict[str, Any]:
    """
    Move one job and shift every job in between by one slot.

    The whole board is rewritten in one transaction, so ``order`` stays the
    permutation 1..N whether the request succeeds or is rejected.

    Raises:
        HTTPException: 404 for an unknown job, 400 for out-of-range
            positions, 409 when ``from_order`` is not the job's position
    """
    records = (await session.execute(select(JobRecord))).scalars().all()
    by_id = {record.id: record for record in records}

    moved = by_id.get(job_id)
    if moved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")

    total = len(records)
    if not (1 <= from_order <= total and 1 <= to_order <= total):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"fromOrder and toOrder must be between 1 and {total}",
        )
    if moved.order != from_order:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Job {job_id} is at order {moved.order}, not {from_order}",
        )

    if from_order != to_order:
        orders = shift_orders(
            {record.id: record.order for record in records}, job_id, from_order, to_order
        )
        for record_id, order in orders.items():
            if by_id[record_id].order != order:
                by_id[record_id].order = order
        moved.updated_at = _now()
        await session.commit()
        logger.info(f"Reordered {job_id}: {from_order} -> {to_order}")

    return ReorderResult(from_order=from_order, to_order=to_order).to_wire()
