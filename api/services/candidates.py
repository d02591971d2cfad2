"""Candidate service functions."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.candidates import CandidateCreate, CandidateUpdate, NoteCreate
from core.models import (
    VALID_STAGES,
    Candidate,
    CandidateStage,
    Note,
    Page,
    Pagination,
    TimelineEntry,
)
from database.models.records import CandidateRecord, NoteRecord, TimelineRecord

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _validate_stage(stage: Optional[str]) -> None:
    if stage is not None and stage not in VALID_STAGES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid stage. Must be one of: {', '.join(VALID_STAGES)}",
        )


async def list_candidates(
    session: AsyncSession,
    search: Optional[str] = None,
    stage: Optional[str] = None,
    job_id: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Dict[str, Any]:
    """List candidates matching the filters, one page at a time."""
    query = select(CandidateRecord)

    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(CandidateRecord.name).like(pattern),
                func.lower(CandidateRecord.email).like(pattern),
            )
        )
    if stage:
        query = query.where(CandidateRecord.stage == stage)
    if job_id:
        query = query.where(CandidateRecord.job_id == job_id)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await session.execute(count_query)).scalar() or 0

    query = query.order_by(CandidateRecord.created_at, CandidateRecord.id)
    query = query.limit(page_size).offset((page - 1) * page_size)
    records = (await session.execute(query)).scalars().all()

    return Page[Candidate](
        data=[Candidate.model_validate(record) for record in records],
        pagination=Pagination.build(page, page_size, total),
    ).to_wire()


async def get_candidate(session: AsyncSession, candidate_id: str) -> Optional[Dict[str, Any]]:
    """Get candidate details."""
    record = await session.get(CandidateRecord, candidate_id)
    if record is None:
        return None
    return Candidate.model_validate(record).to_wire()


async def create_candidate(session: AsyncSession, data: CandidateCreate) -> Dict[str, Any]:
    _validate_stage(data.stage)

    record = CandidateRecord(
        id=f"candidate-{uuid.uuid4().hex[:12]}",
        name=data.name,
        email=data.email,
        stage=data.stage or CandidateStage.APPLIED.value,
        job_id=data.job_id,
        created_at=_now(),
        updated_at=_now(),
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)

    logger.info(f"Created candidate {record.id} in stage {record.stage}")
    return Candidate.model_validate(record).to_wire()


async def update_candidate(
    session: AsyncSession,
    candidate_id: str,
    changes: CandidateUpdate,
) -> Optional[Dict[str, Any]]:
    """
    Apply a partial update; an effective stage change is added to the timeline.

    Returns None if the candidate does not exist.
    """
    updates = changes.model_dump(exclude_unset=True)
    _validate_stage(updates.get("stage"))

    record = await session.get(CandidateRecord, candidate_id)
    if record is None:
        return None

    previous_stage = record.stage
    for field, value in updates.items():
        if value is not None or field == "job_id":
            setattr(record, field, value)
    record.updated_at = _now()

    new_stage = updates.get("stage")
    if new_stage and new_stage != previous_stage:
        session.add(
            TimelineRecord(
                id=f"timeline-{uuid.uuid4().hex[:12]}",
                candidate_id=candidate_id,
                stage=new_stage,
                notes=f"Stage changed from {previous_stage} to {new_stage}",
                timestamp=_now(),
            )
        )
        logger.info(f"Candidate {candidate_id}: {previous_stage} -> {new_stage}")

    await session.commit()
    await session.refresh(record)
    return Candidate.model_validate(record).to_wire()


async def delete_candidate(session: AsyncSession, candidate_id: str) -> bool:
    """Delete a candidate with its notes and timeline. False if missing."""
    record = await session.get(CandidateRecord, candidate_id)
    if record is None:
        return False

    await session.execute(delete(NoteRecord).where(NoteRecord.candidate_id == candidate_id))
    await session.execute(
        delete(TimelineRecord).where(TimelineRecord.candidate_id == candidate_id)
    )
    await session.delete(record)
    await session.commit()
    return True


async def get_timeline(session: AsyncSession, candidate_id: str) -> List[Dict[str, Any]]:
    result = await session.execute(
        select(TimelineRecord)
        .where(TimelineRecord.candidate_id == candidate_id)
        .order_by(TimelineRecord.timestamp, TimelineRecord.id)
    )
    return [TimelineEntry.model_validate(entry).to_wire() for entry in result.scalars().all()]


async def list_notes(session: AsyncSession, candidate_id: str) -> List[Dict[str, Any]]:
    result = await session.execute(
        select(NoteRecord)
        .where(NoteRecord.candidate_id == candidate_id)
        .order_by(NoteRecord.created_at, NoteRecord.id)
    )
    return [Note.model_validate(note).to_wire() for note in result.scalars().all()]


async def add_note(
    session: AsyncSession,
    candidate_id: str,
    data: NoteCreate,
) -> Optional[Dict[str, Any]]:
    """Attach a note to a candidate. Returns None if the candidate does not exist."""
    if await session.get(CandidateRecord, candidate_id) is None:
        return None

    note = NoteRecord(
        candidate_id=candidate_id,
        content=data.content,
        author=data.author or "Unknown",
        created_at=_now(),
    )
    session.add(note)
    await session.commit()
    await session.refresh(note)
    return Note.model_validate(note).to_wire()
