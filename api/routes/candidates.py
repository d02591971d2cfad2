"""
Candidate pipeline endpoints.

Candidates, their stage moves (with timeline), and recruiter notes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, simulate
from api.schemas.common import ErrorResponse
from api.schemas.candidates import CandidateCreate, CandidateUpdate, NoteCreate
from api.services import candidates as candidate_service

router = APIRouter(
    prefix="/candidates",
    tags=["Candidates"],
    responses={500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)


@router.get(
    "",
    summary="List Candidates",
    dependencies=[Depends(simulate("candidates.list"))],
)
async def list_candidates(
    search: Optional[str] = Query(None, description="Match against name and e-mail"),
    stage: Optional[str] = Query(None, description="Pipeline stage"),
    job_id: Optional[str] = Query(None, alias="jobId"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=2000, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
):
    """Retrieve a page of candidates as ``{data, pagination}``."""
    return await candidate_service.list_candidates(
        db,
        search=search,
        stage=stage,
        job_id=job_id,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    summary="Create Candidate",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(simulate("candidates.create"))],
)
async def create_candidate(data: CandidateCreate, db: AsyncSession = Depends(get_db)):
    return await candidate_service.create_candidate(db, data)


@router.get(
    "/{candidate_id}",
    summary="Get Candidate",
    dependencies=[Depends(simulate("candidates.get"))],
)
async def get_candidate(
    candidate_id: str = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    result = await candidate_service.get_candidate(db, candidate_id)
    if not result:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return result


@router.patch(
    "/{candidate_id}",
    summary="Update Candidate",
    dependencies=[Depends(simulate("candidates.update"))],
)
async def update_candidate(
    data: CandidateUpdate,
    candidate_id: str = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a candidate; stage changes are recorded on the timeline."""
    result = await candidate_service.update_candidate(db, candidate_id, data)
    if not result:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return result


@router.delete(
    "/{candidate_id}",
    summary="Delete Candidate",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(simulate("candidates.delete"))],
)
async def delete_candidate(
    candidate_id: str = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    if not await candidate_service.delete_candidate(db, candidate_id):
        raise HTTPException(status_code=404, detail="Candidate not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{candidate_id}/timeline",
    summary="Get Candidate Timeline",
    dependencies=[Depends(simulate("candidates.timeline"))],
)
async def get_timeline(
    candidate_id: str = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    return await candidate_service.get_timeline(db, candidate_id)


@router.get(
    "/{candidate_id}/notes",
    summary="List Candidate Notes",
    dependencies=[Depends(simulate("candidates.notes"))],
)
async def list_notes(
    candidate_id: str = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    return await candidate_service.list_notes(db, candidate_id)


@router.post(
    "/{candidate_id}/notes",
    summary="Add Candidate Note",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(simulate("candidates.add_note"))],
)
async def add_note(
    data: NoteCreate,
    candidate_id: str = Path(..., description="Candidate ID"),
    db: AsyncSession = Depends(get_db),
):
    result = await candidate_service.add_note(db, candidate_id, data)
    if not result:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return result
