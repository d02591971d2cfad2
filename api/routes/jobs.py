"""
Job board endpoints.

Listing, creating and editing job postings, plus the reorder endpoint that
keeps board positions a contiguous 1..N.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_db, simulate
from api.schemas.common import ErrorResponse
from api.schemas.jobs import JobCreate, JobUpdate, ReorderRequest
from api.services import jobs as job_service

router = APIRouter(
    prefix="/jobs",
    tags=["Jobs"],
    responses={500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)


@router.get(
    "",
    summary="List Jobs",
    dependencies=[Depends(simulate("jobs.list"))],
)
async def list_jobs(
    search: Optional[str] = Query(None, description="Match against title and tags"),
    status_filter: Optional[str] = Query(None, alias="status", description="active or archived"),
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=2000, alias="pageSize"),
    sort: str = Query("order", description="order, title or createdAt"),
    db: AsyncSession = Depends(get_db),
):
    """Retrieve a page of jobs as ``{data, pagination}``."""
    return await job_service.list_jobs(
        db,
        search=search,
        status_filter=status_filter,
        experience_level=experience_level,
        page=page,
        page_size=page_size,
        sort=sort,
    )


@router.post(
    "",
    summary="Create Job",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(simulate("jobs.create"))],
)
async def create_job(data: JobCreate, db: AsyncSession = Depends(get_db)):
    """Create a job at the end of the board."""
    return await job_service.create_job(db, data)


@router.get(
    "/{job_id}",
    summary="Get Job Details",
    dependencies=[Depends(simulate("jobs.get"))],
)
async def get_job(
    job_id: str = Path(..., description="Job ID"),
    db: AsyncSession = Depends(get_db),
):
    result = await job_service.get_job(db, job_id)
    if not result:
        raise HTTPException(status_code=404, detail="Job not found")
    return result


@router.patch(
    "/{job_id}",
    summary="Update Job",
    dependencies=[Depends(simulate("jobs.update"))],
)
async def update_job(
    data: JobUpdate,
    job_id: str = Path(..., description="Job ID"),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a job; used for edits and archive/unarchive."""
    result = await job_service.update_job(db, job_id, data)
    if not result:
        raise HTTPException(status_code=404, detail="Job not found")
    return result


@router.patch(
    "/{job_id}/reorder",
    summary="Reorder Job",
    dependencies=[Depends(simulate("jobs.reorder"))],
)
async def reorder_job(
    data: ReorderRequest,
    job_id: str = Path(..., description="Job ID"),
    db: AsyncSession = Depends(get_db),
):
    """Move a job from ``fromOrder`` to ``toOrder``, shifting the jobs in between."""
    return await job_service.reorder_job(db, job_id, data.from_order, data.to_order)
