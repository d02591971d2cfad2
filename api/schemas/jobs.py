"""Job-related request schemas."""

from typing import Optional

from pydantic import Field, StrictInt, field_validator

from core.models import ContractModel, JobStatus


class JobCreate(ContractModel):
    """Schema for creating a job. The backend assigns ``id`` and ``order``."""

    title: str = Field(min_length=1, max_length=255, description="Job title")
    slug: Optional[str] = Field(None, max_length=255, description="Unique URL slug")
    description: str = ""
    status: JobStatus = JobStatus.ACTIVE
    tags: list[str] = Field(default_factory=list)
    experience_level: str = Field(default="Experience", max_length=32)
    location: str = ""
    salary: str = ""
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class JobUpdate(ContractModel):
    """
    Partial update of a job.

    ``order`` is deliberately absent: positions only change through the
    reorder endpoint, which keeps them contiguous.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    status: Optional[JobStatus] = None
    tags: Optional[list[str]] = None
    experience_level: Optional[str] = Field(None, max_length=32)
    location: Optional[str] = None
    salary: Optional[str] = None
    requirements: Optional[list[str]] = None
    responsibilities: Optional[list[str]] = None


class ReorderRequest(ContractModel):
    """Body of ``PATCH /jobs/{id}/reorder``."""

    from_order: StrictInt
    to_order: StrictInt
