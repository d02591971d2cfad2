"""
Contract models shared by the dashboard client and the backend simulator.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON the dashboard has always consumed (``jobId``, ``experienceLevel``,
``pageSize`` ...).
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")


# ==================== Enums ===================== #
class CandidateStage(str, PyEnum):
    """Hiring pipeline stage of a candidate. Any stage may follow any other."""

    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"


class JobStatus(str, PyEnum):
    """Visibility of a job posting on the board."""

    ACTIVE = "active"
    ARCHIVED = "archived"


VALID_STAGES: tuple[str, ...] = tuple(stage.value for stage in CandidateStage)


class ContractModel(BaseModel):
    """Base for wire models: camelCase aliases, population by either name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys for JSON transport."""
        return self.model_dump(by_alias=True, mode="json")


# ==================== Entities ===================== #
class Job(ContractModel):
    """Job posting. ``order`` is the board position, contiguous over all jobs."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    slug: Optional[str] = None
    description: str = ""
    status: JobStatus = JobStatus.ACTIVE
    tags: list[str] = Field(default_factory=list)
    order: int
    experience_level: Optional[str] = None
    location: str = ""
    salary: str = ""
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Candidate(ContractModel):
    """Candidate moving through the hiring pipeline."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    email: str = ""
    stage: CandidateStage = CandidateStage.APPLIED
    job_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Note(ContractModel):
    """Recruiter note on a candidate. Immutable once created."""

    id: int | str
    candidate_id: str
    content: str
    author: str = "Unknown"
    created_at: Optional[datetime] = None


class TimelineEntry(ContractModel):
    """Stage change recorded by the backend."""

    id: str
    candidate_id: str
    stage: CandidateStage
    notes: str = ""
    timestamp: Optional[datetime] = None


# ==================== Envelopes ===================== #
class Pagination(ContractModel):
    """Pagination block returned with every list response."""

    page: int = 1
    page_size: int = 20
    total: int = 0
    total_pages: int = 0
    current_page: int = 1

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "Pagination":
        """Create pagination metadata for a slice of ``total`` items."""
        total_pages = (total + page_size - 1) // page_size if page_size else 0
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages,
            current_page=page,
        )


class Page(ContractModel, Generic[T]):
    """List response envelope: ``{data: [...], pagination: {...}}``."""

    data: list[T] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class ReorderResult(ContractModel):
    """Acknowledgement of a successful reorder."""

    success: bool = True
    message: str = "Jobs reordered successfully"
    from_order: int
    to_order: int
