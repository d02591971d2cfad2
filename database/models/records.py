"""
Backend Simulator Records

Persistent storage behind the simulated hiring API: jobs on the board,
candidates in the pipeline, recruiter notes and the stage timeline.
"""

from datetime import datetime
from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from database.engine import Base


# ==================== JobRecord Model ===================== #
class JobRecord(Base):
    """Job posting. ``order`` values across the table form 1..N."""

    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="active", nullable=False, index=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False, index=True)
    experience_level: Mapped[str] = mapped_column(String(32), default="Experience", nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    salary: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    requirements: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    responsibilities: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<JobRecord(id={self.id!r}, order={self.order})>"


# ==================== CandidateRecord Model ===================== #
class CandidateRecord(Base):
    """Candidate in the hiring pipeline."""

    __tablename__ = "candidates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    stage: Mapped[str] = mapped_column(String(16), default="applied", nullable=False)
    # Weak reference; jobs are never joined here
    job_id: Mapped[str | None] = mapped_column(String(64))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_candidate_stage", "stage"),
        Index("idx_candidate_job", "job_id"),
    )

    def __repr__(self) -> str:
        return f"<CandidateRecord(id={self.id!r}, stage={self.stage!r})>"


# ==================== NoteRecord Model ===================== #
class NoteRecord(Base):
    """Recruiter note; immutable once created."""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), default="Unknown", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )


# ==================== TimelineRecord Model ===================== #
class TimelineRecord(Base):
    """One effective stage change of a candidate."""

    __tablename__ = "candidate_timeline"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    candidate_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage: Mapped[str] = mapped_column(String(16), nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
