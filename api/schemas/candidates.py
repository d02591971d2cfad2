"""Candidate-related request schemas."""

from typing import Optional

from pydantic import Field, field_validator

from core.models import ContractModel


class CandidateCreate(ContractModel):
    """Schema for creating a candidate."""

    name: str = Field(min_length=1, max_length=255, description="Candidate's full name")
    email: str = Field(min_length=1, max_length=255, description="Contact e-mail")
    # Validated by the service so an unknown stage answers 400, not 422
    stage: Optional[str] = None
    job_id: Optional[str] = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        """Strip whitespace from text fields."""
        if isinstance(v, str):
            return v.strip()
        return v


class CandidateUpdate(ContractModel):
    """Schema for updating a candidate."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, min_length=1, max_length=255)
    stage: Optional[str] = None
    job_id: Optional[str] = None


class NoteCreate(ContractModel):
    """Schema for adding a recruiter note."""

    content: str = Field(min_length=1, description="Note text")
    author: Optional[str] = Field(None, max_length=255)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v
