"""Core data models for candidate records produced by the extraction flow."""

from datetime import date, datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProcessingStatus(str, Enum):
    """Extraction lifecycle of an uploaded CV."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class CandidateStatus(str, Enum):
    """Recruiter-assigned pipeline stage."""

    NEW = "new"
    REVIEWING = "reviewing"
    SHORTLISTED = "shortlisted"
    INTERVIEWED = "interviewed"
    HIRED = "hired"
    REJECTED = "rejected"


class ExtractedFields(BaseModel):
    """Loosely structured blob returned by the CV extraction flow.

    Every field is optional. Scores and list-like fields keep whatever shape
    the extractor produced; canonical forms come from pipeline.normalize.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    candidate_name: str | None = None
    email_address: str | None = None
    contact_number: str | None = None
    score: str | int | float | None = None
    educational_qualifications: str | None = None
    job_history: str | None = None
    skill_set: str | list[str] | None = None
    countries: str | list[str] | None = None
    justification: str | None = None
    current_employment: str | None = None
    date_received: str | None = None
    extraction_method: str = "llm"


class CandidateRecord(BaseModel):
    """A single uploaded CV and its extraction result.

    Frozen: the pipeline only filters and orders records, never edits them.
    Accepts store column names (extracted_json, received_date) as aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    extracted_fields: ExtractedFields | None = Field(
        default=None,
        validation_alias=AliasChoices("extracted_fields", "extracted_json"),
    )
    source_email: str | None = None
    received_at: datetime | date | None = Field(
        default=None,
        validation_alias=AliasChoices("received_at", "received_date"),
    )
    uploaded_at: datetime | None = None
    original_filename: str = ""
    tags: list[str] = Field(default_factory=list)
    candidate_status: CandidateStatus = CandidateStatus.NEW

    @property
    def is_completed(self) -> bool:
        return (
            self.processing_status is ProcessingStatus.COMPLETED
            and self.extracted_fields is not None
        )

    @property
    def candidate_name(self) -> str:
        if self.extracted_fields is None:
            return ""
        return (self.extracted_fields.candidate_name or "").strip()
