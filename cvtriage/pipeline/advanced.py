"""Advanced dashboard filters: free-text search, facets, score and date ranges."""

import logging
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cvtriage.core.schemas import CandidateRecord
from cvtriage.pipeline.normalize import (
    countries_of,
    effective_date,
    normalize_email,
    normalize_list_field,
    record_score,
    skills_of,
)

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


class AdvancedFilters(BaseModel):
    """User-chosen narrowing applied after qualification.

    countries use OR logic, skills use AND logic; both match by substring.
    """

    model_config = ConfigDict(frozen=True)

    search: str = ""
    countries: tuple[str, ...] = ()
    skills: tuple[str, ...] = ()
    score_min: int = Field(default=0, ge=0, le=10)
    score_max: int = Field(default=10, ge=0, le=10)
    source_emails: tuple[str, ...] = ()
    date_from: date | None = None
    date_to: date | None = None

    @field_validator("countries", "skills", "source_emails")
    @classmethod
    def drop_blank(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(s.strip() for s in v if s.strip())

    @model_validator(mode="after")
    def ranges_ordered(self) -> "AdvancedFilters":
        if self.score_min > self.score_max:
            msg = f"score_min ({self.score_min}) must not exceed score_max ({self.score_max})"
            raise ValueError(msg)
        if self.date_from and self.date_to and self.date_from > self.date_to:
            msg = "date_from must not be after date_to"
            raise ValueError(msg)
        return self


def _matches_search(record: CandidateRecord, query: str) -> bool:
    fields = record.extracted_fields
    if fields is None:
        return False
    haystacks = [
        fields.candidate_name or "",
        fields.email_address or "",
        *normalize_list_field(fields.current_employment),
        *normalize_list_field(fields.countries),
        *countries_of(record),
    ]
    return any(query in h.lower() for h in haystacks)


def _matches_countries(record: CandidateRecord, wanted: tuple[str, ...]) -> bool:
    fields = record.extracted_fields
    raw = normalize_list_field(fields.countries) if fields else []
    labels = [c.lower() for c in raw + countries_of(record)]
    return any(w.lower() in label for w in wanted for label in labels)


def _matches_skills(record: CandidateRecord, wanted: tuple[str, ...]) -> bool:
    fields = record.extracted_fields
    raw = normalize_list_field(fields.skill_set) if fields else []
    labels = [s.lower() for s in raw + skills_of(record)]
    return all(any(w.lower() in label for label in labels) for w in wanted)


def source_email_of(record: CandidateRecord) -> str:
    """Inbox the record was routed to, falling back to the candidate's own email."""
    source = normalize_email(record.source_email)
    if source:
        return source
    fields = record.extracted_fields
    return normalize_email(fields.email_address if fields else None)


def _in_date_range(record: CandidateRecord, date_from: date | None, date_to: date | None) -> bool:
    day = effective_date(record)
    if not day:
        return True
    if date_from and day < date_from.isoformat():
        return False
    if date_to and day > date_to.isoformat():
        return False
    return True


def apply_advanced(
    records: list[CandidateRecord],
    advanced: AdvancedFilters,
) -> list[CandidateRecord]:
    """Apply every configured advanced filter; unset filters pass everything."""
    result = records

    query = advanced.search.strip().lower()
    if len(query) >= MIN_SEARCH_LENGTH:
        result = [r for r in result if _matches_search(r, query)]

    if advanced.countries:
        result = [r for r in result if _matches_countries(r, advanced.countries)]

    if advanced.skills:
        result = [r for r in result if _matches_skills(r, advanced.skills)]

    if advanced.score_min > 0 or advanced.score_max < 10:
        result = [
            r for r in result
            if advanced.score_min <= record_score(r) <= advanced.score_max
        ]

    if advanced.source_emails:
        selected = {normalize_email(e) for e in advanced.source_emails}
        result = [r for r in result if source_email_of(r) in selected]

    if advanced.date_from or advanced.date_to:
        result = [r for r in result if _in_date_range(r, advanced.date_from, advanced.date_to)]

    removed = len(records) - len(result)
    if removed:
        logger.debug("apply_advanced: removed %d records", removed)
    return result
