"""CSV and JSON export of ranked candidates."""

import csv
import io
import json
from typing import Any

from cvtriage.core.schemas import CandidateRecord
from cvtriage.pipeline.experience import extract_years_experience
from cvtriage.pipeline.normalize import countries_of, effective_date, record_score, skills_of

CSV_COLUMNS = [
    "Candidate Name",
    "Email",
    "Phone",
    "Countries",
    "Current Employment",
    "Education",
    "Experience (years)",
    "Skills",
    "Score",
    "Date",
    "Status",
    "Justification",
]


def candidate_row(record: CandidateRecord) -> dict[str, Any]:
    """Flatten a record into export-friendly fields."""
    fields = record.extracted_fields

    def get(name: str) -> str:
        return (getattr(fields, name) or "") if fields else ""

    return {
        "id": record.id,
        "candidate_name": record.candidate_name,
        "email": get("email_address"),
        "phone": get("contact_number"),
        "countries": countries_of(record),
        "current_employment": get("current_employment"),
        "education": get("educational_qualifications"),
        "experience_years": (
            extract_years_experience(fields.job_history, fields.justification) if fields else 0
        ),
        "skills": skills_of(record),
        "score": record_score(record),
        "date": effective_date(record),
        "status": record.candidate_status.value,
        "tags": list(record.tags),
        "source_email": record.source_email or "",
        "justification": get("justification"),
    }


def export_json(records: list[CandidateRecord]) -> str:
    """Export records as a JSON array string."""
    return json.dumps([candidate_row(r) for r in records], indent=2)


def export_csv(records: list[CandidateRecord]) -> str:
    """Export records as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for record in records:
        row = candidate_row(record)
        writer.writerow([
            row["candidate_name"],
            row["email"],
            row["phone"],
            "; ".join(row["countries"]),
            row["current_employment"],
            row["education"],
            row["experience_years"],
            "; ".join(row["skills"]),
            row["score"],
            row["date"],
            row["status"],
            row["justification"],
        ])
    return buffer.getvalue()
