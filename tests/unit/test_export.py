"""Tests for CSV and JSON export."""

import csv
import io
import json
from datetime import date

from cvtriage.core.schemas import CandidateRecord, CandidateStatus, ExtractedFields, ProcessingStatus
from cvtriage.pipeline.export import CSV_COLUMNS, candidate_row, export_csv, export_json


def _record(**fields: object) -> CandidateRecord:
    defaults: dict[str, object] = {
        "candidate_name": " Thandi Nkosi ",
        "email_address": "thandi@example.com",
        "contact_number": "+27 82 555 0134",
        "countries": "RSA, England",
        "skill_set": ["maths", "Excel"],
        "job_history": "Teacher 4 years",
        "score": "85",
        "justification": "Strong, experienced",
    }
    defaults.update(fields)
    return CandidateRecord(
        id="u1",
        processing_status=ProcessingStatus.COMPLETED,
        received_at=date(2024, 1, 5),
        candidate_status=CandidateStatus.SHORTLISTED,
        tags=["maths"],
        extracted_fields=ExtractedFields(**defaults),  # type: ignore[arg-type]
    )


class TestCandidateRow:
    def test_normalized_values(self) -> None:
        row = candidate_row(_record())
        assert row["candidate_name"] == "Thandi Nkosi"
        assert row["countries"] == ["South Africa", "United Kingdom"]
        assert row["skills"] == ["Mathematics", "Excel"]
        assert row["score"] == 9
        assert row["experience_years"] == 4
        assert row["date"] == "2024-01-05"
        assert row["status"] == "shortlisted"
        assert row["tags"] == ["maths"]

    def test_record_without_fields(self) -> None:
        row = candidate_row(CandidateRecord(id="x"))
        assert row["email"] == ""
        assert row["score"] == 0
        assert row["experience_years"] == 0
        assert row["countries"] == []


class TestExport:
    def test_json(self) -> None:
        data = json.loads(export_json([_record(), _record(candidate_name="Bob")]))
        assert [d["candidate_name"] for d in data] == ["Thandi Nkosi", "Bob"]
        assert data[0]["id"] == "u1"

    def test_json_empty(self) -> None:
        assert json.loads(export_json([])) == []

    def test_csv(self) -> None:
        text = export_csv([_record(justification="Good, with commas")])
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == CSV_COLUMNS
        assert len(rows) == 2
        row = dict(zip(CSV_COLUMNS, rows[1]))
        assert row["Candidate Name"] == "Thandi Nkosi"
        assert row["Countries"] == "South Africa; United Kingdom"
        assert row["Score"] == "9"
        assert row["Justification"] == "Good, with commas"

    def test_csv_header_only(self) -> None:
        rows = list(csv.reader(io.StringIO(export_csv([]))))
        assert rows == [CSV_COLUMNS]
