"""Tests for the database layer: init, uploads, status transitions, listing."""

from datetime import datetime

import pytest

from cvtriage.core.db import (
    get_record,
    init_db,
    insert_upload,
    list_records,
    set_candidate_status,
    set_extracted_fields,
    set_processing_status,
    set_tags,
)
from cvtriage.core.schemas import CandidateStatus, ExtractedFields, ProcessingStatus


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    """Provide a fresh SQLite connection per test."""
    conn = init_db(tmp_path / "test.db")
    yield conn
    conn.close()


class TestInitDb:
    def test_creates_table(self, db) -> None:  # type: ignore[no-untyped-def]
        tables = {
            row[0]
            for row in db.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert "cv_uploads" in tables

    def test_idempotent(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        """Calling init_db twice on the same path doesn't error."""
        p = tmp_path / "nested" / "double.db"
        init_db(p).close()
        init_db(p).close()


class TestInsertUpload:
    def test_new_upload_is_pending(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "cv.pdf", source_email="jobs@agency.com")
        record = get_record(db, upload_id)
        assert record is not None
        assert record.processing_status is ProcessingStatus.PENDING
        assert record.original_filename == "cv.pdf"
        assert record.source_email == "jobs@agency.com"
        assert record.extracted_fields is None
        assert record.received_at is not None

    def test_explicit_id_and_date(self, db) -> None:  # type: ignore[no-untyped-def]
        received = datetime(2024, 1, 5, 9, 30)
        upload_id = insert_upload(db, "cv.pdf", received_at=received, upload_id="abc")
        assert upload_id == "abc"
        record = get_record(db, "abc")
        assert record is not None
        assert record.received_at == received

    def test_get_missing(self, db) -> None:  # type: ignore[no-untyped-def]
        assert get_record(db, "nope") is None


class TestProcessingStatus:
    def test_happy_path(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "cv.pdf")
        set_processing_status(db, upload_id, ProcessingStatus.PROCESSING)
        set_processing_status(db, upload_id, ProcessingStatus.COMPLETED)
        record = get_record(db, upload_id)
        assert record is not None
        assert record.processing_status is ProcessingStatus.COMPLETED

    def test_requeue_after_error(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "cv.pdf")
        set_processing_status(db, upload_id, ProcessingStatus.ERROR, notes="boom")
        set_processing_status(db, upload_id, ProcessingStatus.PENDING)
        notes = db.execute("SELECT notes FROM cv_uploads WHERE id = ?", (upload_id,)).fetchone()[0]
        assert notes == ""

    def test_invalid_transition(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "cv.pdf")
        with pytest.raises(ValueError, match="pending -> completed"):
            set_processing_status(db, upload_id, ProcessingStatus.COMPLETED)

    def test_missing_upload(self, db) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(KeyError):
            set_processing_status(db, "nope", ProcessingStatus.PROCESSING)


class TestExtractedFields:
    def test_round_trip_keeps_loose_shapes(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "cv.pdf")
        fields = ExtractedFields(candidate_name="Alice", score="8/10", skill_set=["Python"])
        set_extracted_fields(db, upload_id, fields)
        record = get_record(db, upload_id)
        assert record is not None
        assert record.extracted_fields == fields


class TestListRecords:
    def test_newest_first(self, db) -> None:  # type: ignore[no-untyped-def]
        insert_upload(db, "old.pdf", received_at=datetime(2024, 1, 1), upload_id="old")
        insert_upload(db, "new.pdf", received_at=datetime(2024, 3, 1), upload_id="new")
        insert_upload(db, "mid.pdf", received_at=datetime(2024, 2, 1), upload_id="mid")
        assert [r.id for r in list_records(db)] == ["new", "mid", "old"]

    def test_limit(self, db) -> None:  # type: ignore[no-untyped-def]
        for i in range(3):
            insert_upload(db, f"{i}.pdf", received_at=datetime(2024, 1, i + 1))
        assert len(list_records(db, limit=2)) == 2

    def test_empty(self, db) -> None:  # type: ignore[no-untyped-def]
        assert list_records(db) == []


class TestRecruiterFields:
    def test_candidate_status(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "cv.pdf")
        set_candidate_status(db, upload_id, CandidateStatus.SHORTLISTED)
        record = get_record(db, upload_id)
        assert record is not None
        assert record.candidate_status is CandidateStatus.SHORTLISTED

    def test_tags_trimmed_and_deduped(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "cv.pdf")
        set_tags(db, upload_id, [" maths ", "maths", "", "senior"])
        record = get_record(db, upload_id)
        assert record is not None
        assert record.tags == ["maths", "senior"]
