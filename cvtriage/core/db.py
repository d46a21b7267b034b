"""SQLite record source for uploaded CVs and their extraction results."""

import json
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from cvtriage.core.schemas import (
    CandidateRecord,
    CandidateStatus,
    ExtractedFields,
    ProcessingStatus,
)

_UPLOADS_TABLE = """
CREATE TABLE IF NOT EXISTS cv_uploads (
    id                TEXT PRIMARY KEY,
    original_filename TEXT NOT NULL DEFAULT '',
    processing_status TEXT NOT NULL DEFAULT 'pending',
    extracted_json    TEXT,
    source_email      TEXT,
    received_date     TEXT,
    uploaded_at       TEXT NOT NULL,
    tags              TEXT NOT NULL DEFAULT '[]',
    candidate_status  TEXT NOT NULL DEFAULT 'new',
    notes             TEXT NOT NULL DEFAULT ''
);
"""

_RECEIVED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_cv_uploads_received
    ON cv_uploads (received_date DESC, uploaded_at DESC);
"""

# Allowed processing_status transitions; completed/error may be re-queued.
_TRANSITIONS: dict[ProcessingStatus, set[ProcessingStatus]] = {
    ProcessingStatus.PENDING: {ProcessingStatus.PROCESSING, ProcessingStatus.ERROR},
    ProcessingStatus.PROCESSING: {ProcessingStatus.COMPLETED, ProcessingStatus.ERROR},
    ProcessingStatus.COMPLETED: {ProcessingStatus.PENDING},
    ProcessingStatus.ERROR: {ProcessingStatus.PENDING},
}


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_UPLOADS_TABLE)
    conn.execute(_RECEIVED_INDEX)
    conn.commit()
    return conn


def insert_upload(
    conn: sqlite3.Connection,
    original_filename: str,
    source_email: str | None = None,
    received_at: datetime | None = None,
    upload_id: str | None = None,
) -> str:
    """Register a new pending upload. Returns its id."""
    upload_id = upload_id or str(uuid.uuid4())
    now = datetime.now()
    conn.execute(
        """
        INSERT INTO cv_uploads
            (id, original_filename, processing_status, source_email,
             received_date, uploaded_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            upload_id,
            original_filename,
            ProcessingStatus.PENDING.value,
            source_email,
            (received_at or now).isoformat(),
            now.isoformat(),
        ),
    )
    conn.commit()
    return upload_id


def _row_to_record(row: sqlite3.Row) -> CandidateRecord:
    extracted = json.loads(row["extracted_json"]) if row["extracted_json"] else None
    return CandidateRecord.model_validate({
        "id": row["id"],
        "original_filename": row["original_filename"],
        "processing_status": row["processing_status"],
        "extracted_json": extracted,
        "source_email": row["source_email"],
        "received_date": row["received_date"],
        "uploaded_at": row["uploaded_at"],
        "tags": json.loads(row["tags"] or "[]"),
        "candidate_status": row["candidate_status"],
    })


def list_records(conn: sqlite3.Connection, limit: int | None = None) -> list[CandidateRecord]:
    """Return records newest first (received date, then upload time)."""
    sql = "SELECT * FROM cv_uploads ORDER BY received_date DESC, uploaded_at DESC"
    params: tuple[int, ...] = ()
    if limit is not None:
        sql += " LIMIT ?"
        params = (limit,)
    return [_row_to_record(row) for row in conn.execute(sql, params).fetchall()]


def get_record(conn: sqlite3.Connection, upload_id: str) -> CandidateRecord | None:
    row = conn.execute("SELECT * FROM cv_uploads WHERE id = ?", (upload_id,)).fetchone()
    return _row_to_record(row) if row is not None else None


def set_processing_status(
    conn: sqlite3.Connection,
    upload_id: str,
    status: ProcessingStatus,
    notes: str = "",
) -> None:
    """Move an upload to a new processing status.

    Raises:
        KeyError: If the upload does not exist.
        ValueError: If the transition is not allowed.
    """
    row = conn.execute(
        "SELECT processing_status FROM cv_uploads WHERE id = ?", (upload_id,)
    ).fetchone()
    if row is None:
        msg = f"Upload not found: {upload_id}"
        raise KeyError(msg)
    current = ProcessingStatus(row["processing_status"])
    if status not in _TRANSITIONS[current]:
        msg = f"Invalid status transition {current.value} -> {status.value}"
        raise ValueError(msg)
    conn.execute(
        "UPDATE cv_uploads SET processing_status = ?, notes = ? WHERE id = ?",
        (status.value, notes, upload_id),
    )
    conn.commit()


def set_extracted_fields(
    conn: sqlite3.Connection,
    upload_id: str,
    fields: ExtractedFields,
) -> None:
    """Store extraction output on an upload."""
    conn.execute(
        "UPDATE cv_uploads SET extracted_json = ? WHERE id = ?",
        (fields.model_dump_json(exclude_none=True), upload_id),
    )
    conn.commit()


def set_candidate_status(
    conn: sqlite3.Connection,
    upload_id: str,
    status: CandidateStatus,
) -> None:
    conn.execute(
        "UPDATE cv_uploads SET candidate_status = ? WHERE id = ?",
        (status.value, upload_id),
    )
    conn.commit()


def set_tags(conn: sqlite3.Connection, upload_id: str, tags: list[str]) -> None:
    """Replace an upload's tags with a de-duplicated, trimmed list."""
    cleaned = list(dict.fromkeys(t.strip() for t in tags if t.strip()))
    conn.execute(
        "UPDATE cv_uploads SET tags = ? WHERE id = ?",
        (json.dumps(cleaned), upload_id),
    )
    conn.commit()
