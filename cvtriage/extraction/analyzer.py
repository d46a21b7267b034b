"""Structured CV extraction: LLM first, regex fallback when the LLM fails."""

import json
import logging
import re
import sqlite3
from typing import Any

from pydantic import ValidationError

from cvtriage.core.db import get_record, set_extracted_fields, set_processing_status
from cvtriage.core.schemas import CandidateRecord, ExtractedFields, ProcessingStatus
from cvtriage.extraction.llm.base import LLMProvider
from cvtriage.pipeline.normalize import COUNTRY_LABELS, SKILL_LABELS

logger = logging.getLogger(__name__)

_EMAIL = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
_PHONE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
_NAME_LINE = re.compile(r"^[A-Za-z][A-Za-z'.-]*(?:\s+[A-Za-z][A-Za-z'.-]*){1,4}$")
_HEADING_WORDS = {"curriculum", "vitae", "resume", "cv", "profile", "contact", "summary"}

# Fields that must be plain strings on ExtractedFields.
_TEXT_FIELDS = (
    "candidate_name",
    "email_address",
    "contact_number",
    "educational_qualifications",
    "job_history",
    "justification",
    "current_employment",
    "date_received",
)


def parse_response(raw_text: str) -> ExtractedFields:
    """Parse an LLM response into ExtractedFields.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.

    Raises:
        ValueError: If the response is not a JSON object or fails validation.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ValueError(msg) from e

    if not isinstance(data, dict):
        msg = "LLM response is not a JSON object"
        raise ValueError(msg)

    try:
        return ExtractedFields.model_validate({**_coerce_text_fields(data), "extraction_method": "llm"})
    except ValidationError as e:
        msg = f"LLM response failed validation: {e}"
        raise ValueError(msg) from e


def _coerce_text_fields(data: dict[str, Any]) -> dict[str, Any]:
    result = dict(data)
    for name in _TEXT_FIELDS:
        value = result.get(name)
        if value is None or isinstance(value, str):
            continue
        if isinstance(value, list):
            result[name] = "\n".join(str(v) for v in value if v is not None)
        else:
            result[name] = str(value)
    return result


def _find_labels(text: str, table: dict[str, str]) -> list[str]:
    labels: list[str] = []
    for key, label in table.items():
        # Two-letter codes ("us", "sa", "js") are too ambiguous in free text.
        if len(key) <= 2 or label in labels:
            continue
        if re.search(rf"(?<![\w.]){re.escape(key)}(?![\w])", text, re.IGNORECASE):
            labels.append(label)
    return labels


def _guess_name(text: str) -> str | None:
    for line in text.splitlines()[:10]:
        candidate = line.strip()
        if not candidate or not _NAME_LINE.match(candidate):
            continue
        if {w.lower().strip(".") for w in candidate.split()} & _HEADING_WORDS:
            continue
        return candidate
    return None


def regex_extract_fields(text: str) -> ExtractedFields:
    """Best-effort extraction without an LLM: email, phone, name, countries, skills.

    No score is produced, so the record will not qualify until re-extracted.
    """
    email = _EMAIL.search(text)
    phone = _PHONE.search(text)
    countries = _find_labels(text, COUNTRY_LABELS)
    skills = _find_labels(text, SKILL_LABELS)
    return ExtractedFields(
        candidate_name=_guess_name(text),
        email_address=email.group(0) if email else None,
        contact_number=" ".join(phone.group(0).split()) if phone else None,
        countries=countries or None,
        skill_set=skills or None,
        extraction_method="regex",
    )


def analyze_cv(
    cv_text: str,
    provider: LLMProvider | None = None,
    model: str | None = None,
) -> ExtractedFields:
    """Extract structured fields from CV text.

    Without a provider, or when the provider call or parse fails, falls back
    to regex_extract_fields().
    """
    if provider is None:
        return regex_extract_fields(cv_text)

    try:
        raw = provider.complete(cv_text, model=model)
        return parse_response(raw)
    except Exception:
        logger.warning(
            "LLM extraction via %s failed - using regex fallback",
            provider.provider_id,
            exc_info=True,
        )
    return regex_extract_fields(cv_text)


def process_cv(
    conn: sqlite3.Connection,
    upload_id: str,
    cv_text: str,
    provider: LLMProvider | None = None,
    model: str | None = None,
) -> CandidateRecord:
    """Run extraction for a stored upload: pending -> processing -> completed|error.

    Raises:
        KeyError: If the upload does not exist.
    """
    set_processing_status(conn, upload_id, ProcessingStatus.PROCESSING)

    if not cv_text.strip():
        logger.warning("Upload %s has no extractable text", upload_id)
        set_processing_status(
            conn, upload_id, ProcessingStatus.ERROR, notes="Processing failed: empty CV text",
        )
    else:
        fields = analyze_cv(cv_text, provider, model)
        set_extracted_fields(conn, upload_id, fields)
        set_processing_status(conn, upload_id, ProcessingStatus.COMPLETED)
        logger.info(
            "Processed upload %s (%s): %s",
            upload_id, fields.extraction_method, fields.candidate_name or "unnamed",
        )

    record = get_record(conn, upload_id)
    if record is None:
        msg = f"Upload not found: {upload_id}"
        raise KeyError(msg)
    return record
