"""Tests for CV extraction: response parsing, regex fallback, status flow."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cvtriage.core.db import get_record, init_db, insert_upload
from cvtriage.core.schemas import ProcessingStatus
from cvtriage.extraction.analyzer import analyze_cv, parse_response, process_cv, regex_extract_fields

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

SAMPLE_CV = """\
Curriculum Vitae
Thandi Nkosi
thandi@example.com | +27 82 555 0134
Based in South Africa, relocating to England
Skills: Python, Excel, classroom management
"""


def _load_sample_response() -> str:
    return (FIXTURES_DIR / "sample_llm_response.json").read_text()


def _provider(response: str | None = None, error: Exception | None = None) -> MagicMock:
    provider = MagicMock()
    provider.provider_id = "mock"
    if error is not None:
        provider.complete.side_effect = error
    else:
        provider.complete.return_value = response
    return provider


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    conn = init_db(tmp_path / "test.db")
    yield conn
    conn.close()


# ---------------------------------------------------------------------------
# parse_response
# ---------------------------------------------------------------------------
class TestParseResponse:
    def test_markdown_wrapped_json(self) -> None:
        fields = parse_response(_load_sample_response())
        assert fields.candidate_name == "Thandi Nkosi"
        assert fields.score == "8/10"
        assert fields.skill_set == ["Classroom management", "Maths", "CAPS curriculum"]
        assert fields.extraction_method == "llm"

    def test_plain_json(self) -> None:
        fields = parse_response('{"candidate_name": "A", "score": 7}')
        assert fields.candidate_name == "A"
        assert fields.score == 7

    def test_list_text_field_joined(self) -> None:
        fields = parse_response('{"job_history": ["Teacher, 3 years", "Tutor, 1 year"]}')
        assert fields.job_history == "Teacher, 3 years\nTutor, 1 year"

    def test_numeric_text_field_stringified(self) -> None:
        assert parse_response('{"contact_number": 27825550134}').contact_number == "27825550134"

    def test_unknown_keys_kept(self) -> None:
        fields = parse_response('{"candidate_name": "A", "linkedin": "in/a"}')
        assert fields.model_extra == {"linkedin": "in/a"}

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError, match="Failed to parse LLM response as JSON"):
            parse_response("Sure! Here is the candidate...")

    def test_not_an_object(self) -> None:
        with pytest.raises(ValueError, match="not a JSON object"):
            parse_response("[1, 2]")

    def test_invalid_field_type(self) -> None:
        with pytest.raises(ValueError, match="failed validation"):
            parse_response('{"score": {"value": 8}}')


# ---------------------------------------------------------------------------
# regex fallback
# ---------------------------------------------------------------------------
class TestRegexExtract:
    def test_extracts_contact_details(self) -> None:
        fields = regex_extract_fields(SAMPLE_CV)
        assert fields.candidate_name == "Thandi Nkosi"
        assert fields.email_address == "thandi@example.com"
        assert fields.contact_number == "+27 82 555 0134"
        assert fields.extraction_method == "regex"

    def test_extracts_known_labels(self) -> None:
        fields = regex_extract_fields(SAMPLE_CV)
        assert fields.countries == ["United Kingdom", "South Africa"]
        assert fields.skill_set == ["Python", "Excel"]

    def test_no_score(self) -> None:
        assert regex_extract_fields(SAMPLE_CV).score is None

    def test_empty_text(self) -> None:
        fields = regex_extract_fields("")
        assert fields.candidate_name is None
        assert fields.email_address is None
        assert fields.countries is None


# ---------------------------------------------------------------------------
# analyze_cv
# ---------------------------------------------------------------------------
class TestAnalyzeCv:
    def test_provider_roundtrip(self) -> None:
        provider = _provider(_load_sample_response())
        fields = analyze_cv("cv text", provider, model="m1")
        assert fields.candidate_name == "Thandi Nkosi"
        provider.complete.assert_called_once_with("cv text", model="m1")

    def test_no_provider_uses_regex(self) -> None:
        assert analyze_cv(SAMPLE_CV).extraction_method == "regex"

    def test_provider_error_falls_back(self) -> None:
        provider = _provider(error=RuntimeError("rate limited"))
        fields = analyze_cv(SAMPLE_CV, provider)
        assert fields.extraction_method == "regex"
        assert fields.email_address == "thandi@example.com"

    def test_unparseable_response_falls_back(self) -> None:
        fields = analyze_cv(SAMPLE_CV, _provider("I cannot help with that"))
        assert fields.extraction_method == "regex"

    def test_missing_key_falls_back(self) -> None:
        provider = _provider(error=ValueError("OPENAI_API_KEY environment variable is required"))
        assert analyze_cv(SAMPLE_CV, provider).extraction_method == "regex"


# ---------------------------------------------------------------------------
# process_cv
# ---------------------------------------------------------------------------
class TestProcessCv:
    def test_completes_and_stores_fields(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "thandi.pdf")
        record = process_cv(db, upload_id, "cv text", _provider(_load_sample_response()))
        assert record.processing_status is ProcessingStatus.COMPLETED
        assert record.candidate_name == "Thandi Nkosi"
        stored = get_record(db, upload_id)
        assert stored == record

    def test_regex_only(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "thandi.txt")
        record = process_cv(db, upload_id, SAMPLE_CV)
        assert record.is_completed
        assert record.extracted_fields is not None
        assert record.extracted_fields.extraction_method == "regex"

    def test_empty_text_marks_error(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "scan.pdf")
        record = process_cv(db, upload_id, "   \n")
        assert record.processing_status is ProcessingStatus.ERROR
        assert record.extracted_fields is None
        notes = db.execute("SELECT notes FROM cv_uploads WHERE id = ?", (upload_id,)).fetchone()[0]
        assert notes == "Processing failed: empty CV text"

    def test_missing_upload(self, db) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(KeyError):
            process_cv(db, "nope", "cv text")

    def test_completed_upload_cannot_be_reprocessed_directly(self, db) -> None:  # type: ignore[no-untyped-def]
        upload_id = insert_upload(db, "a.txt")
        process_cv(db, upload_id, SAMPLE_CV)
        with pytest.raises(ValueError, match="completed -> processing"):
            process_cv(db, upload_id, SAMPLE_CV)
