"""Tests for candidate ranking order."""

from datetime import date
from itertools import permutations

from cvtriage.core.schemas import CandidateRecord, ExtractedFields, ProcessingStatus
from cvtriage.pipeline.ranking import outranks, rank_candidates


def _record(
    name: str,
    score: str | None = "8",
    received: date | None = date(2024, 1, 1),
) -> CandidateRecord:
    return CandidateRecord(
        id=name,
        processing_status=ProcessingStatus.COMPLETED,
        received_at=received,
        extracted_fields=ExtractedFields(candidate_name=name, score=score),
    )


def _names(records: list[CandidateRecord]) -> list[str]:
    return [r.candidate_name for r in records]


class TestRankCandidates:
    def test_score_descending(self) -> None:
        records = [_record("a", "6"), _record("b", "90"), _record("c", "7/10")]
        assert _names(rank_candidates(records)) == ["b", "c", "a"]

    def test_date_breaks_score_ties(self) -> None:
        records = [
            _record("old", received=date(2024, 1, 1)),
            _record("new", received=date(2024, 6, 1)),
        ]
        assert _names(rank_candidates(records)) == ["new", "old"]

    def test_name_breaks_full_ties(self) -> None:
        for ordering in permutations([_record("Zoe"), _record("Amy"), _record("Bob")]):
            assert _names(rank_candidates(list(ordering))) == ["Amy", "Bob", "Zoe"]

    def test_name_comparison_ignores_case(self) -> None:
        records = [_record("bob"), _record("Amy"), _record("Carl")]
        assert _names(rank_candidates(records)) == ["Amy", "bob", "Carl"]

    def test_undated_sorts_after_dated(self) -> None:
        records = [_record("undated", received=None), _record("dated")]
        assert _names(rank_candidates(records)) == ["dated", "undated"]

    def test_missing_score_sorts_last(self) -> None:
        records = [_record("none", score=None), _record("low", score="1")]
        assert _names(rank_candidates(records)) == ["low", "none"]

    def test_returns_new_list(self) -> None:
        records = [_record("b", "5"), _record("a", "9")]
        ranked = rank_candidates(records)
        assert ranked is not records
        assert _names(records) == ["b", "a"]

    def test_agrees_with_outranks(self) -> None:
        records = [
            _record("Amy", "7", date(2024, 2, 1)),
            _record("Bob", "9", date(2024, 1, 1)),
            _record("Cal", "7", date(2024, 3, 1)),
            _record("Dee", "7", date(2024, 2, 1)),
        ]
        ranked = rank_candidates(records)
        for earlier, later in zip(ranked, ranked[1:]):
            assert not outranks(later, earlier)


class TestOutranks:
    def test_score_first(self) -> None:
        assert outranks(_record("z", "9", date(2020, 1, 1)), _record("a", "7", date(2024, 1, 1)))

    def test_equal_is_not_outranked(self) -> None:
        assert not outranks(_record("Amy"), _record("Amy"))
