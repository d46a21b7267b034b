"""Deterministic display order for candidate records.

Keys, in order: normalized score desc, effective date desc, name asc.
Ties on all three keep their input order (Python's sort is stable).
"""

from cvtriage.core.schemas import CandidateRecord
from cvtriage.pipeline.normalize import effective_date, record_score


def _name_key(record: CandidateRecord) -> str:
    return record.candidate_name.casefold()


def rank_key(record: CandidateRecord) -> tuple[int, str, str]:
    """(score, date, name) as compared by the ranking; used by dedup tie-breaks too."""
    return record_score(record), effective_date(record), _name_key(record)


def outranks(a: CandidateRecord, b: CandidateRecord) -> bool:
    """True when a sorts strictly before b."""
    score_a, date_a, name_a = rank_key(a)
    score_b, date_b, name_b = rank_key(b)
    if score_a != score_b:
        return score_a > score_b
    if date_a != date_b:
        return date_a > date_b
    return name_a < name_b


def rank_candidates(records: list[CandidateRecord]) -> list[CandidateRecord]:
    """Return a new list sorted by score desc, date desc, name asc."""
    # Least significant key first; each stable pass preserves the previous order.
    ranked = sorted(records, key=_name_key)
    ranked.sort(key=effective_date, reverse=True)
    ranked.sort(key=record_score, reverse=True)
    return ranked
