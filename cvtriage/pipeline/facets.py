"""Facet lists for filter dropdowns and per-day grouping."""

from collections import defaultdict

from cvtriage.core.schemas import CandidateRecord
from cvtriage.pipeline.advanced import source_email_of
from cvtriage.pipeline.normalize import countries_of, effective_date, skills_of


def _sorted_labels(labels: dict[str, str]) -> list[str]:
    return [labels[k] for k in sorted(labels)]


def distinct_skills(records: list[CandidateRecord]) -> list[str]:
    labels: dict[str, str] = {}
    for record in records:
        for skill in skills_of(record):
            labels.setdefault(skill.casefold(), skill)
    return _sorted_labels(labels)


def distinct_countries(records: list[CandidateRecord]) -> list[str]:
    labels: dict[str, str] = {}
    for record in records:
        for country in countries_of(record):
            labels.setdefault(country.casefold(), country)
    return _sorted_labels(labels)


def distinct_source_emails(records: list[CandidateRecord]) -> list[str]:
    return sorted({e for e in (source_email_of(r) for r in records) if e})


def group_by_day(records: list[CandidateRecord]) -> dict[str, list[CandidateRecord]]:
    """Bucket records by effective date, newest day first. Undated records go under ""."""
    groups: dict[str, list[CandidateRecord]] = defaultdict(list)
    for record in records:
        groups[effective_date(record)].append(record)
    return {day: groups[day] for day in sorted(groups, reverse=True)}
