"""Qualification predicates and filter chain for candidate records.

Base chain (short-circuits on first failure):
  1. completed with extracted fields
  2. email present
  3. name not on the placeholder denylist
  4. normalized score >= base minimum (6)

Vertical chain = base chain, then:
  5. score >= config.min_score
  6. exclude / include keywords over the search surface
  7. country allowlist (empty allowlist admits everyone)
  8. strict only: qualifications, years of experience, current role,
     and a completed teaching degree when the config asks for one

Predicates are pure and never raise; bad data simply fails the predicate.
"""

import logging
from collections.abc import Callable, Sequence

from cvtriage.core.config import QualificationConfig, VerticalConfig
from cvtriage.core.schemas import CandidateRecord
from cvtriage.core.verticals import ActiveRules
from cvtriage.pipeline.experience import extract_years_experience, has_completed_teaching_degree
from cvtriage.pipeline.normalize import countries_text, normalize_email, record_score, search_text

logger = logging.getLogger(__name__)

# A filter is a callable that takes records and returns a subset.
Filter = Callable[[list[CandidateRecord]], list[CandidateRecord]]

_DEFAULT_QUALIFICATION = QualificationConfig()


def _lowered(keywords: Sequence[str]) -> list[str]:
    return [kw.lower().strip() for kw in keywords if kw.strip()]


# ---------------------------------------------------------------------------
# Base predicates
# ---------------------------------------------------------------------------


def is_completed(record: CandidateRecord) -> bool:
    return record.is_completed


def has_email(record: CandidateRecord) -> bool:
    fields = record.extracted_fields
    return fields is not None and bool(normalize_email(fields.email_address))


def is_placeholder_candidate(
    record: CandidateRecord,
    placeholder_names: Sequence[str] | None = None,
) -> bool:
    """True when the name contains a known test/placeholder pattern."""
    name = record.candidate_name.lower()
    if not name:
        return False
    patterns = placeholder_names if placeholder_names is not None else _DEFAULT_QUALIFICATION.placeholder_names
    return any(p in name for p in patterns)


def has_minimum_score(record: CandidateRecord, min_score: int) -> bool:
    return record_score(record) >= min_score


def is_qualified(record: CandidateRecord, config: QualificationConfig | None = None) -> bool:
    """Base qualification: completed, has email, not a placeholder, score >= threshold."""
    config = config or _DEFAULT_QUALIFICATION
    return (
        is_completed(record)
        and has_email(record)
        and not is_placeholder_candidate(record, config.placeholder_names)
        and has_minimum_score(record, config.min_score)
    )


# ---------------------------------------------------------------------------
# Vertical predicates
# ---------------------------------------------------------------------------


def has_vertical_score(record: CandidateRecord, config: VerticalConfig) -> bool:
    return has_minimum_score(record, config.min_score)


def has_vertical_keywords(record: CandidateRecord, config: VerticalConfig) -> bool:
    """Reject on any exclude keyword; then require an include keyword if any are set."""
    if record.extracted_fields is None:
        return False
    text = search_text(record)
    if any(kw in text for kw in _lowered(config.exclude_keywords)):
        return False
    include = _lowered(config.include_keywords)
    if not include:
        return True
    return any(kw in text for kw in include)


def has_vertical_country(record: CandidateRecord, config: VerticalConfig) -> bool:
    allowed = _lowered(config.allowed_countries)
    if not allowed:
        return True
    countries = countries_text(record)
    if not countries:
        return False
    return any(country in countries for country in allowed)


def has_vertical_qualifications(record: CandidateRecord, config: VerticalConfig) -> bool:
    required = _lowered(config.required_qualifications)
    if not required:
        return True
    fields = record.extracted_fields
    education = (fields.educational_qualifications or "").lower() if fields else ""
    if not education:
        return False
    return any(q in education for q in required)


def has_vertical_experience(record: CandidateRecord, config: VerticalConfig) -> bool:
    if config.min_years_experience == 0:
        return True
    fields = record.extracted_fields
    if fields is None:
        return False
    years = extract_years_experience(fields.job_history, fields.justification)
    return years >= config.min_years_experience


def has_vertical_current_role(record: CandidateRecord, config: VerticalConfig) -> bool:
    keywords = _lowered(config.current_role_keywords)
    if not config.require_current_role or not keywords:
        return True
    fields = record.extracted_fields
    current = (fields.current_employment or "").lower() if fields else ""
    if not current:
        return False
    return any(kw in current for kw in keywords)


def has_vertical_degree(record: CandidateRecord, config: VerticalConfig) -> bool:
    if not config.require_completed_degree:
        return True
    return has_completed_teaching_degree(record.extracted_fields)


def is_vertical_candidate(
    record: CandidateRecord,
    config: VerticalConfig,
    strict: bool = False,
    base: QualificationConfig | None = None,
) -> bool:
    """Base qualification plus the vertical's rules; strict adds the opt-in checks."""
    if not is_qualified(record, base):
        return False
    if not has_vertical_score(record, config):
        return False
    if not has_vertical_keywords(record, config):
        return False
    if not has_vertical_country(record, config):
        return False
    if strict:
        if not has_vertical_qualifications(record, config):
            return False
        if not has_vertical_experience(record, config):
            return False
        if not has_vertical_current_role(record, config):
            return False
        if not has_vertical_degree(record, config):
            return False
    return True


def matches_rules(
    record: CandidateRecord,
    rules: ActiveRules | None,
    base: QualificationConfig | None = None,
) -> bool:
    """Evaluate a record against resolved rules; None means base qualification only."""
    if rules is None:
        return is_qualified(record, base)
    return is_vertical_candidate(record, rules.config, rules.strict, base)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class CompletedFilter:
    """Keep only records whose extraction finished with fields present."""

    def __call__(self, records: list[CandidateRecord]) -> list[CandidateRecord]:
        result = [r for r in records if is_completed(r)]
        removed = len(records) - len(result)
        if removed:
            logger.debug("CompletedFilter: removed %d records", removed)
        return result


class QualifiedFilter:
    """Apply the base predicate chain, or the vertical chain when rules are active."""

    def __init__(
        self,
        rules: ActiveRules | None = None,
        base: QualificationConfig | None = None,
    ) -> None:
        self._rules = rules
        self._base = base or _DEFAULT_QUALIFICATION

    def __call__(self, records: list[CandidateRecord]) -> list[CandidateRecord]:
        result = [r for r in records if matches_rules(r, self._rules, self._base)]
        removed = len(records) - len(result)
        if removed:
            label = self._rules.config.id if self._rules else "base"
            logger.debug("QualifiedFilter(%s): removed %d records", label, removed)
        return result


class NamedFilter:
    """Drop records without a non-empty candidate name."""

    def __call__(self, records: list[CandidateRecord]) -> list[CandidateRecord]:
        result = [r for r in records if r.candidate_name]
        removed = len(records) - len(result)
        if removed:
            logger.debug("NamedFilter: removed %d unnamed records", removed)
        return result


def run_filter_chain(
    records: list[CandidateRecord],
    filters: list[Filter],
) -> list[CandidateRecord]:
    """Apply filters in order, returning the surviving records."""
    result = records
    for f in filters:
        result = f(result)
    return result
