"""Dashboard pipeline: wires qualification, rules, advanced filters, dedup, ranking.

Data flow for the "best" view:
  1. Base qualification, or vertical/preset rules when a selection resolves
  2. Advanced filters (only when the feature flag is on)
  3. Named filter: a non-empty candidate name is required
  4. Deduplication
  5. Ranking

The "all uploads" view keeps every completed record: no qualification,
no dedup, just advanced filters and ranking.
"""

import logging
from datetime import date
from enum import Enum
from typing import NamedTuple

from cvtriage.core.config import Settings
from cvtriage.core.schemas import CandidateRecord
from cvtriage.core.verticals import RuleSelection, resolve_rules
from cvtriage.pipeline.advanced import AdvancedFilters, apply_advanced
from cvtriage.pipeline.cache import ResultCache
from cvtriage.pipeline.dedupe import DeduplicationFilter
from cvtriage.pipeline.facets import (
    distinct_countries,
    distinct_skills,
    distinct_source_emails,
    group_by_day,
)
from cvtriage.pipeline.normalize import effective_date
from cvtriage.pipeline.qualification import (
    CompletedFilter,
    Filter,
    NamedFilter,
    QualifiedFilter,
    run_filter_chain,
)
from cvtriage.pipeline.ranking import rank_candidates

logger = logging.getLogger(__name__)


class View(str, Enum):
    BEST = "best"
    ALL_UPLOADS = "all_uploads"


class DashboardResult(NamedTuple):
    """Ranked candidates plus facet lists computed over the unfiltered input."""

    candidates: list[CandidateRecord]
    skills: list[str]
    countries: list[str]
    source_emails: list[str]
    by_day: dict[str, list[CandidateRecord]]
    today_count: int


def _build_filters(
    view: View,
    selection: RuleSelection,
    settings: Settings,
    advanced: AdvancedFilters | None,
) -> list[Filter]:
    filters: list[Filter] = []
    if view is View.BEST:
        rules = resolve_rules(selection, settings)
        filters.append(QualifiedFilter(rules, settings.qualification))
    else:
        filters.append(CompletedFilter())

    if advanced is not None and settings.feature_flags.advanced_filters:
        filters.append(lambda records: apply_advanced(records, advanced))

    if view is View.BEST:
        filters.append(NamedFilter())
        filters.append(DeduplicationFilter())
    return filters


def _cache_key(
    records: list[CandidateRecord],
    view: View,
    selection: RuleSelection,
    settings: Settings,
    advanced: AdvancedFilters | None,
    today: date,
) -> tuple[object, ...]:
    identity = tuple(r.model_dump_json() for r in records)
    return (
        identity,
        view.value,
        selection,
        settings.model_dump_json(),
        advanced,
        today.isoformat(),
    )


def apply_dashboard_filters(
    records: list[CandidateRecord],
    view: View = View.BEST,
    selection: RuleSelection | None = None,
    settings: Settings | None = None,
    advanced: AdvancedFilters | None = None,
    *,
    cache: ResultCache[tuple[CandidateRecord, ...]] | None = None,
    today: date | None = None,
) -> list[CandidateRecord]:
    """Filter, dedupe and rank records for a dashboard view.

    Returns a new list; the input is never modified. The result is a pure
    function of (records, view, selection, settings, advanced, today).
    """
    selection = selection or RuleSelection()
    settings = settings or Settings()
    today = today or date.today()

    def compute() -> tuple[CandidateRecord, ...]:
        filters = _build_filters(view, selection, settings, advanced)
        filtered = run_filter_chain(list(records), filters)
        ranked = rank_candidates(filtered)
        logger.debug(
            "apply_dashboard_filters(%s): %d in, %d out",
            view.value, len(records), len(ranked),
        )
        return tuple(ranked)

    if cache is None:
        return list(compute())
    key = _cache_key(records, view, selection, settings, advanced, today)
    return list(cache.get_or_compute(key, compute))


def build_dashboard(
    records: list[CandidateRecord],
    view: View = View.BEST,
    selection: RuleSelection | None = None,
    settings: Settings | None = None,
    advanced: AdvancedFilters | None = None,
    *,
    cache: ResultCache[tuple[CandidateRecord, ...]] | None = None,
    today: date | None = None,
) -> DashboardResult:
    """Run the pipeline and derive facets and per-day grouping."""
    today = today or date.today()
    candidates = apply_dashboard_filters(
        records, view, selection, settings, advanced, cache=cache, today=today,
    )
    today_str = today.isoformat()
    return DashboardResult(
        candidates=candidates,
        skills=distinct_skills(records),
        countries=distinct_countries(records),
        source_emails=distinct_source_emails(records),
        by_day=group_by_day(candidates),
        today_count=sum(1 for c in candidates if effective_date(c) == today_str),
    )
