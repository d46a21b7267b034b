"""Normalization of loosely typed extraction fields into canonical forms.

Every helper is total: malformed input degrades to a safe default (0, "", [])
instead of raising. This is the only module that branches on str-vs-list.
"""

import math
import re
from collections.abc import Iterable
from datetime import date, datetime

from cvtriage.core.schemas import CandidateRecord

_SCORE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(?:\s*/\s*(\d+(?:\.\d+)?))?")
_LIST_SPLIT = re.compile(r"[,;|]")
_WHITESPACE = re.compile(r"\s+")

COUNTRY_LABELS: dict[str, str] = {
    "usa": "United States",
    "us": "United States",
    "u.s.": "United States",
    "u.s.a.": "United States",
    "america": "United States",
    "united states": "United States",
    "united states of america": "United States",
    "uk": "United Kingdom",
    "u.k.": "United Kingdom",
    "great britain": "United Kingdom",
    "britain": "United Kingdom",
    "england": "United Kingdom",
    "scotland": "United Kingdom",
    "wales": "United Kingdom",
    "northern ireland": "United Kingdom",
    "united kingdom": "United Kingdom",
    "rsa": "South Africa",
    "south africa": "South Africa",
    "sa": "South Africa",
    "nz": "New Zealand",
    "new zealand": "New Zealand",
    "aus": "Australia",
    "australia": "Australia",
    "uae": "United Arab Emirates",
    "dubai": "United Arab Emirates",
    "canada": "Canada",
    "ireland": "Ireland",
}

SKILL_LABELS: dict[str, str] = {
    "js": "JavaScript",
    "javascript": "JavaScript",
    "ts": "TypeScript",
    "typescript": "TypeScript",
    "py": "Python",
    "python": "Python",
    "node": "Node.js",
    "nodejs": "Node.js",
    "node.js": "Node.js",
    "react": "React",
    "reactjs": "React",
    "react.js": "React",
    "postgres": "PostgreSQL",
    "postgresql": "PostgreSQL",
    "k8s": "Kubernetes",
    "kubernetes": "Kubernetes",
    "aws": "AWS",
    "sql": "SQL",
    "ms excel": "Excel",
    "excel": "Excel",
    "maths": "Mathematics",
    "math": "Mathematics",
    "mathematics": "Mathematics",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_score(raw: object) -> int:
    """Return the score as an integer out of 10.

    Accepts "8/10", "85", "8.5", 85, None. Fractions are scaled to 10, values
    above 10 are treated as out of 100. Rounds half-up and clamps to [0, 10].
    """
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int | float):
        try:
            value = float(raw)
        except OverflowError:
            return 0
    else:
        match = _SCORE_PATTERN.search(str(raw))
        if not match:
            return 0
        value = float(match.group(1))
        denominator = float(match.group(2)) if match.group(2) else 0.0
        if denominator > 0:
            value = value * 10 / denominator

    if not math.isfinite(value):
        return 0
    if value > 10:
        value = value / 10
    return max(0, min(10, _round_half_up(value)))


def normalize_list_field(raw: object) -> list[str]:
    """Coerce a string-or-list field into a list of trimmed, non-empty strings."""
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = _LIST_SPLIT.split(raw)
    elif isinstance(raw, list | tuple):
        parts = [item for item in raw if isinstance(item, str)]
    else:
        return []
    return [p.strip() for p in parts if p.strip()]


def normalize_email(raw: str | None) -> str:
    return (raw or "").strip().lower()


def normalize_name(raw: str | None) -> str:
    """Lowercase and collapse whitespace. Dedup key material only, never displayed."""
    return _WHITESPACE.sub(" ", (raw or "").strip().lower())


def first_last_key(raw: str | None) -> str:
    """Build the "first_last" name key: first and last tokens of the normalized name."""
    tokens = normalize_name(raw).split(" ")
    tokens = [t for t in tokens if t]
    if not tokens:
        return ""
    if len(tokens) == 1:
        return tokens[0]
    return f"{tokens[0]}_{tokens[-1]}"


def canonical_country(raw: str) -> str:
    label = raw.strip()
    return COUNTRY_LABELS.get(label.lower(), label)


def canonical_skill(raw: str) -> str:
    label = raw.strip()
    return SKILL_LABELS.get(label.lower(), label)


def countries_of(record: CandidateRecord) -> list[str]:
    """Canonical country labels for a record, in order, without duplicates."""
    fields = record.extracted_fields
    if fields is None:
        return []
    return _distinct(canonical_country(c) for c in normalize_list_field(fields.countries))


def skills_of(record: CandidateRecord) -> list[str]:
    """Canonical skill labels for a record, in order, without duplicates."""
    fields = record.extracted_fields
    if fields is None:
        return []
    return _distinct(canonical_skill(s) for s in normalize_list_field(fields.skill_set))


def countries_text(record: CandidateRecord) -> str:
    """Raw and canonical country labels joined into one lowercase haystack."""
    fields = record.extracted_fields
    if fields is None:
        return ""
    raw = normalize_list_field(fields.countries)
    labels = raw + [canonical_country(c) for c in raw]
    return " ".join(labels).lower()


def record_score(record: CandidateRecord) -> int:
    if record.extracted_fields is None:
        return 0
    return normalize_score(record.extracted_fields.score)


def effective_date(record: CandidateRecord) -> str:
    """Date used for recency ordering, as YYYY-MM-DD, or "" when unknown.

    Priority: received_at, then extracted date_received, then uploaded_at.
    """
    if record.received_at is not None:
        return _date_string(record.received_at)
    fields = record.extracted_fields
    if fields is not None and fields.date_received:
        parsed = _parse_date(fields.date_received)
        if parsed:
            return parsed
    if record.uploaded_at is not None:
        return _date_string(record.uploaded_at)
    return ""


def search_text(record: CandidateRecord) -> str:
    """Lowercase haystack for keyword rules: name, current role, history, education."""
    fields = record.extracted_fields
    if fields is None:
        return ""
    parts = [
        fields.candidate_name,
        fields.current_employment,
        fields.job_history,
        fields.educational_qualifications,
    ]
    return " ".join(p for p in parts if p).lower()


def _date_string(value: datetime | date) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    return value.isoformat()


def _parse_date(raw: str) -> str:
    text = raw.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    match = re.match(r"(\d{4}-\d{2}-\d{2})", text)
    return match.group(1) if match else ""


def _distinct(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for v in values:
        key = v.lower()
        if key not in seen:
            seen.add(key)
            result.append(v)
    return result
