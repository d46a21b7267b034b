"""Free-text heuristics over extracted CV fields.

Both helpers are approximate: they read noisy LLM output with regexes and
return a best-effort answer. They never raise.
"""

import re

from cvtriage.core.schemas import ExtractedFields

# Larger mentions are treated as noise ("99 years old").
_MAX_YEARS_PER_MENTION = 50

_YEARS_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?:over|more than|at least|nearly|almost)\s+(?<!\d)(\d{1,2})\+?\s*(?:years?|yrs?)\b", re.I),
    re.compile(r"(?<!\d)(\d{1,2})\+?\s*(?:years?|yrs?)\s+(?:of\s+)?(?:teaching|experience|work)", re.I),
    re.compile(r"(?:teaching|experience|teacher|worked)\s+(?:for\s+)?(?<!\d)(\d{1,2})\+?\s*(?:years?|yrs?)\b", re.I),
    re.compile(r"(?<!\d)(\d{1,2})\+?\s*(?:years?|yrs?)\b", re.I),
]

ACCEPT_DEGREE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b(b\.?\s*ed|bed)\b", re.I),
    re.compile(r"\bbachelor of education\b", re.I),
    re.compile(r"\bpgce\b", re.I),
    re.compile(r"\bpostgraduate certificate in education\b", re.I),
    re.compile(r"\bpgde\b", re.I),
    re.compile(r"\bpgdip(ed| in education)?\b", re.I),
    re.compile(r"\b(b\.?\s*a\.?\s*ed|ba(ed)? in education)\b", re.I),
    re.compile(r"\bbsc\(ed\)", re.I),
    re.compile(r"\bbcom\(ed\)", re.I),
    re.compile(r"\b(foundation|intermediate|senior) phase\b", re.I),
]

IN_PROGRESS_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\bin[-\s]?progress\b", re.I),
    re.compile(r"\bcurrently (studying|pursuing|enrolled)\b", re.I),
    re.compile(r"\bstudent\b", re.I),
    re.compile(r"\bpursuing\b", re.I),
    re.compile(r"\bongoing\b", re.I),
]


def _mentions(text: str) -> list[int]:
    """Year counts mentioned in text, one per distinct number position."""
    found: dict[int, int] = {}
    for pattern in _YEARS_PATTERNS:
        for match in pattern.finditer(text):
            start = match.start(1)
            if start in found:
                continue
            years = int(match.group(1))
            if 0 < years <= _MAX_YEARS_PER_MENTION:
                found[start] = years
    return [found[pos] for pos in sorted(found)]


def extract_years_experience(job_history: str | None, justification: str | None = None) -> int:
    """Estimate total years of experience as a lower bound.

    Job-history mentions are summed (one per role); justification usually
    restates a total, so only its largest mention counts. The larger of the
    two estimates wins.
    """
    history_total = sum(_mentions(job_history or ""))
    justification_max = max(_mentions(justification or ""), default=0)
    return max(history_total, justification_max, 0)


def has_completed_teaching_degree(fields: ExtractedFields | None) -> bool:
    """True when education/employment text shows a finished teaching degree."""
    if fields is None:
        return False
    hay = " ".join(
        p
        for p in (
            fields.educational_qualifications,
            fields.current_employment,
            fields.job_history,
        )
        if p
    )
    if not hay.strip():
        return False
    if any(p.search(hay) for p in IN_PROGRESS_PATTERNS):
        return False
    return any(p.search(hay) for p in ACCEPT_DEGREE_PATTERNS)
