"""Collapse records that refer to the same person.

Identity key: normalized email, or the "first_last" name key when the email
is missing. Records with neither are unidentifiable and dropped. When two
records share a key the one that ranks higher survives (score desc, date
desc, name asc); a full tie keeps the first one seen.
"""

import logging

from cvtriage.core.schemas import CandidateRecord
from cvtriage.pipeline.normalize import first_last_key, normalize_email
from cvtriage.pipeline.ranking import outranks

logger = logging.getLogger(__name__)


def dedupe_key(record: CandidateRecord) -> str:
    """Return "email:<addr>", "name:<first_last>", or "" when unidentifiable."""
    fields = record.extracted_fields
    if fields is None:
        return ""
    email = normalize_email(fields.email_address)
    if email:
        return f"email:{email}"
    name = first_last_key(fields.candidate_name)
    if name:
        return f"name:{name}"
    return ""


def deduplicate(records: list[CandidateRecord]) -> list[CandidateRecord]:
    """Keep one best record per identity key. Output order is not meaningful."""
    best: dict[str, CandidateRecord] = {}
    unidentifiable = 0
    for record in records:
        key = dedupe_key(record)
        if not key:
            unidentifiable += 1
            continue
        current = best.get(key)
        if current is None or outranks(record, current):
            best[key] = record

    if unidentifiable:
        logger.debug("deduplicate: dropped %d unidentifiable records", unidentifiable)
    collapsed = len(records) - unidentifiable - len(best)
    if collapsed:
        logger.debug("deduplicate: collapsed %d duplicates", collapsed)
    return list(best.values())


class DeduplicationFilter:
    """Filter-chain adapter around deduplicate()."""

    def __call__(self, records: list[CandidateRecord]) -> list[CandidateRecord]:
        return deduplicate(records)
