# smart_scheduler/jobs.py
import logging
from dataclasses import dataclass, field
from typing import List

from .catalog import Catalog
from .model import Job, SessionKind

logger = logging.getLogger(__name__)

# Only the first few unknown subject ids are named in the log
MAX_REPORTED_MISMATCHES = 3


@dataclass
class JobExpansion:
    jobs: List[Job] = field(default_factory=list)
    skipped: int = 0
    missing_subject_ids: List[str] = field(default_factory=list)


def expand_registration(subject, group_id: str) -> List[Job]:
    """Practice block first (N contiguous periods), then one job per theory period."""
    out: List[Job] = []
    if subject.practice > 0:
        out.append(
            Job(
                group_id=group_id,
                subject_id=subject.subject_id,
                kind=SessionKind.PRACTICE,
                length=subject.practice,
                subject_name=subject.subject_name,
            )
        )
    for _ in range(max(0, subject.theory)):
        out.append(
            Job(
                group_id=group_id,
                subject_id=subject.subject_id,
                kind=SessionKind.THEORY,
                length=1,
                subject_name=subject.subject_name,
            )
        )
    return out


def expand_jobs(catalog: Catalog) -> JobExpansion:
    result = JobExpansion()
    for reg in catalog.registrations:
        subject = catalog.subjects_by_id.get(reg.subject_id)
        if subject is None:
            result.skipped += 1
            if len(result.missing_subject_ids) < MAX_REPORTED_MISMATCHES:
                result.missing_subject_ids.append(reg.subject_id)
            continue
        result.jobs.extend(expand_registration(subject, reg.group_id))

    # Longest blocks first so they get the contiguous runs; sort is stable
    result.jobs.sort(key=lambda j: j.length, reverse=True)

    if result.skipped:
        logger.debug(
            "Skipped %d registration(s) with unknown subject id (e.g. %s)",
            result.skipped,
            ", ".join(result.missing_subject_ids),
        )
    return result
