"""
Stats aggregation for JobTrack
Reduces a user's applications into dashboard counters
"""

import logging
from collections import Counter
from typing import Iterable, List, Optional

from app.models.stats import StatsSnapshot, SummaryCard, percentage
from app.models.status import ApplicationStatus, normalize_legacy_status

logger = logging.getLogger(__name__)


def aggregate_stats(applications: Optional[Iterable] = None) -> StatsSnapshot:
    """
    Count applications per status.

    Every status is present in the result. Values outside the status scheme
    are skipped so the per-status counts always add up to ``total``.
    """
    counts = Counter()
    for app in applications or ():
        try:
            counts[normalize_legacy_status(app.status)] += 1
        except ValueError:
            logger.warning(f"Skipping application {getattr(app, 'id', '?')} with unknown status {app.status!r}")

    return StatsSnapshot(
        total=sum(counts.values()),
        **{status.value: counts[status] for status in ApplicationStatus},
    )


def summary_cards(stats: StatsSnapshot) -> List[SummaryCard]:
    """The dashboard's counters: total, applied, interview rollup, rejected, accepted"""
    return [
        SummaryCard(title="Total Applications", value=stats.total),
        SummaryCard(
            title="Applied",
            value=stats.applied,
            percentage=percentage(stats.applied, stats.total),
        ),
        SummaryCard(
            title="Interview",
            value=stats.interview_count,
            percentage=stats.interview_percentage,
        ),
        SummaryCard(
            title="Rejected",
            value=stats.rejected,
            percentage=percentage(stats.rejected, stats.total),
        ),
        SummaryCard(
            title="Accepted",
            value=stats.accepted,
            percentage=percentage(stats.accepted, stats.total),
        ),
    ]
