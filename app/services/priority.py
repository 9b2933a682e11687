"""
Priority ranking for JobTrack
Orders applications so the ones needing action soonest come first
"""

from typing import Iterable, List, Optional, TypeVar

from app.models.status import ApplicationStatus, StatusLike, normalize_legacy_status

T = TypeVar("T")

# Lower is more urgent. Test and interview stages need action sooner than a
# fresh application waiting in a queue; terminal states sink to the bottom.
STATUS_PRIORITY = {
    ApplicationStatus.TEST: 1,
    ApplicationStatus.INTERVIEW_USER: 2,
    ApplicationStatus.INTERVIEW_HR: 3,
    ApplicationStatus.INTERVIEW_FINAL: 4,
    ApplicationStatus.SCREENING: 5,
    ApplicationStatus.OFFERED: 6,
    ApplicationStatus.APPLIED: 7,
    ApplicationStatus.ACCEPTED: 8,
    ApplicationStatus.WITHDRAWN: 9,
    ApplicationStatus.REJECTED: 10,
}

UNKNOWN_PRIORITY = 99


def status_priority(status: StatusLike) -> int:
    """Priority rank of a status; unknown values rank last"""
    try:
        return STATUS_PRIORITY[ApplicationStatus(status)]
    except ValueError:
        return UNKNOWN_PRIORITY


def rank_applications(applications: Iterable[T]) -> List[T]:
    """
    Sort applications by status priority, then newest application date first.

    Two stable passes: the secondary key first, then the primary key, so
    entries with equal keys keep their input order.
    """
    by_date = sorted(applications, key=lambda a: a.application_date, reverse=True)
    return sorted(by_date, key=lambda a: status_priority(a.status))


def filter_applications(
    applications: Iterable[T],
    search: Optional[str] = None,
    status: Optional[StatusLike] = None,
) -> List[T]:
    """Keep applications whose company or position contains ``search`` and that match ``status``"""
    needle = search.strip().lower() if search else ""
    wanted = normalize_legacy_status(status) if status else None
    result = []
    for app in applications:
        if wanted is not None and app.status != wanted:
            continue
        if needle and needle not in app.company_name.lower() and needle not in app.position.lower():
            continue
        result.append(app)
    return result
