"""
Staleness policy for JobTrack
Rejects applications that never got a response
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, TypeVar

from pydantic import BaseModel, Field

from app.models.status import ApplicationStatus
from app.services.store import ApplicationStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

STALE_AFTER_DAYS = 30


class SweepResult(BaseModel):
    """Outcome of one staleness sweep"""
    rejected_ids: List[str] = Field(default_factory=list, description="Applications moved to rejected")
    failed_ids: List[str] = Field(default_factory=list, description="Applications whose update failed")
    skipped_ids: List[str] = Field(default_factory=list, description="Applications that left 'applied' before the write")

    @property
    def rejected_count(self) -> int:
        return len(self.rejected_ids)


def one_month_before(today: date) -> date:
    """Same day of the previous calendar month, clamped to that month's length"""
    year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def staleness_cutoff(today: date, stale_after_days: int = STALE_AFTER_DAYS) -> date:
    """
    Latest application date that counts as stale on ``today``.

    An application is stale after ``stale_after_days`` days or one calendar
    month, whichever comes first.
    """
    return max(today - timedelta(days=stale_after_days), one_month_before(today))


def is_stale(application, today: date, stale_after_days: int = STALE_AFTER_DAYS) -> bool:
    """Only unanswered ``applied`` records go stale; every other status is left alone"""
    if application.status != ApplicationStatus.APPLIED:
        return False
    return application.application_date <= staleness_cutoff(today, stale_after_days)


def find_stale(applications: Iterable[T], today: date, stale_after_days: int = STALE_AFTER_DAYS) -> List[T]:
    return [a for a in applications if is_stale(a, today, stale_after_days)]


async def sweep_stale_applications(
    store: ApplicationStore,
    user_id: str,
    today: Optional[date] = None,
    stale_after_days: int = STALE_AFTER_DAYS,
) -> SweepResult:
    """
    Move every stale application of ``user_id`` to ``rejected``.

    Each write is conditional on the record still being ``applied``, so a
    concurrent edit wins over the sweep. A failed update is logged and the
    sweep carries on with the remaining records; errors from listing
    propagate to the caller. Running the sweep again with no new data
    changes nothing.
    """
    today = today or date.today()
    applications = await store.list_applications(user_id, status=ApplicationStatus.APPLIED)
    stale = find_stale(applications, today, stale_after_days)

    result = SweepResult()
    if not stale:
        logger.debug(f"No stale applications for user {user_id}")
        return result

    for app in stale:
        try:
            updated = await store.update_application_status(
                app.id, ApplicationStatus.REJECTED, expected_status=ApplicationStatus.APPLIED
            )
        except Exception as e:
            logger.error(f"Error auto-rejecting application {app.id}: {str(e)}")
            result.failed_ids.append(app.id)
            continue
        if updated is None:
            result.skipped_ids.append(app.id)
        else:
            result.rejected_ids.append(app.id)

    logger.info(
        f"Auto-rejected {result.rejected_count} stale applications for user {user_id}"
        + (f" ({len(result.failed_ids)} failed)" if result.failed_ids else "")
    )
    return result
