"""
Dashboard service for JobTrack
Runs the staleness sweep, then loads, ranks and aggregates applications
"""

import logging
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.application import JobApplication
from app.models.stats import StatsSnapshot, SummaryCard
from app.models.status import ApplicationStatus
from app.services.priority import filter_applications, rank_applications
from app.services.staleness import STALE_AFTER_DAYS, SweepResult, sweep_stale_applications
from app.services.stats import aggregate_stats, summary_cards
from app.services.store import ApplicationStore

logger = logging.getLogger(__name__)


class Dashboard(BaseModel):
    """Everything one dashboard load shows"""
    applications: List[JobApplication] = Field(..., description="Filtered applications, most urgent first")
    stats: StatsSnapshot = Field(..., description="Counts over all of the user's applications")
    cards: List[SummaryCard] = Field(..., description="Summary counters")
    sweep: Optional[SweepResult] = Field(None, description="Result of the staleness sweep, absent if it failed")


class DashboardService:
    """Builds the dashboard for one user against an application store"""

    def __init__(self, store: ApplicationStore, stale_after_days: int = STALE_AFTER_DAYS):
        self.store = store
        self.stale_after_days = stale_after_days

    async def run_sweep(self, user_id: str, today: Optional[date] = None) -> Optional[SweepResult]:
        """
        Best-effort staleness sweep. Failures are logged and discarded so
        they never block loading the dashboard.
        """
        try:
            return await sweep_stale_applications(
                self.store, user_id, today=today, stale_after_days=self.stale_after_days
            )
        except Exception as e:
            logger.warning(f"Auto reject failed for user {user_id}: {str(e)}")
            return None

    async def load(
        self,
        user_id: str,
        search: Optional[str] = None,
        status: Optional[ApplicationStatus] = None,
        today: Optional[date] = None,
    ) -> Dashboard:
        """
        Sweep, then fetch. Store errors from the fetch propagate so the
        caller can show a failed-to-load state.
        """
        sweep = await self.run_sweep(user_id, today=today)

        applications = await self.store.list_applications(user_id)
        logger.info(f"Loaded {len(applications)} applications for user {user_id}")

        stats = aggregate_stats(applications)
        visible = filter_applications(applications, search=search, status=status)
        return Dashboard(
            applications=rank_applications(visible),
            stats=stats,
            cards=summary_cards(stats),
            sweep=sweep,
        )
