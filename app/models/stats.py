"""
Stats models for JobTrack
Defines the derived dashboard snapshot and summary cards
"""

from typing import Dict, Optional
from pydantic import BaseModel, Field, computed_field

from app.models.status import ApplicationStatus, INTERVIEW_STAGE_STATUSES


def percentage(count: int, total: int) -> int:
    """
    Share of ``count`` in ``total`` as a whole percent, rounded half up.
    Returns 0 for an empty total.
    """
    if total <= 0:
        return 0
    return (count * 200 + total) // (total * 2)


class StatsSnapshot(BaseModel):
    """Per-status counts for one user's applications; never persisted"""
    total: int = 0
    applied: int = 0
    screening: int = 0
    test: int = 0
    interview_user: int = 0
    interview_hr: int = 0
    interview_final: int = 0
    offered: int = 0
    accepted: int = 0
    rejected: int = 0
    withdrawn: int = 0

    def count(self, status: ApplicationStatus) -> int:
        return getattr(self, ApplicationStatus(status).value)

    def percentage_of(self, status: ApplicationStatus) -> int:
        return percentage(self.count(status), self.total)

    @computed_field
    @property
    def percentages(self) -> Dict[str, int]:
        return {s.value: self.percentage_of(s) for s in ApplicationStatus}

    @computed_field
    @property
    def interview_count(self) -> int:
        # screening through final interview shown as one "Interview" figure
        return sum(self.count(s) for s in INTERVIEW_STAGE_STATUSES)

    @computed_field
    @property
    def interview_percentage(self) -> int:
        return percentage(self.interview_count, self.total)


class SummaryCard(BaseModel):
    """One dashboard counter"""
    title: str = Field(..., description="Card title")
    value: int = Field(..., description="Number of applications")
    percentage: Optional[int] = Field(None, description="Share of total, absent for the total card")
