"""
Business logic services for JobTrack
"""

from app.services.dashboard_service import DashboardService
from app.services.store import ApplicationStoreError, InMemoryApplicationStore

__all__ = [
    "DashboardService",
    "ApplicationStoreError",
    "InMemoryApplicationStore"
]
