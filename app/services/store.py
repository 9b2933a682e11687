"""
Application store for JobTrack
Defines the persistence contract the core consumes and an in-memory store
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from app.models.application import JobApplication, JobApplicationCreate, JobApplicationUpdate
from app.models.status import ApplicationStatus

logger = logging.getLogger(__name__)


class ApplicationStoreError(Exception):
    """The store could not complete an operation"""


class ApplicationNotFoundError(ApplicationStoreError):
    """No application with the requested id"""

    def __init__(self, application_id: str):
        super().__init__(f"Application {application_id} not found")
        self.application_id = application_id


class ApplicationStore(Protocol):
    """Persistence collaborator for job applications"""

    async def list_applications(
        self,
        user_id: str,
        status: Optional[ApplicationStatus] = None,
        company: Optional[str] = None,
        position: Optional[str] = None,
    ) -> List[JobApplication]:
        ...

    async def get_application(self, application_id: str, user_id: str) -> Optional[JobApplication]:
        ...

    async def create_application(self, user_id: str, data: JobApplicationCreate) -> JobApplication:
        ...

    async def update_application(
        self, application_id: str, user_id: str, data: JobApplicationUpdate
    ) -> Optional[JobApplication]:
        ...

    async def update_application_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        expected_status: Optional[ApplicationStatus] = None,
    ) -> Optional[JobApplication]:
        ...

    async def delete_application(self, application_id: str, user_id: str) -> bool:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _contains(haystack: Optional[str], needle: Optional[str]) -> bool:
    if not needle:
        return True
    return bool(haystack) and needle.lower() in haystack.lower()


class InMemoryApplicationStore:
    """Dict-backed store for development and tests"""

    def __init__(self):
        self.applications: Dict[str, JobApplication] = {}

    async def list_applications(
        self,
        user_id: str,
        status: Optional[ApplicationStatus] = None,
        company: Optional[str] = None,
        position: Optional[str] = None,
    ) -> List[JobApplication]:
        """
        Get all applications for a user, newest application date first
        """
        user_apps = [
            a for a in self.applications.values()
            if a.user_id == user_id
            and (status is None or a.status == status)
            and _contains(a.company_name, company)
            and _contains(a.position, position)
        ]
        return sorted(user_apps, key=lambda a: a.application_date, reverse=True)

    async def get_application(self, application_id: str, user_id: str) -> Optional[JobApplication]:
        app = self.applications.get(application_id)
        if app is None or app.user_id != user_id:
            return None
        return app

    async def create_application(self, user_id: str, data: JobApplicationCreate) -> JobApplication:
        """
        Create a new application entry
        """
        now = _utcnow()
        app = JobApplication(
            id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.applications[app.id] = app
        logger.info(f"Created application: {app.position} at {app.company_name}")
        return app

    async def update_application(
        self, application_id: str, user_id: str, data: JobApplicationUpdate
    ) -> Optional[JobApplication]:
        """
        Update an existing application with the fields set on ``data``
        """
        app = await self.get_application(application_id, user_id)
        if app is None:
            logger.warning(f"Application {application_id} not found")
            return None

        changes = data.model_dump(exclude_unset=True)
        updated = JobApplication.model_validate({**app.model_dump(), **changes, "updated_at": _utcnow()})
        self.applications[application_id] = updated
        logger.info(f"Updated application {application_id}: {sorted(changes)}")
        return updated

    async def update_application_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        expected_status: Optional[ApplicationStatus] = None,
    ) -> Optional[JobApplication]:
        """
        Set the status and bump updated_at. With ``expected_status`` the write
        only happens while the record still has that status; otherwise
        nothing changes and None is returned.
        """
        app = self.applications.get(application_id)
        if app is None:
            raise ApplicationNotFoundError(application_id)
        if expected_status is not None and app.status != ApplicationStatus(expected_status):
            logger.info(f"Application {application_id} is {app.status.value}, not {ApplicationStatus(expected_status).value}; left unchanged")
            return None

        updated = app.model_copy(update={"status": ApplicationStatus(status), "updated_at": _utcnow()})
        self.applications[application_id] = updated
        logger.info(f"Updated application {application_id} status to {updated.status.value}")
        return updated

    async def delete_application(self, application_id: str, user_id: str) -> bool:
        """
        Delete an application
        """
        if await self.get_application(application_id, user_id) is None:
            logger.warning(f"Application {application_id} not found for deletion")
            return False
        del self.applications[application_id]
        logger.info(f"Deleted application {application_id}")
        return True
