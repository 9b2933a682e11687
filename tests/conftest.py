import itertools
from datetime import date, datetime, timezone

import pytest

from app.models.application import JobApplication
from app.services.store import InMemoryApplicationStore

TODAY = date(2024, 6, 15)
USER_ID = "user-1"

_ids = itertools.count(1)


def make_application(status="applied", application_date=TODAY, user_id=USER_ID, **fields):
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    values = {
        "id": f"app-{next(_ids)}",
        "user_id": user_id,
        "company_name": "Acme",
        "position": "Engineer",
        "status": status,
        "application_date": application_date,
        "created_at": now,
        "updated_at": now,
    }
    values.update(fields)
    return JobApplication(**values)


@pytest.fixture
def store():
    return InMemoryApplicationStore()


@pytest.fixture
def seed(store):
    """Put applications straight into the in-memory store"""
    def _seed(*applications):
        for app in applications:
            store.applications[app.id] = app
        return applications
    return _seed
