from datetime import timedelta

import pytest

from app.models.status import ApplicationStatus
from app.services.dashboard_service import DashboardService
from app.services.store import ApplicationStoreError
from tests.conftest import TODAY, USER_ID, make_application


@pytest.mark.asyncio
async def test_load_sweeps_before_fetching(store, seed):
    stale, = seed(make_application(application_date=TODAY - timedelta(days=35)))

    dashboard = await DashboardService(store).load(USER_ID, today=TODAY)

    assert [a.status for a in dashboard.applications] == [ApplicationStatus.REJECTED]
    assert dashboard.stats.rejected == 1
    assert dashboard.stats.applied == 0
    assert dashboard.sweep.rejected_ids == [stale.id]


@pytest.mark.asyncio
async def test_load_ranks_and_filters_but_counts_everything(store, seed):
    seed(
        make_application(status="rejected", company_name="Globex"),
        make_application(status="test", company_name="Globex"),
        make_application(status="interview_hr", company_name="Initech"),
        make_application(status="applied", company_name="Globex"),
    )

    dashboard = await DashboardService(store).load(USER_ID, search="globex", today=TODAY)

    assert [a.status.value for a in dashboard.applications] == ["test", "applied", "rejected"]
    assert dashboard.stats.total == 4
    assert dashboard.cards[0].value == 4


@pytest.mark.asyncio
async def test_sweep_failure_does_not_block_load(store, seed):
    stale, = seed(make_application(application_date=TODAY - timedelta(days=90)))

    async def broken_update(application_id, status, expected_status=None):
        raise ApplicationStoreError("write timeout")

    store.update_application_status = broken_update

    dashboard = await DashboardService(store).load(USER_ID, today=TODAY)

    # stale data is shown as-is
    assert [a.id for a in dashboard.applications] == [stale.id]
    assert dashboard.applications[0].status is ApplicationStatus.APPLIED
    assert dashboard.sweep.failed_ids == [stale.id]


@pytest.mark.asyncio
async def test_sweep_exception_is_swallowed(store, seed):
    seed(make_application(status="offered"))
    service = DashboardService(store)

    calls = []
    original_list = store.list_applications

    async def list_once_broken(user_id, status=None, company=None, position=None):
        calls.append(status)
        if status is ApplicationStatus.APPLIED:
            raise ApplicationStoreError("store unreachable")
        return await original_list(user_id, status=status, company=company, position=position)

    store.list_applications = list_once_broken

    dashboard = await service.load(USER_ID, today=TODAY)

    assert dashboard.sweep is None
    assert dashboard.stats.offered == 1
    assert calls == [ApplicationStatus.APPLIED, None]


@pytest.mark.asyncio
async def test_list_failure_propagates(store):
    async def broken_list(*args, **kwargs):
        raise ApplicationStoreError("store unreachable")

    store.list_applications = broken_list

    with pytest.raises(ApplicationStoreError):
        await DashboardService(store).load(USER_ID, today=TODAY)


@pytest.mark.asyncio
async def test_empty_dashboard(store):
    dashboard = await DashboardService(store).load(USER_ID, today=TODAY)

    assert dashboard.applications == []
    assert dashboard.stats.total == 0
    assert all(card.value == 0 for card in dashboard.cards)
