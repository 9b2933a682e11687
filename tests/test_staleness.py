from datetime import date, timedelta

import pytest

from app.models.status import ApplicationStatus
from app.services.staleness import find_stale, is_stale, one_month_before, sweep_stale_applications
from app.services.store import ApplicationStoreError
from tests.conftest import TODAY, USER_ID, make_application


def test_applied_for_thirty_days_is_stale():
    app = make_application(application_date=TODAY - timedelta(days=30))
    assert is_stale(app, TODAY)


def test_applied_for_twenty_nine_days_is_not_stale():
    app = make_application(application_date=TODAY - timedelta(days=29))
    assert not is_stale(app, TODAY)


def test_one_calendar_month_counts_as_stale():
    # February is shorter than 30 days
    today = date(2023, 3, 1)
    app = make_application(application_date=date(2023, 2, 1))
    assert (today - app.application_date).days == 28
    assert is_stale(app, today)


def test_one_month_before_clamps_day():
    assert one_month_before(date(2024, 3, 31)) == date(2024, 2, 29)
    assert one_month_before(date(2024, 1, 15)) == date(2023, 12, 15)


@pytest.mark.parametrize(
    "status",
    [s for s in ApplicationStatus if s is not ApplicationStatus.APPLIED],
)
def test_only_applied_goes_stale(status):
    app = make_application(status=status, application_date=TODAY - timedelta(days=400))
    assert not is_stale(app, TODAY)


def test_find_stale():
    stale = make_application(application_date=TODAY - timedelta(days=45))
    fresh = make_application(application_date=TODAY - timedelta(days=3))
    interviewing = make_application(status="interview_hr", application_date=TODAY - timedelta(days=90))
    assert find_stale([stale, fresh, interviewing], TODAY) == [stale]


@pytest.mark.asyncio
async def test_sweep_rejects_stale_applied(store, seed):
    stale, fresh = seed(
        make_application(application_date=TODAY - timedelta(days=31)),
        make_application(application_date=TODAY - timedelta(days=2)),
    )

    result = await sweep_stale_applications(store, USER_ID, today=TODAY)

    assert result.rejected_ids == [stale.id]
    assert store.applications[stale.id].status is ApplicationStatus.REJECTED
    assert store.applications[stale.id].updated_at > stale.updated_at
    assert store.applications[fresh.id].status is ApplicationStatus.APPLIED


@pytest.mark.asyncio
async def test_sweep_never_touches_other_statuses(store, seed):
    old = TODAY - timedelta(days=365)
    apps = seed(*[make_application(status=s, application_date=old) for s in ApplicationStatus
                  if s is not ApplicationStatus.APPLIED])

    result = await sweep_stale_applications(store, USER_ID, today=TODAY)

    assert result.rejected_ids == []
    for app in apps:
        assert store.applications[app.id] == app


@pytest.mark.asyncio
async def test_sweep_only_touches_owner(store, seed):
    other, = seed(make_application(user_id="someone-else", application_date=TODAY - timedelta(days=60)))

    await sweep_stale_applications(store, USER_ID, today=TODAY)

    assert store.applications[other.id].status is ApplicationStatus.APPLIED


@pytest.mark.asyncio
async def test_sweep_is_idempotent(store, seed):
    seed(
        make_application(application_date=TODAY - timedelta(days=40)),
        make_application(application_date=TODAY - timedelta(days=10)),
        make_application(status="screening", application_date=TODAY - timedelta(days=40)),
    )

    await sweep_stale_applications(store, USER_ID, today=TODAY)
    after_first = {k: v.status for k, v in store.applications.items()}
    second = await sweep_stale_applications(store, USER_ID, today=TODAY)

    assert second.rejected_ids == []
    assert {k: v.status for k, v in store.applications.items()} == after_first


@pytest.mark.asyncio
async def test_sweep_continues_after_failed_update(store, seed):
    first, second = seed(
        make_application(application_date=TODAY - timedelta(days=50)),
        make_application(application_date=TODAY - timedelta(days=40)),
    )
    original_update = store.update_application_status

    async def flaky_update(application_id, status, expected_status=None):
        if application_id == first.id:
            raise ApplicationStoreError("connection reset")
        return await original_update(application_id, status, expected_status)

    store.update_application_status = flaky_update

    result = await sweep_stale_applications(store, USER_ID, today=TODAY)

    assert result.failed_ids == [first.id]
    assert result.rejected_ids == [second.id]
    assert store.applications[first.id].status is ApplicationStatus.APPLIED
    assert store.applications[second.id].status is ApplicationStatus.REJECTED


@pytest.mark.asyncio
async def test_sweep_propagates_list_failure(store):
    async def broken_list(*args, **kwargs):
        raise ApplicationStoreError("store unreachable")

    store.list_applications = broken_list

    with pytest.raises(ApplicationStoreError):
        await sweep_stale_applications(store, USER_ID, today=TODAY)


@pytest.mark.asyncio
async def test_sweep_leaves_records_moved_on_since_listing(store, seed):
    stale, = seed(make_application(application_date=TODAY - timedelta(days=60)))
    original_list = store.list_applications

    async def list_then_user_edits(*args, **kwargs):
        snapshot = await original_list(*args, **kwargs)
        # the user moves the record to an interview between list and write
        store.applications[stale.id] = stale.model_copy(update={"status": ApplicationStatus.INTERVIEW_HR})
        return snapshot

    store.list_applications = list_then_user_edits

    result = await sweep_stale_applications(store, USER_ID, today=TODAY)

    assert result.rejected_ids == []
    assert result.failed_ids == []
    assert result.skipped_ids == [stale.id]
    assert store.applications[stale.id].status is ApplicationStatus.INTERVIEW_HR


@pytest.mark.asyncio
async def test_conditional_status_update(store, seed):
    app, = seed(make_application(status="screening"))

    skipped = await store.update_application_status(
        app.id, ApplicationStatus.REJECTED, expected_status=ApplicationStatus.APPLIED
    )
    assert skipped is None
    assert store.applications[app.id] == app

    updated = await store.update_application_status(
        app.id, ApplicationStatus.REJECTED, expected_status=ApplicationStatus.SCREENING
    )
    assert updated.status is ApplicationStatus.REJECTED
