from datetime import UTC, datetime

import pytest

from app.features.privacy_reminder.jobs import PrivacyReminderJob, next_fire_time
from tests.fakes import make_record


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2024, 3, 10, 2, 59, 59, tzinfo=UTC), datetime(2024, 3, 10, 3, 0, tzinfo=UTC)),
        (datetime(2024, 3, 10, 3, 0, 0, tzinfo=UTC), datetime(2024, 3, 10, 6, 0, tzinfo=UTC)),
        (datetime(2024, 3, 10, 4, 30, tzinfo=UTC), datetime(2024, 3, 10, 6, 0, tzinfo=UTC)),
        (datetime(2024, 3, 10, 22, 15, tzinfo=UTC), datetime(2024, 3, 11, 0, 0, tzinfo=UTC)),
        (datetime(2024, 2, 29, 23, 0, tzinfo=UTC), datetime(2024, 3, 1, 0, 0, tzinfo=UTC)),
    ],
)
def test_next_fire_time_every_three_hours(now, expected):
    assert next_fire_time(now) == expected


def test_next_fire_time_custom_interval():
    now = datetime(2024, 3, 10, 13, 5, tzinfo=UTC)

    assert next_fire_time(now, interval_hours=6) == datetime(2024, 3, 10, 18, 0, tzinfo=UTC)
    assert next_fire_time(now, interval_hours=1) == datetime(2024, 3, 10, 14, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_scheduler_waits_for_boundary_and_survives_failures(store, oracle, notifier):
    job = PrivacyReminderJob(
        repository=store,
        verification_service=oracle,
        notification_service=notifier,
        clock=lambda: datetime(2024, 3, 10, 4, 30, tzinfo=UTC),
    )
    store.fail_list = True
    delays = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    await job.run_forever(max_cycles=2, sleep=fake_sleep)

    # both firings ran even though each cycle failed
    assert delays == [5400.0, 5400.0]
    assert job.is_running is False


@pytest.mark.asyncio
async def test_scheduler_runs_cycle_after_sleep(reminder_job, store, oracle, notifier):
    store.add(make_record("m1"))
    oracle.answers = {"uid-m1": True}

    async def no_sleep(seconds: float) -> None:
        return None

    await reminder_job.run_forever(max_cycles=1, sleep=no_sleep)

    assert store.records["m1"].verified_date is not None
    assert reminder_job.last_run_time is not None
