import pytest

from service_manager.client import ApiError, StoreRefresher


class FakeStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = 0

    async def refresh(self):
        self.calls += 1
        if self.fail:
            raise ApiError(500, "boom")


@pytest.mark.asyncio
async def test_refresh_all_continues_past_failures():
    refresher = StoreRefresher()
    good, bad = FakeStore(), FakeStore(fail=True)
    refresher.register(bad)
    refresher.register(good)

    refreshed = await refresher.refresh_all()
    assert refreshed == 1
    assert good.calls == 1
    assert bad.calls == 1


@pytest.mark.asyncio
async def test_start_schedules_interval_job():
    refresher = StoreRefresher(interval_seconds=30)
    refresher.start()
    try:
        assert refresher.running
        job = refresher.scheduler.get_job("refresh_stores")
        assert job is not None
        assert job.trigger.interval.total_seconds() == 30
        # starting twice is a no-op
        refresher.start()
    finally:
        refresher.stop()
    assert not refresher.running
