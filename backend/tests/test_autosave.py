import asyncio

from services.autosave import AutosaveScheduler


def test_mutations_within_window_write_once_with_latest():
    saved = []

    async def save(payload):
        saved.append(payload)
        return payload

    async def run():
        scheduler = AutosaveScheduler(save, debounce_s=0.05)
        scheduler.schedule("first")
        await asyncio.sleep(0.01)
        scheduler.schedule("second")
        await asyncio.sleep(0.2)
        await scheduler.wait_idle()
        return scheduler.save_count

    assert asyncio.run(run()) == 1
    assert saved == ["second"]


def test_at_most_one_save_in_flight():
    saved = []
    active = 0
    peak = 0

    async def save(payload):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.2)
        active -= 1
        saved.append(payload)
        return payload

    async def run():
        scheduler = AutosaveScheduler(save, debounce_s=0.01)
        scheduler.schedule(1)
        await asyncio.sleep(0.05)
        assert scheduler.in_flight
        scheduler.schedule(2)
        await asyncio.sleep(0.05)
        scheduler.schedule(3)
        await asyncio.sleep(0.5)
        await scheduler.wait_idle()

    asyncio.run(run())
    assert peak == 1
    assert saved == [1, 3]


def test_failed_save_is_retried_and_warns():
    calls = []
    failures = []
    saved = []

    async def save(payload):
        calls.append(payload)
        if len(calls) <= 3:
            raise RuntimeError("store unavailable")
        return payload

    async def run():
        scheduler = AutosaveScheduler(
            save, debounce_s=0.01,
            on_saved=saved.append,
            on_error=lambda e, n: failures.append(n),
        )
        scheduler.schedule("snapshot")
        await asyncio.sleep(0.3)
        await scheduler.wait_idle()
        return scheduler.consecutive_failures

    assert asyncio.run(run()) == 0
    assert calls == ["snapshot"] * 4
    assert failures == [1, 2, 3]
    assert saved == ["snapshot"]


def test_cancel_drops_pending_payload():
    saved = []

    async def save(payload):
        saved.append(payload)

    async def run():
        scheduler = AutosaveScheduler(save, debounce_s=0.05)
        scheduler.schedule("draft")
        scheduler.cancel()
        await asyncio.sleep(0.15)
        return scheduler.has_pending

    assert asyncio.run(run()) is False
    assert saved == []


def test_cancel_lets_in_flight_save_finish():
    saved = []

    async def save(payload):
        await asyncio.sleep(0.1)
        saved.append(payload)

    async def run():
        scheduler = AutosaveScheduler(save, debounce_s=0.01)
        scheduler.schedule("draft")
        await asyncio.sleep(0.05)
        scheduler.cancel()
        await scheduler.wait_idle()

    asyncio.run(run())
    assert saved == ["draft"]


def test_flush_skips_the_debounce():
    async def save(payload):
        return payload.upper()

    async def run():
        scheduler = AutosaveScheduler(save, debounce_s=60)
        scheduler.schedule("tab change")
        result = await scheduler.flush()
        return result, await scheduler.flush()

    assert asyncio.run(run()) == ("TAB CHANGE", None)
