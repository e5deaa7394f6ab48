import asyncio

from game.timer import GuessTimeout
from voice.handler import PlaybackSubscription


async def test_timeout_fires_once():
    calls = []

    async def callback():
        calls.append(1)

    timeout = GuessTimeout()
    timeout.start(0.01, callback)
    await asyncio.sleep(0.05)
    assert calls == [1]
    assert not timeout.armed


async def test_cancelled_timeout_never_fires():
    calls = []

    async def callback():
        calls.append(1)

    timeout = GuessTimeout()
    timeout.start(0.01, callback)
    timeout.cancel()
    await asyncio.sleep(0.05)
    assert calls == []


async def test_restarting_replaces_previous_timer():
    calls = []

    async def first():
        calls.append("first")

    async def second():
        calls.append("second")

    timeout = GuessTimeout()
    timeout.start(0.01, first)
    timeout.start(0.01, second)
    await asyncio.sleep(0.05)
    assert calls == ["second"]


async def test_callback_can_cancel_its_own_timer():
    calls = []
    timeout = GuessTimeout()

    async def callback():
        timeout.cancel()
        await asyncio.sleep(0)
        calls.append("finished")

    timeout.start(0, callback)
    await asyncio.sleep(0.05)
    assert calls == ["finished"]


async def test_subscription_dispatches_once():
    errors = []

    async def callback(error):
        errors.append(error)

    subscription = PlaybackSubscription(callback)
    await subscription.dispatch(None)
    await subscription.dispatch(RuntimeError("late"))
    assert errors == [None]
    assert not subscription.active


async def test_closed_subscription_is_silent():
    errors = []

    async def callback(error):
        errors.append(error)

    subscription = PlaybackSubscription(callback)
    subscription.close()
    await subscription.dispatch(None)
    assert errors == []
