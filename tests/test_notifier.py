# tests/test_notifier.py

from __future__ import annotations

import asyncio

import pytest

from taskboard.tasks.notifier import ChangeNotifier, SubscriptionClosed


@pytest.mark.asyncio
async def test_every_published_value_is_delivered_in_order() -> None:
    notifier: ChangeNotifier[int] = ChangeNotifier()
    sub = notifier.subscribe(initial=0)

    for i in range(1, 4):
        assert notifier.publish(i) == 1

    assert [await sub.get(timeout=1) for _ in range(4)] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_close_is_idempotent_and_isolated() -> None:
    notifier: ChangeNotifier[str] = ChangeNotifier()
    a = notifier.subscribe()
    b = notifier.subscribe()
    closed_calls: list[str] = []
    a.add_close_callback(lambda: closed_calls.append("a"))

    a.close()
    a.close()

    assert closed_calls == ["a"]
    assert a.closed
    assert notifier.subscriber_count == 1

    notifier.publish("x")
    assert await b.get(timeout=1) == "x"
    with pytest.raises(SubscriptionClosed):
        await a.get(timeout=1)


@pytest.mark.asyncio
async def test_close_wakes_pending_iteration() -> None:
    notifier: ChangeNotifier[int] = ChangeNotifier()
    sub = notifier.subscribe()
    received: list[int] = []

    async def consume() -> None:
        async for value in sub:
            received.append(value)

    consumer = asyncio.create_task(consume())
    notifier.publish(1)
    await asyncio.sleep(0.01)
    notifier.close_all()
    await asyncio.wait_for(consumer, 1)

    assert received == [1]
    assert notifier.subscriber_count == 0


@pytest.mark.asyncio
async def test_map_shares_the_underlying_queue() -> None:
    notifier: ChangeNotifier[int] = ChangeNotifier()
    raw = notifier.subscribe(initial=2)
    doubled = raw.map(lambda v: v * 2)

    assert await doubled.get(timeout=1) == 4

    doubled.close()
    assert raw.closed
    assert notifier.subscriber_count == 0


@pytest.mark.asyncio
async def test_async_with_releases_subscription() -> None:
    notifier: ChangeNotifier[int] = ChangeNotifier()
    async with notifier.subscribe() as sub:
        assert notifier.subscriber_count == 1
    assert sub.closed
    assert notifier.subscriber_count == 0


def test_close_callback_runs_immediately_when_already_closed() -> None:
    notifier: ChangeNotifier[int] = ChangeNotifier()
    sub = notifier.subscribe()
    sub.close()
    calls: list[int] = []
    sub.add_close_callback(lambda: calls.append(1))
    assert calls == [1]
