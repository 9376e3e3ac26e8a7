from unittest.mock import AsyncMock, patch

import pytest

from roomkeeper.datatypes.room_datatypes import EmoteDefinition
from roomkeeper.scheduler.auto_emote_scheduler import AutoEmoteScheduler

EMOTES = [
    EmoteDefinition("wave", "emote-wave"),
    EmoteDefinition("kiss", "emote-kiss"),
    EmoteDefinition("bow", "emote-bow"),
]


def first_n(pool, count):
    return list(pool)[:count]


@pytest.mark.asyncio
async def test_batch_emotes_bot_with_gaps(bridge) -> None:
    scheduler = AutoEmoteScheduler(bridge, EMOTES, emote_count=2, sample=first_n)

    with patch("roomkeeper.scheduler.auto_emote_scheduler.asyncio.sleep", new=AsyncMock()) as sleep:
        performed = await scheduler.perform_batch()

    assert performed == 2
    assert bridge.emotes == [(bridge.bot_user_id, "emote-wave"), (bridge.bot_user_id, "emote-kiss")]
    sleep.assert_awaited_once_with(3.0)


@pytest.mark.asyncio
async def test_batch_continues_after_failure(bridge) -> None:
    bridge.failing.add("emote")
    scheduler = AutoEmoteScheduler(bridge, EMOTES, emote_count=5, sample=first_n)

    with patch("roomkeeper.scheduler.auto_emote_scheduler.asyncio.sleep", new=AsyncMock()) as sleep:
        performed = await scheduler.perform_batch()

    assert performed == 0
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_batch_skipped_before_connect(bridge) -> None:
    bridge.bot_user_id = ""
    scheduler = AutoEmoteScheduler(bridge, EMOTES, sample=first_n)

    assert await scheduler.perform_batch() == 0
    assert bridge.emotes == []


@pytest.mark.asyncio
async def test_runner_lifecycle(bridge) -> None:
    scheduler = AutoEmoteScheduler(bridge, EMOTES, interval_seconds=3600)

    scheduler.ensure_runner()
    task = scheduler.runner_task
    scheduler.ensure_runner()

    assert scheduler.runner_task is task
    await scheduler.shutdown()
    assert task.cancelled()
    assert scheduler.runner_task is None


@pytest.mark.asyncio
async def test_runner_not_started_without_emotes(bridge) -> None:
    scheduler = AutoEmoteScheduler(bridge, [])

    scheduler.ensure_runner()

    assert scheduler.runner_task is None
