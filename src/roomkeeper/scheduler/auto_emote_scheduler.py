"""
Periodic random emotes performed by the bot's own avatar.

Every ``interval_seconds`` a random sample of ``emote_count`` known emotes is
played back to back with a short gap. A failed emote is logged and the batch
continues; the runner only stops on :meth:`AutoEmoteScheduler.shutdown`.
"""
import asyncio
import random
from typing import Callable, List, Sequence

from roomkeeper.bot.room_bridge import RoomBridge
from roomkeeper.datatypes.room_datatypes import EmoteDefinition
from roomkeeper.util.logger import get_logger

logger = get_logger("auto_emote_scheduler")

EMOTE_GAP_SECONDS = 3.0


class AutoEmoteScheduler:
    """
    Attributes:
        bridge (RoomBridge): Room connection; the bot id is read from it per batch.
        emotes (List[EmoteDefinition]): Pool to sample from.
        interval_seconds (float): Delay between batches.
        emote_count (int): Emotes per batch.
        runner_task (asyncio.Task | None): Background task, if started.
    """

    def __init__(
        self,
        bridge: RoomBridge,
        emotes: Sequence[EmoteDefinition],
        interval_seconds: float = 60.0,
        emote_count: int = 3,
        sample: Callable[[Sequence[EmoteDefinition], int], List[EmoteDefinition]] = random.sample,
    ) -> None:
        self.bridge = bridge
        self.emotes: List[EmoteDefinition] = list(emotes)
        self.interval_seconds = interval_seconds
        self.emote_count = emote_count
        self.sample = sample
        self.runner_task: asyncio.Task[None] | None = None

    def ensure_runner(self) -> None:
        """Create the background runner task if it's not already active."""
        if not self.emotes:
            logger.info("[AUTO EMOTE] No emotes configured; auto-emote not started")
            return
        if self.runner_task is None or self.runner_task.done():
            loop = asyncio.get_running_loop()
            self.runner_task = loop.create_task(self.run(), name="roomkeeper-auto-emote")
            logger.info("[AUTO EMOTE] Enabled, every %s seconds", self.interval_seconds)

    async def shutdown(self) -> None:
        if self.runner_task:
            self.runner_task.cancel()
            try:
                await self.runner_task
            except asyncio.CancelledError:
                pass
            finally:
                self.runner_task = None

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.perform_batch()

    async def perform_batch(self) -> int:
        """Play one random batch. Returns the number of emotes that succeeded."""
        bot_id = self.bridge.bot_user_id
        if not bot_id:
            return 0

        chosen = self.sample(self.emotes, min(self.emote_count, len(self.emotes)))
        performed = 0
        for index, emote in enumerate(chosen):
            try:
                await self.bridge.emote(bot_id, emote.emote_id)
                performed += 1
                logger.debug("[AUTO EMOTE] Bot performed %s", emote.emote_id)
            except Exception as exc:
                logger.error("[AUTO EMOTE] Failed to perform %s: %s", emote.emote_id, exc)
            if index < len(chosen) - 1:
                await asyncio.sleep(EMOTE_GAP_SECONDS)
        return performed
