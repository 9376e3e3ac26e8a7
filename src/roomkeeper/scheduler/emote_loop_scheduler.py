"""
Per-user repeating emote loops.

Each loop is an :class:`asyncio.Task` keyed by the user it animates. A user
can have at most one loop: starting another cancels the previous task first.
A loop ends on an explicit stop, when the user leaves the room, or on the
first failed emote call; it never retries.
"""
import asyncio
from dataclasses import dataclass
from typing import Dict

from roomkeeper.bot.room_bridge import RoomBridge
from roomkeeper.datatypes.room_datatypes import EmoteDefinition, RoomUser
from roomkeeper.util.logger import get_logger

logger = get_logger("emote_loop_scheduler")


@dataclass
class EmoteLoop:
    """
    Registry entry for one running loop.

    Attributes:
        user (RoomUser): The avatar performing the emote.
        emote (EmoteDefinition): Emote repeated on each tick.
        task (asyncio.Task): The task running the loop.
    """
    user: RoomUser
    emote: EmoteDefinition
    task: "asyncio.Task[None]"


class EmoteLoopScheduler:
    """
    Registry of running emote loops.

    Attributes:
        bridge (RoomBridge): Room used to check presence and send emotes.
        loops (Dict[str, EmoteLoop]): Active loops keyed by user id.
    """

    def __init__(self, bridge: RoomBridge) -> None:
        self.bridge = bridge
        self.loops: Dict[str, EmoteLoop] = {}

    @property
    def active_count(self) -> int:
        return len(self.loops)

    def is_active(self, user_id: str) -> bool:
        return user_id in self.loops

    def current(self, user_id: str) -> EmoteLoop | None:
        return self.loops.get(user_id)

    def start(self, user: RoomUser, emote: EmoteDefinition) -> bool:
        """
        Start looping ``emote`` for ``user``, replacing any running loop.

        Must be called from a running event loop. The old task is cancelled
        and the registry entry swapped before control returns to the loop, so
        two loops for one user never coexist.

        Returns:
            bool: True if an earlier loop was cancelled.
        """
        replaced = self._cancel(user.id)
        task = asyncio.get_running_loop().create_task(
            self.run(user, emote), name=f"roomkeeper-emote-loop-{user.id}"
        )
        self.loops[user.id] = EmoteLoop(user=user, emote=emote, task=task)
        logger.info("[EMOTE LOOP] Started '%s' for %s", emote.name, user.username)
        return replaced

    def stop(self, user_id: str) -> bool:
        """
        Cancel the loop for ``user_id``.

        Returns:
            bool: False if the user had no active loop.
        """
        stopped = self._cancel(user_id)
        if stopped:
            logger.info("[EMOTE LOOP] Stopped loop for %s", user_id)
        return stopped

    async def shutdown(self) -> None:
        """Cancel every loop and wait for the tasks to finish."""
        tasks = [entry.task for entry in self.loops.values()]
        self.loops.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _cancel(self, user_id: str) -> bool:
        entry = self.loops.pop(user_id, None)
        if entry is None:
            return False
        entry.task.cancel()
        return True

    def _release(self, user_id: str) -> None:
        """Drop the registry entry only if it still belongs to the calling task."""
        entry = self.loops.get(user_id)
        if entry is not None and entry.task is asyncio.current_task():
            del self.loops[user_id]

    async def run(self, user: RoomUser, emote: EmoteDefinition) -> None:
        """
        Loop body: check presence, emote, sleep, repeat.

        Presence loss and emote failures end the loop and release its entry.
        A notice is posted in public chat when an emote call fails.
        """
        try:
            while True:
                if not await self.bridge.is_present(user.id):
                    logger.debug("[EMOTE LOOP] %s left, stopping '%s'", user.username, emote.name)
                    self._release(user.id)
                    return

                try:
                    await self.bridge.emote(user.id, emote.emote_id)
                except Exception as exc:
                    logger.error(
                        "[EMOTE LOOP] Error performing %s for %s: %s", emote.name, user.username, exc
                    )
                    self._release(user.id)
                    await self._notify_failure(user)
                    return

                await asyncio.sleep(emote.interval_seconds)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("[EMOTE LOOP] Loop for %s aborted: %s", user.username, exc)
            self._release(user.id)

    async def _notify_failure(self, user: RoomUser) -> None:
        try:
            await self.bridge.send_public(f"{user.mention} Stopped emote loop due to an error or user-leave.")
        except Exception as exc:
            logger.warning("[EMOTE LOOP] Could not notify %s: %s", user.username, exc)
