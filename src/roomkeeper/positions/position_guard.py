"""
Movement enforcement for frozen users and suspicious jumps.

Every movement event of a non-bot user goes through :meth:`PositionGuard.on_move`.
Exactly one of two branches can fire per event:

* the user is frozen and drifted more than :data:`FREEZE_TOLERANCE` on any
  axis: one teleport back to the locked pose;
* the user is not frozen and the move from the cached last position exceeds
  the vertical threshold or the maximum distance: one teleport to the
  reported position, pinning the avatar where the client claims it is.

The cache always ends up holding the reported position.
"""

from __future__ import annotations

from typing import Dict

from roomkeeper.bot.room_bridge import RoomBridge
from roomkeeper.datatypes.room_datatypes import Pose, RoomUser
from roomkeeper.positions.frozen_positions import FrozenPositions
from roomkeeper.util.logger import get_logger

logger = get_logger("position_guard")

FREEZE_TOLERANCE = 0.01


class PositionGuard:
    """
    Args:
        bridge: Room used for corrective teleports.
        frozen: Locked position map.
        y_threshold: Largest vertical change accepted without correction.
        max_distance: Largest straight-line move accepted without correction.
        enabled: Master switch; when False, events only refresh the cache.
    """

    def __init__(
        self,
        bridge: RoomBridge,
        frozen: FrozenPositions,
        y_threshold: float = 2.0,
        max_distance: float = 10.0,
        enabled: bool = True,
    ) -> None:
        self.bridge = bridge
        self.frozen = frozen
        self.y_threshold = y_threshold
        self.max_distance = max_distance
        self.enabled = enabled
        self.last_positions: Dict[str, Pose] = {}

    def remember(self, user_id: str, pose: Pose) -> None:
        """Seed or refresh the cached position (used on join)."""
        self.last_positions[user_id] = pose

    def forget(self, user_id: str) -> None:
        self.last_positions.pop(user_id, None)

    async def on_move(self, user: RoomUser, pose: Pose) -> bool:
        """
        Inspect one movement event.

        Returns:
            bool: True if a corrective teleport was attempted.
        """
        if user.id == self.bridge.bot_user_id:
            return False

        previous = self.last_positions.get(user.id)
        self.last_positions[user.id] = pose
        if not self.enabled:
            return False

        locked = self.frozen.get(user.id)
        if locked is not None:
            if pose.deviates_from(locked, FREEZE_TOLERANCE):
                logger.info("[POSITION GUARD] %s moved while frozen; restoring %s", user.username, locked.describe())
                await self._teleport(user, locked)
                return True
            return False

        if previous is None:
            return False

        if abs(pose.y - previous.y) > self.y_threshold or pose.distance_to(previous) > self.max_distance:
            logger.info(
                "[POSITION GUARD] Large jump for %s: %s -> %s", user.username, previous.describe(), pose.describe()
            )
            await self._teleport(user, pose)
            return True
        return False

    async def _teleport(self, user: RoomUser, pose: Pose) -> None:
        try:
            await self.bridge.teleport(user.id, pose)
        except Exception as exc:
            logger.error("[POSITION GUARD] Teleport failed for %s: %s", user.username, exc)
