"""Persisted idle location of the bot avatar."""

from __future__ import annotations

from roomkeeper.datatypes.room_datatypes import Pose
from roomkeeper.storage.json_store import JsonStore
from roomkeeper.util.logger import get_logger

logger = get_logger("bot_anchor")

ANCHOR_DOCUMENT = "bot_location"


class BotAnchor:
    """
    Where the bot returns to on connect.

    Only the owner ``setbot`` command moves the anchor. A missing or unusable
    document falls back to ``default`` and the fallback is written back.
    """

    def __init__(self, store: JsonStore, default: Pose) -> None:
        self.store = store
        self.default = default
        self.pose: Pose = default

    def load(self) -> Pose:
        data = self.store.load(ANCHOR_DOCUMENT)
        try:
            self.pose = Pose.from_dict(data)
        except (KeyError, TypeError, ValueError):
            if data:
                logger.warning("[BOT ANCHOR] Stored bot location is invalid; using default")
            self.pose = self.default
            self.store.save(ANCHOR_DOCUMENT, self.pose.to_dict())
        logger.info("[BOT ANCHOR] Bot anchor at %s (%s)", self.pose.describe(), self.pose.facing)
        return self.pose

    def set(self, pose: Pose) -> bool:
        """Move the anchor and persist it. Returns False if the write failed."""
        self.pose = pose
        return self.store.save(ANCHOR_DOCUMENT, pose.to_dict())
