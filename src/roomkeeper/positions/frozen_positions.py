"""Locked positions of frozen users, persisted as ``{"locked": {id: pose}}``."""

from __future__ import annotations

from typing import Dict

from roomkeeper.datatypes.room_datatypes import Pose
from roomkeeper.storage.json_store import JsonStore
from roomkeeper.util.logger import get_logger

logger = get_logger("frozen_positions")

FROZEN_DOCUMENT = "frozen_users"


class FrozenPositions:
    """User id to locked pose. Entries never expire; only :meth:`unfreeze` removes them."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store
        self.locked: Dict[str, Pose] = {}

    def load(self) -> None:
        data = self.store.load(FROZEN_DOCUMENT)
        raw_locked = data.get("locked")
        self.locked = {}
        if isinstance(raw_locked, dict):
            for user_id, raw in raw_locked.items():
                try:
                    self.locked[str(user_id)] = Pose.from_dict(raw)
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning("[FROZEN] Dropping malformed lock for %s: %s", user_id, exc)
        else:
            self.save()
        logger.info("[FROZEN] Loaded %d frozen users", len(self.locked))

    def save(self) -> None:
        self.store.save(FROZEN_DOCUMENT, {"locked": {uid: p.to_dict() for uid, p in self.locked.items()}})

    def freeze(self, user_id: str, pose: Pose) -> None:
        self.locked[user_id] = pose
        self.save()
        logger.info("[FROZEN] %s locked at %s", user_id, pose.describe())

    def unfreeze(self, user_id: str) -> bool:
        if self.locked.pop(user_id, None) is None:
            return False
        self.save()
        logger.info("[FROZEN] %s unlocked", user_id)
        return True

    def get(self, user_id: str) -> Pose | None:
        return self.locked.get(user_id)

    def is_frozen(self, user_id: str) -> bool:
        return user_id in self.locked
