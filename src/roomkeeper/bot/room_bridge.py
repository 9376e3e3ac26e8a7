"""
Action surface of the room the bot is connected to.

:class:`RoomBridge` is everything the command engine may ask of the room:
messaging, movement, emotes, moderation verbs, outfit and wallet calls, and
roster lookups. Implementations raise :class:`RoomActionError` when the
platform rejects an action; callers treat that as terminal for the one
operation (no retries).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List

from roomkeeper.datatypes.room_datatypes import OutfitItem, Pose, RoomSnapshot, RoomUser


class RoomActionError(Exception):
    """An action sent to the room failed or was rejected by the platform."""


class RoomBridge(ABC):
    """
    Abstract room connection.

    Attributes:
        bot_user_id (str): Id of the bot's own avatar; empty until connected.
    """

    bot_user_id: str = ""

    # ========== Messaging ==========

    @abstractmethod
    async def send_public(self, text: str) -> None: ...

    @abstractmethod
    async def send_direct(self, conversation_id: str, text: str) -> None: ...

    @abstractmethod
    async def send_whisper(self, user_id: str, text: str) -> None: ...

    # ========== Movement and emotes ==========

    @abstractmethod
    async def teleport(self, user_id: str, pose: Pose) -> None: ...

    @abstractmethod
    async def walk(self, pose: Pose) -> None: ...

    @abstractmethod
    async def emote(self, user_id: str, emote_id: str) -> None: ...

    # ========== Moderation ==========

    @abstractmethod
    async def kick(self, user_id: str) -> None: ...

    @abstractmethod
    async def ban(self, user_id: str, duration_seconds: int) -> None: ...

    @abstractmethod
    async def mute(self, user_id: str, duration_seconds: int) -> None: ...

    # ========== Outfit and wallet ==========

    @abstractmethod
    async def get_outfit(self, user_id: str) -> List[OutfitItem]: ...

    @abstractmethod
    async def change_outfit(self, items: List[OutfitItem]) -> None: ...

    @abstractmethod
    async def change_outfit_color(self, part: str, palette_index: int) -> None: ...

    @abstractmethod
    async def purchase(self, kind: str, amount: int) -> str:
        """Buy ``kind`` (``boost`` or ``voice``) from the bot wallet; returns the platform result.

        ``amount`` counts room boosts; voice time is a single purchase and ignores it.
        """

    # ========== Invites ==========

    @abstractmethod
    async def direct_conversations(self) -> Dict[str, str]:
        """Map of user id to an existing one-on-one conversation id."""

    @abstractmethod
    async def send_invite(self, conversation_id: str) -> None: ...

    # ========== Roster ==========

    @abstractmethod
    async def room_snapshot(self) -> RoomSnapshot: ...

    async def find_user(self, username: str) -> RoomUser | None:
        """Case-insensitive username lookup in the current roster."""
        return (await self.room_snapshot()).find_by_username(username)

    async def find_username(self, user_id: str) -> str | None:
        entry = (await self.room_snapshot()).find_by_id(user_id)
        return entry[0].username if entry else None

    async def get_position(self, user_id: str) -> Pose | None:
        """Last reported pose for the user; None if absent or seated on an anchor."""
        entry = (await self.room_snapshot()).find_by_id(user_id)
        return entry[1] if entry else None

    async def is_present(self, user_id: str) -> bool:
        return (await self.room_snapshot()).find_by_id(user_id) is not None
