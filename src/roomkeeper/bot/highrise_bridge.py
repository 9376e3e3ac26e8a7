"""
:class:`RoomBridge` implementation over the Highrise bot SDK.

The SDK reports many failures by returning a ``highrise.models.Error`` instead
of raising. Every call here funnels through :meth:`HighriseRoomBridge.call`,
which turns both styles of failure into :class:`RoomActionError`.
"""

from __future__ import annotations

from typing import Any, Awaitable, Dict, List

from highrise import BaseBot
from highrise.models import AnchorPosition, Error, Item, Position

from roomkeeper.bot.room_bridge import RoomActionError, RoomBridge
from roomkeeper.datatypes.room_datatypes import OutfitItem, Pose, RoomSnapshot, RoomUser
from roomkeeper.util.logger import get_logger

logger = get_logger("highrise_bridge")


def to_position(pose: Pose) -> Position:
    return Position(pose.x, pose.y, pose.z, pose.facing)


def to_pose(position: Any) -> Pose | None:
    """Convert an SDK position; avatars seated on an anchor have no pose."""
    if isinstance(position, AnchorPosition) or position is None:
        return None
    return Pose(float(position.x), float(position.y), float(position.z), str(position.facing))


def to_outfit_item(item: Item) -> OutfitItem:
    return OutfitItem(
        type=item.type,
        id=item.id,
        amount=int(item.amount or 1),
        account_bound=bool(item.account_bound),
        active_palette=int(item.active_palette or 0),
    )


def to_sdk_item(item: OutfitItem) -> Item:
    return Item(
        type=item.type,
        amount=item.amount,
        id=item.id,
        account_bound=item.account_bound,
        active_palette=item.active_palette,
    )


class HighriseRoomBridge(RoomBridge):
    """
    Args:
        bot: The SDK bot; its ``highrise`` client is looked up on every call
            because the SDK only attaches it once the connection is up.
        room_id: Room the bot runs in, used for invites.
    """

    def __init__(self, bot: BaseBot, room_id: str) -> None:
        self.bot = bot
        self.room_id = room_id
        self.bot_user_id = ""

    @property
    def highrise(self):
        return self.bot.highrise

    async def call(self, action: str, awaitable: Awaitable[Any]) -> Any:
        try:
            result = await awaitable
        except RoomActionError:
            raise
        except Exception as exc:
            raise RoomActionError(f"{action} failed: {exc}") from exc
        if isinstance(result, Error):
            raise RoomActionError(f"{action} failed: {result.message}")
        return result

    # ========== Messaging ==========

    async def send_public(self, text: str) -> None:
        await self.call("chat", self.highrise.chat(text))

    async def send_direct(self, conversation_id: str, text: str) -> None:
        await self.call("send_message", self.highrise.send_message(conversation_id, text))

    async def send_whisper(self, user_id: str, text: str) -> None:
        await self.call("send_whisper", self.highrise.send_whisper(user_id, text))

    async def latest_message(self, conversation_id: str) -> str:
        """Text of the newest message in a conversation; DM events only carry ids."""
        response = await self.call("get_messages", self.highrise.get_messages(conversation_id))
        messages = getattr(response, "messages", None) or []
        return messages[0].content if messages else ""

    # ========== Movement and emotes ==========

    async def teleport(self, user_id: str, pose: Pose) -> None:
        await self.call("teleport", self.highrise.teleport(user_id, to_position(pose)))

    async def walk(self, pose: Pose) -> None:
        await self.call("walk_to", self.highrise.walk_to(to_position(pose)))

    async def emote(self, user_id: str, emote_id: str) -> None:
        await self.call("send_emote", self.highrise.send_emote(emote_id, user_id))

    # ========== Moderation ==========

    async def kick(self, user_id: str) -> None:
        await self.call("kick", self.highrise.moderate_room(user_id, "kick"))

    async def ban(self, user_id: str, duration_seconds: int) -> None:
        await self.call("ban", self.highrise.moderate_room(user_id, "ban", duration_seconds))

    async def mute(self, user_id: str, duration_seconds: int) -> None:
        await self.call("mute", self.highrise.moderate_room(user_id, "mute", duration_seconds))

    # ========== Outfit and wallet ==========

    async def get_outfit(self, user_id: str) -> List[OutfitItem]:
        response = await self.call("get_user_outfit", self.highrise.get_user_outfit(user_id))
        return [to_outfit_item(item) for item in response.outfit if item is not None]

    async def change_outfit(self, items: List[OutfitItem]) -> None:
        await self.call("set_outfit", self.highrise.set_outfit([to_sdk_item(item) for item in items]))

    async def change_outfit_color(self, part: str, palette_index: int) -> None:
        """Recolor every worn item of one body part (``hair`` covers front and back)."""
        outfit = await self.get_outfit(self.bot_user_id)
        matched = False
        for item in outfit:
            if item.id.split("-")[0].lower().startswith(part):
                item.active_palette = palette_index
                matched = True
        if not matched:
            raise RoomActionError(f"bot is not wearing any '{part}' item")
        await self.change_outfit(outfit)

    async def purchase(self, kind: str, amount: int) -> str:
        if kind == "boost":
            response = await self.call(
                "buy_room_boost", self.highrise.buy_room_boost(payment="bot_wallet_only", amount=amount)
            )
        elif kind == "voice":
            response = await self.call("buy_voice_time", self.highrise.buy_voice_time(payment="bot_wallet_only"))
        else:
            raise RoomActionError(f"unknown purchase kind '{kind}'")
        return str(getattr(response, "result", response))

    # ========== Invites ==========

    async def direct_conversations(self) -> Dict[str, str]:
        response = await self.call("get_conversations", self.highrise.get_conversations())
        conversations: Dict[str, str] = {}
        for conversation in getattr(response, "conversations", []) or []:
            members = list(getattr(conversation, "member_ids", None) or [])
            if len(members) != 2:
                continue
            other = next((member for member in members if member != self.bot_user_id), None)
            if other:
                conversations[other] = conversation.id
        return conversations

    async def send_invite(self, conversation_id: str) -> None:
        await self.call(
            "send_invite",
            self.highrise.send_message(conversation_id, "", message_type="invite", room_id=self.room_id),
        )

    # ========== Roster ==========

    async def room_snapshot(self) -> RoomSnapshot:
        response = await self.call("get_room_users", self.highrise.get_room_users())
        return RoomSnapshot(
            players=[(RoomUser(user.id, user.username), to_pose(position)) for user, position in response.content]
        )
