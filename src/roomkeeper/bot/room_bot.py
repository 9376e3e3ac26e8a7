"""
Highrise event hooks.

:class:`RoomBot` is the SDK-facing shell: it converts SDK models to the
package's own types and hands each event to the router, the position guard or
the greeter. Handlers never let an exception escape back into the SDK.
"""

from __future__ import annotations

import asyncio

from highrise import BaseBot
from highrise.models import AnchorPosition, Position, SessionMetadata, User

from roomkeeper.bot.bot_state import AppState, build_app_state
from roomkeeper.bot.command_router import CommandRouter
from roomkeeper.bot.highrise_bridge import HighriseRoomBridge, to_pose
from roomkeeper.configuration.app_configuration import AppConfig
from roomkeeper.datatypes.room_datatypes import RoomUser
from roomkeeper.util.logger import get_logger, handle_async_exception

logger = get_logger("room_bot")


def to_room_user(user: User) -> RoomUser:
    return RoomUser(user.id, user.username)


class RoomBot(BaseBot):
    def __init__(self, config: AppConfig, room_id: str) -> None:
        super().__init__()
        self.bridge = HighriseRoomBridge(self, room_id)
        self.state: AppState = build_app_state(config, self.bridge)
        self.state.load()
        self.router = CommandRouter(self.state)

    async def on_start(self, session_metadata: SessionMetadata) -> None:
        self.bridge.bot_user_id = session_metadata.user_id
        asyncio.get_running_loop().set_exception_handler(handle_async_exception)
        logger.info(
            "[ROOM BOT] Connected to %s as %s",
            getattr(session_metadata.room_info, "room_name", "room"),
            session_metadata.user_id,
        )

        anchor = self.state.anchor.pose
        try:
            await self.bridge.teleport(self.bridge.bot_user_id, anchor)
            logger.info("[ROOM BOT] Bot moved to saved location %s", anchor.describe())
        except Exception as exc:
            logger.error("[ROOM BOT] Failed to move bot to saved location: %s", exc)

        if self.state.config.feature_enabled("auto_emote"):
            self.state.auto_emote.ensure_runner()

    async def on_user_join(self, user: User, position: Position | AnchorPosition) -> None:
        room_user = to_room_user(user)
        logger.info("[ROOM BOT] %s (%s) joined", user.username, user.id)
        if user.id == self.bridge.bot_user_id:
            return
        pose = to_pose(position)
        if pose is not None:
            self.state.guard.remember(user.id, pose)
        greeting = self.state.greeter.on_join(room_user)
        if greeting:
            await self.state.responder.say(greeting)

    async def on_user_leave(self, user: User) -> None:
        logger.info("[ROOM BOT] %s (%s) left", user.username, user.id)
        if self.state.emote_loops.stop(user.id):
            logger.debug("[ROOM BOT] Stopped emote loop for %s", user.username)
        self.state.guard.forget(user.id)

    async def on_chat(self, user: User, message: str) -> None:
        await self.router.handle_public(to_room_user(user), message)

    async def on_whisper(self, user: User, message: str) -> None:
        await self.router.handle_whisper(to_room_user(user), message)

    async def on_message(self, user_id: str, conversation_id: str, is_new_conversation: bool) -> None:
        if user_id == self.bridge.bot_user_id:
            return
        try:
            message = await self.bridge.latest_message(conversation_id)
        except Exception as exc:
            logger.error("[ROOM BOT] Could not fetch DM %s: %s", conversation_id, exc)
            return
        await self.router.handle_direct(user_id, conversation_id, message)

    async def on_user_move(self, user: User, pos: Position | AnchorPosition) -> None:
        pose = to_pose(pos)
        if pose is None:
            return
        try:
            await self.state.guard.on_move(to_room_user(user), pose)
        except Exception:
            logger.exception("[ROOM BOT] Position guard failed for %s", user.username)

    async def on_emote(self, user: User, emote_id: str, receiver: User | None) -> None:
        logger.debug(
            "[ROOM BOT] %s performed %s on %s", user.username, emote_id, receiver.username if receiver else "nobody"
        )

    async def on_reaction(self, user: User, reaction: str, receiver: User) -> None:
        logger.debug("[ROOM BOT] %s reacted '%s' to %s", user.username, reaction, receiver.username)

    async def on_tip(self, sender: User, receiver: User, tip) -> None:
        logger.info(
            "[ROOM BOT] %s tipped %s %s %s",
            sender.username, receiver.username, getattr(tip, "amount", "?"), getattr(tip, "type", ""),
        )

    async def on_moderate(
        self, moderator_id: str, target_user_id: str, moderation_type: str, duration: int | None
    ) -> None:
        logger.info(
            "[ROOM BOT] Moderation by %s: %s was %s for %s seconds",
            moderator_id, target_user_id, moderation_type, duration or "N/A",
        )

    async def on_voice_change(self, users, seconds_left: int) -> None:
        logger.debug("[ROOM BOT] Voice chat update, %s seconds left", seconds_left)
