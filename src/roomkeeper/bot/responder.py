"""
Channel-aware replies.

Public replies are addressed with the user's mention and split on line
boundaries to fit the public message limit. DM and whisper replies are
cropped to their channel limit. Send failures are logged and reported as
False; a failed reply never aborts the command that produced it.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Mapping

from roomkeeper.bot.room_bridge import RoomBridge
from roomkeeper.datatypes.room_datatypes import Channel, RoomUser
from roomkeeper.util.format_utils import chunk_lines, crop_message, wrap_words
from roomkeeper.util.logger import get_logger

logger = get_logger("responder")


class Responder:
    def __init__(self, bridge: RoomBridge, limits: Mapping[str, int]) -> None:
        self.bridge = bridge
        self.limits = dict(limits)

    def limit_for(self, channel: Channel) -> int:
        return int(self.limits.get(channel.value, 0))

    async def reply(self, user: RoomUser, text: str, channel: Channel, conversation_id: str | None = None) -> bool:
        if channel is Channel.PUBLIC:
            return await self.say(f"{user.mention} {text}")

        cropped = crop_message(text, self.limit_for(channel))
        if cropped != text:
            logger.debug("[RESPONDER] Reply to %s cropped to %d chars", user.username, len(cropped))
        try:
            if channel is Channel.DM:
                if not conversation_id:
                    logger.warning("[RESPONDER] DM reply to %s has no conversation id", user.username)
                    return False
                await self.bridge.send_direct(conversation_id, cropped)
            else:
                await self.bridge.send_whisper(user.id, cropped)
        except Exception as exc:
            logger.error("[RESPONDER] Failed to send %s message to %s: %s", channel.value, user.username, exc)
            return False
        return True

    async def say(self, text: str) -> bool:
        """Post to public chat, split into as many messages as the limit requires."""
        limit = self.limit_for(Channel.PUBLIC)
        parts = chunk_lines(text.split("\n"), limit) if limit > 0 else [text]
        try:
            for part in parts:
                await self.bridge.send_public(part)
        except Exception as exc:
            logger.error("[RESPONDER] Failed to send public message: %s", exc)
            return False
        return True

    async def relay(
        self,
        user: RoomUser,
        text: str,
        channel: Channel,
        conversation_id: str | None = None,
        chunk_size: int = 120,
        delay_seconds: float = 1.0,
    ) -> int:
        """
        Send ``text`` verbatim in word-wrapped chunks, pausing between sends.

        Public chunks are posted without a mention. Stops at the first failed
        send and tells the requester.

        Returns:
            int: Number of chunks delivered.
        """
        return await self.relay_chunks(
            user, wrap_words(text, chunk_size), channel, conversation_id, delay_seconds
        )

    async def relay_chunks(
        self,
        user: RoomUser,
        chunks: Iterable[str],
        channel: Channel,
        conversation_id: str | None = None,
        delay_seconds: float = 1.0,
    ) -> int:
        sent = 0
        for chunk in chunks:
            if sent:
                await asyncio.sleep(delay_seconds)
            try:
                if channel is Channel.PUBLIC:
                    await self.bridge.send_public(chunk)
                elif channel is Channel.DM and conversation_id:
                    await self.bridge.send_direct(conversation_id, chunk)
                else:
                    await self.bridge.send_whisper(user.id, chunk)
            except Exception as exc:
                logger.error("[RESPONDER] Error sending relay part %d: %s", sent + 1, exc)
                await self.reply(user, "Failed to send part of the message.", channel, conversation_id)
                break
            sent += 1
        logger.info("[RESPONDER] Relayed %d parts for %s", sent, user.username)
        return sent
