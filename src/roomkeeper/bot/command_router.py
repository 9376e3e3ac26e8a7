"""
Turns raw chat text into authorized command executions.

Every chat-like event runs through the same gates, in order:

1. ignore the bot's own messages and senders who are muted or command-banned;
2. (public chat only) warn and stop on a forbidden word;
3. (public chat only) unprefixed emote forms: ``<emote>`` loops it for the
   sender, ``<emote> @user`` makes the target perform it once;
4. require the prefix, then parse command, args and optional ``@target``;
5. resolve the target against the room roster;
6. look up the command, authorize it (channel first, then role), check the
   argument shape and run the handler.

DMs skip steps 2 and 3 and fall back to an AI reply for unprefixed text when
enabled. Whispers are never a command channel: prefixed text gets a hint,
anything else an AI reply when enabled.

Exceptions raised past the gates are logged and answered with a generic
reply; the router itself never propagates them.
"""

from __future__ import annotations

import re

from roomkeeper.bot.bot_state import AppState
from roomkeeper.bot.commands import emote_cmds
from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.command_datatypes import parse_command
from roomkeeper.datatypes.permission_datatypes import DenyReason
from roomkeeper.datatypes.room_datatypes import Channel, RoomUser
from roomkeeper.util.logger import get_logger

logger = get_logger("command_router")

TARGETED_EMOTE = re.compile(r"^(\w+)\s+@(\w+)$")


class CommandRouter:
    def __init__(self, state: AppState) -> None:
        self.state = state

    # ========== Entry points ==========

    async def handle_public(self, user: RoomUser, message: str) -> None:
        logger.debug("[COMMAND ROUTER] [PUBLIC] %s: %s", user.username, message)
        if self.is_ignored(user.id):
            return
        try:
            if self.state.ledger.contains_bad_word(message):
                logger.info("[COMMAND ROUTER] Bad word from %s: %r", user.username, message)
                await self.state.responder.reply(
                    user,
                    "Warning: You used a forbidden word. Please refrain from using such language.",
                    Channel.PUBLIC,
                )
                return

            if await self.handle_bare_emote(user, message):
                return

            if not message.startswith(self.state.prefix):
                return
            await self.run_command(user, message, Channel.PUBLIC)
        except Exception:
            logger.exception("[COMMAND ROUTER] Error handling public message from %s", user.username)
            await self.state.responder.reply(user, "Something went wrong handling that.", Channel.PUBLIC)

    async def handle_direct(self, user_id: str, conversation_id: str, message: str) -> None:
        logger.debug("[COMMAND ROUTER] [DM] %s (%s): %s", user_id, conversation_id, message)
        if self.is_ignored(user_id):
            return
        user = RoomUser(user_id, f"User_{user_id[:5]}")
        try:
            username = await self.state.bridge.find_username(user_id)
            if username:
                user = RoomUser(user_id, username)
        except RoomActionError as exc:
            logger.warning("[COMMAND ROUTER] Could not resolve username for %s: %s", user_id, exc)

        try:
            if not message.startswith(self.state.prefix):
                if self.state.config.feature_enabled("ai_reply_in_dms"):
                    await self.ai_reply(user, message, Channel.DM, conversation_id)
                return
            await self.run_command(user, message, Channel.DM, conversation_id)
        except Exception:
            logger.exception("[COMMAND ROUTER] Error handling DM from %s", user.username)
            await self.state.responder.reply(user, "Something went wrong handling that.", Channel.DM, conversation_id)

    async def handle_whisper(self, user: RoomUser, message: str) -> None:
        logger.debug("[COMMAND ROUTER] [WHISPER] %s: %s", user.username, message)
        if self.is_ignored(user.id):
            return
        prefix = self.state.prefix
        if message.startswith(prefix):
            await self.state.responder.reply(
                user, f'"{prefix}" works only in DM/public chat. For AI interaction, just type naturally.',
                Channel.WHISPER,
            )
            return
        if self.state.config.feature_enabled("ai_reply_in_whispers"):
            await self.ai_reply(user, message, Channel.WHISPER)

    # ========== Gates ==========

    def is_ignored(self, user_id: str) -> bool:
        if user_id == self.state.bot_user_id:
            return True
        if self.state.ledger.is_muted(user_id):
            logger.debug("[COMMAND ROUTER] %s is muted, ignoring message", user_id)
            return True
        if self.state.ledger.is_banned(user_id):
            logger.debug("[COMMAND ROUTER] %s is command-banned, ignoring message", user_id)
            return True
        return False

    async def handle_bare_emote(self, user: RoomUser, message: str) -> bool:
        """Return True if ``message`` was an unprefixed emote form and has been handled."""
        lowered = message.strip().lower()
        emotes = self.state.emotes
        responder = self.state.responder

        match = TARGETED_EMOTE.match(lowered)
        if match and match.group(1) in emotes:
            emote = emotes[match.group(1)]
            if not self.state.permissions.is_at_least(user.id, emote_cmds.emote_role(emote)):
                await responder.reply(user, "You do not have permission to emote others.", Channel.PUBLIC)
                return True
            target = await self.state.bridge.find_user(match.group(2))
            if target is None:
                await responder.reply(user, f"User '{match.group(2)}' not found in the room.", Channel.PUBLIC)
                return True
            await emote_cmds.emote_once(self.state, target, emote)
            return True

        emote = emotes.get(lowered)
        if emote is None:
            return False
        if not self.state.permissions.is_at_least(user.id, emote_cmds.emote_role(emote)):
            await responder.reply(user, f"You do not have permission to use '{emote.name}'.", Channel.PUBLIC)
            return True
        await emote_cmds.start_loop(self.state, user, emote)
        return True

    async def run_command(
        self, user: RoomUser, message: str, channel: Channel, conversation_id: str | None = None
    ) -> bool:
        """
        Parse, resolve, authorize and execute one prefixed command.

        Returns:
            bool: True if a handler ran to completion.
        """
        state = self.state
        prefix = state.prefix

        async def reply(text: str) -> None:
            await state.responder.reply(user, text, channel, conversation_id)

        parsed = parse_command(message, prefix)
        if parsed is None:
            return False

        target = None
        if parsed.target_name:
            try:
                target = await state.bridge.find_user(parsed.target_name)
            except RoomActionError as exc:
                logger.error("[COMMAND ROUTER] Error finding target user '%s': %s", parsed.target_name, exc)
                await reply(f"Error finding target user '{parsed.target_name}'.")
                return False
            if target is None:
                logger.warning(
                    "[COMMAND ROUTER] Target user '%s' not found for command %s", parsed.target_name, parsed.command
                )
                await reply(f"User '{parsed.target_name}' not found in the room.")
                return False

        descriptor = state.commands.get(parsed.command)
        if descriptor is None:
            logger.info("[COMMAND ROUTER] Unknown command from %s: %s", user.username, message)
            await reply(f"Unknown command: '{prefix}{parsed.command}'. Use {prefix}help for commands.")
            return False

        decision = state.policy.authorize(parsed.command, channel, user.id)
        if not decision.allowed:
            if decision.reason is DenyReason.WRONG_CHANNEL:
                logger.info(
                    "[COMMAND ROUTER] %s%s attempted in %s by %s", prefix, parsed.command, channel.value, user.username
                )
                await reply(
                    f"Sorry, the command '{prefix}{parsed.command}' works only in {decision.rule.scope.description}."
                )
            else:
                await reply("You do not have permission to use this command.")
            return False

        ctx = CommandContext(
            state=state,
            sender=user,
            channel=channel,
            command=parsed.command,
            args=list(parsed.args),
            target=target,
            conversation_id=conversation_id,
        )
        if not ctx.accepts(descriptor.arg_shape):
            await reply(f"Usage: {prefix}{descriptor.usage or descriptor.name}")
            return False

        logger.info("[COMMAND ROUTER] %s ran %s%s in %s", user.username, prefix, parsed.command, channel.value)
        try:
            await descriptor.handler(ctx)
        except RoomActionError as exc:
            logger.error("[COMMAND ROUTER] %s%s failed: %s", prefix, parsed.command, exc)
            await reply(f"Failed to run {prefix}{parsed.command}: {exc}")
            return False
        except Exception:
            logger.exception("[COMMAND ROUTER] Handler for %s%s raised", prefix, parsed.command)
            await reply(f"An error occurred while running {prefix}{parsed.command}.")
            return False
        return True

    async def ai_reply(
        self, user: RoomUser, message: str, channel: Channel, conversation_id: str | None = None
    ) -> None:
        logger.info("[COMMAND ROUTER] AI processing %s from %s", channel.value, user.username)
        answer = await self.state.completion.complete(message)
        await self.state.responder.reply(user, answer, channel, conversation_id)
