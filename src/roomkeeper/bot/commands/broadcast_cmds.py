"""
Commands that push content out: long text relays, relay-file contents and
room invites over existing DM conversations.

``longsay`` and ``sendfilecontent`` are gated by the ``long_message_send`` and
``file_content_send`` feature flags. ``sendfilecontent`` only reads files that
resolve inside the configured relay directory.
"""

import asyncio
from typing import Dict

from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.command_datatypes import ArgShape, CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role
from roomkeeper.util.logger import get_logger

logger = get_logger("broadcast_cmds")


async def longsay_command(ctx: CommandContext) -> None:
    if not ctx.state.config.feature_enabled("long_message_send"):
        await ctx.reply(f"The {ctx.state.prefix}longsay feature is currently disabled.")
        return
    sent = await ctx.relay(ctx.text)
    logger.info("[BROADCAST] Sent long message (%d parts) for %s", sent, ctx.sender.username)


async def sendfilecontent_command(ctx: CommandContext) -> None:
    config = ctx.state.config
    if not config.feature_enabled("file_content_send"):
        await ctx.reply(f"The {ctx.state.prefix}sendfilecontent feature is currently disabled.")
        return

    file_name = ctx.args[0]
    relay_dir = config.relay_dir
    path = (relay_dir / file_name).resolve()
    if not path.is_relative_to(relay_dir):
        logger.warning("[BROADCAST] %s requested a file outside the relay folder: %s", ctx.sender.username, file_name)
        await ctx.reply(f"File '{file_name}' not found in relay folder.")
        return

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("[BROADCAST] File '%s' not found for %s", file_name, ctx.sender.username)
        await ctx.reply(f"File '{file_name}' not found in relay folder.")
        return
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("[BROADCAST] Error reading '%s': %s", path, exc)
        await ctx.reply(f"Error reading file '{file_name}': {exc}")
        return

    if not content.strip():
        await ctx.reply(f"File '{file_name}' is empty.")
        return
    sent = await ctx.relay(content)
    logger.info("[BROADCAST] Relayed %s (%d parts) for %s", file_name, sent, ctx.sender.username)


async def invite_command(ctx: CommandContext) -> None:
    """Send a room invite to every present user the bot already has a DM conversation with."""
    conversations = await ctx.bridge.direct_conversations()
    snapshot = await ctx.bridge.room_snapshot()
    delay = ctx.state.config.emote_all_delay_seconds
    invited = 0
    for user, _ in snapshot.players:
        if user.id == ctx.state.bot_user_id:
            continue
        conversation_id = conversations.get(user.id)
        if conversation_id is None:
            logger.debug("[BROADCAST] No DM conversation with %s", user.username)
            continue
        try:
            await ctx.bridge.send_invite(conversation_id)
        except RoomActionError as exc:
            logger.error("[BROADCAST] Failed to invite %s: %s", user.username, exc)
            continue
        invited += 1
        await asyncio.sleep(delay)
    await ctx.reply(
        f"Attempted to send invites via DM to {invited} users who have previously messaged the bot."
    )


def setup(table: Dict[str, CommandDescriptor]) -> None:
    for descriptor in (
        CommandDescriptor("longsay", longsay_command, CommandRule(Role.MOD, ChannelScope.BOTH), ArgShape.TEXT,
                          "longsay <text>", "Send long text in parts"),
        CommandDescriptor("sendfilecontent", sendfilecontent_command, CommandRule(Role.OWNER, ChannelScope.BOTH),
                          ArgShape.WORD, "sendfilecontent <filename>", "Send a relay file's text"),
        CommandDescriptor("invite", invite_command, CommandRule(Role.MOD, ChannelScope.PUBLIC_ONLY),
                          description="Invite users you have DMs with"),
    ):
        table[descriptor.name] = descriptor
