"""
Moderation commands.

Two families live here:

- ledger commands (``idban``, ``idmute`` and their inverses) that restrict a
  user's access to the bot itself and are persisted by the moderation ledger;
- room commands (``k``, ``b``, ``m``, ``freeze``) that act on the room through
  the bridge.

Every punitive command refuses owners, mods and the bot's own avatar. The
bad-word list commands are also registered here.
"""

from typing import Dict

from roomkeeper.bot.commands.command_context import CommandContext, parse_positive_minutes
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.command_datatypes import ArgShape, CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role
from roomkeeper.util.format_utils import format_duration
from roomkeeper.util.logger import get_logger

logger = get_logger("moderation_cmds")


async def reject_protected(ctx: CommandContext, verb: str) -> bool:
    """Reply and return True if the target may not be punished."""
    target = ctx.target
    if target.id == ctx.state.bot_user_id or ctx.state.permissions.is_protected(target.id):
        logger.warning("[MODERATION] %s tried to %s protected user %s", ctx.sender.username, verb, target.username)
        await ctx.reply(f"Cannot {verb} owner/mod/bot.")
        return True
    return False


def minutes_argument(ctx: CommandContext) -> float | None:
    return parse_positive_minutes(ctx.args[1]) if len(ctx.args) > 1 else None


def describe_minutes(minutes: float) -> str:
    return format_duration(minutes * 60)


# ========== Command ledger ==========

async def idban_command(ctx: CommandContext) -> None:
    target = ctx.target
    if await reject_protected(ctx, "ban"):
        return
    ledger = ctx.state.ledger
    if ledger.is_banned(target.id):
        await ctx.reply(f"{target.mention} is already banned.")
        return
    minutes = minutes_argument(ctx)
    ledger.ban(target.id, minutes)
    logger.info("[MODERATION] %s banned from commands by %s (%s)", target.username, ctx.sender.username,
                describe_minutes(minutes) if minutes else "permanent")
    if minutes:
        await ctx.reply(f"{target.mention} has been banned from using commands for {describe_minutes(minutes)}.")
    else:
        await ctx.reply(f"{target.mention} has been banned from using commands.")


async def idunban_command(ctx: CommandContext) -> None:
    target = ctx.target
    if not ctx.state.ledger.is_banned(target.id):
        await ctx.reply(f"{target.mention} is not banned.")
        return
    ctx.state.ledger.unban(target.id)
    logger.info("[MODERATION] %s unbanned from commands by %s", target.username, ctx.sender.username)
    await ctx.reply(f"{target.mention} has been unbanned from using commands.")


async def idmute_command(ctx: CommandContext) -> None:
    target = ctx.target
    if await reject_protected(ctx, "mute"):
        return
    ledger = ctx.state.ledger
    if ledger.is_muted(target.id):
        await ctx.reply(f"{target.mention} is already muted.")
        return
    minutes = minutes_argument(ctx) or ctx.state.config.command_mute_minutes
    ledger.mute(target.id, minutes)
    logger.info("[MODERATION] %s muted for %s by %s", target.username, describe_minutes(minutes), ctx.sender.username)
    await ctx.reply(f"{target.mention} has been muted for {describe_minutes(minutes)}.")


async def idunmute_command(ctx: CommandContext) -> None:
    target = ctx.target
    if not ctx.state.ledger.is_muted(target.id):
        await ctx.reply(f"{target.mention} is not muted.")
        return
    ctx.state.ledger.unmute(target.id)
    logger.info("[MODERATION] %s unmuted by %s", target.username, ctx.sender.username)
    await ctx.reply(f"{target.mention} has been unmuted.")


# ========== Room actions ==========

async def kick_command(ctx: CommandContext) -> None:
    target = ctx.target
    if await reject_protected(ctx, "kick"):
        return
    try:
        await ctx.bridge.kick(target.id)
    except RoomActionError as exc:
        logger.error("[MODERATION] Failed to kick %s: %s", target.username, exc)
        await ctx.reply(f"Failed to kick {target.username}: {exc}")
        return
    logger.info("[MODERATION] %s kicked by %s", target.username, ctx.sender.username)
    await ctx.reply(f"Kicked {target.username} from the room.")


async def ban_command(ctx: CommandContext) -> None:
    target = ctx.target
    if await reject_protected(ctx, "ban"):
        return
    seconds = ctx.state.config.room_ban_seconds
    try:
        await ctx.bridge.ban(target.id, seconds)
    except RoomActionError as exc:
        logger.error("[MODERATION] Failed to ban %s: %s", target.username, exc)
        await ctx.reply(f"Failed to ban {target.username}: {exc}")
        return
    logger.info("[MODERATION] %s banned for %ss by %s", target.username, seconds, ctx.sender.username)
    await ctx.reply(f"Banned {target.username} for {format_duration(seconds)}.")


async def mute_command(ctx: CommandContext) -> None:
    target = ctx.target
    if await reject_protected(ctx, "mute"):
        return
    seconds = ctx.state.config.room_mute_seconds
    try:
        await ctx.bridge.mute(target.id, seconds)
    except RoomActionError as exc:
        logger.error("[MODERATION] Failed to mute %s: %s", target.username, exc)
        await ctx.reply(f"Failed to mute {target.username}: {exc}")
        return
    logger.info("[MODERATION] %s muted for %ss by %s", target.username, seconds, ctx.sender.username)
    await ctx.reply(f"Muted {target.username} for {format_duration(seconds)}.")


async def freeze_command(ctx: CommandContext) -> None:
    target = ctx.target
    if await reject_protected(ctx, "freeze"):
        return
    position = await ctx.bridge.get_position(target.id)
    if position is None:
        await ctx.reply(f"Could not find {target.username}'s current position to freeze.")
        return
    ctx.state.frozen.freeze(target.id, position)
    await ctx.reply(f"{target.username} has been frozen at their current location.")


async def unfreeze_command(ctx: CommandContext) -> None:
    target = ctx.target
    if not ctx.state.frozen.unfreeze(target.id):
        await ctx.reply(f"{target.username} is not frozen.")
        return
    await ctx.reply(f"{target.username} has been unfrozen.")


# ========== Bad words ==========

async def bad_command(ctx: CommandContext) -> None:
    word = ctx.args[0]
    if ctx.state.ledger.add_bad_word(word):
        await ctx.reply(f"'{word}' added to forbidden words.")
    else:
        await ctx.reply(f"'{word}' is already in the list.")


async def rbad_command(ctx: CommandContext) -> None:
    word = ctx.args[0]
    if ctx.state.ledger.remove_bad_word(word):
        await ctx.reply(f"'{word}' removed from forbidden words.")
    else:
        await ctx.reply(f"'{word}' not found in the list.")


async def listbadword_command(ctx: CommandContext) -> None:
    words = ctx.state.ledger.bad_words
    await ctx.reply(f"Forbidden Words: {', '.join(words) if words else 'None'}")


def setup(table: Dict[str, CommandDescriptor]) -> None:
    mod_both = CommandRule(Role.MOD, ChannelScope.BOTH)
    mod_public = CommandRule(Role.MOD, ChannelScope.PUBLIC_ONLY)
    owner_dm = CommandRule(Role.OWNER, ChannelScope.DM_ONLY)
    for descriptor in (
        CommandDescriptor("idban", idban_command, mod_both, ArgShape.TARGET_MINUTES,
                          "idban @username [minutes]", "Block a user from bot commands"),
        CommandDescriptor("idunban", idunban_command, mod_both, ArgShape.TARGET,
                          "idunban @username", "Lift a command ban"),
        CommandDescriptor("idmute", idmute_command, mod_both, ArgShape.TARGET_MINUTES,
                          "idmute @username [minutes]", "Make the bot ignore a user"),
        CommandDescriptor("idunmute", idunmute_command, mod_both, ArgShape.TARGET,
                          "idunmute @username", "Lift a bot mute"),
        CommandDescriptor("k", kick_command, mod_public, ArgShape.TARGET, "k @username", "Kick from the room"),
        CommandDescriptor("b", ban_command, mod_public, ArgShape.TARGET, "b @username", "Ban from the room"),
        CommandDescriptor("m", mute_command, mod_public, ArgShape.TARGET, "m @username", "Mute in the room"),
        CommandDescriptor("freeze", freeze_command, mod_public, ArgShape.TARGET,
                          "freeze @username", "Lock a user in place"),
        CommandDescriptor("unfreeze", unfreeze_command, mod_public, ArgShape.TARGET,
                          "unfreeze @username", "Release a frozen user"),
        CommandDescriptor("bad", bad_command, owner_dm, ArgShape.WORD, "bad <word>", "Add a forbidden word"),
        CommandDescriptor("rbad", rbad_command, owner_dm, ArgShape.WORD, "rbad <word>",
                          "Remove a forbidden word"),
        CommandDescriptor("listbadword", listbadword_command, owner_dm, description="List forbidden words"),
    ):
        table[descriptor.name] = descriptor
