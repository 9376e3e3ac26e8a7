"""
Teleport and movement commands.

Presets (``f1``/``f2``/``f3``/``vip``/``t1``) come from ``teleport_presets`` in
the app config; a missing preset is reported rather than treated as an error.
"""

from typing import Dict

from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.command_datatypes import ArgShape, CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role
from roomkeeper.util.logger import get_logger

logger = get_logger("teleport_cmds")


async def preset_command(ctx: CommandContext) -> None:
    """Teleport the sender to the preset named like the command."""
    preset = ctx.state.presets.get(ctx.command)
    if preset is None:
        await ctx.reply(f"Unknown destination for {ctx.command}.")
        return
    try:
        await ctx.bridge.teleport(ctx.sender.id, preset)
    except RoomActionError as exc:
        logger.error("[TELEPORT] Failed to teleport %s to %s: %s", ctx.sender.username, ctx.command, exc)
        await ctx.reply(f"Failed to teleport: {exc}")
        return
    await ctx.reply(f"Teleported to {ctx.command.upper()} location.")


async def goto_command(ctx: CommandContext) -> None:
    target = ctx.target
    position = await ctx.bridge.get_position(target.id)
    if position is None:
        await ctx.reply(f"Could not find {target.username}'s position.")
        return
    try:
        await ctx.bridge.teleport(ctx.sender.id, position)
    except RoomActionError as exc:
        logger.error("[TELEPORT] Failed to teleport %s to %s: %s", ctx.sender.username, target.username, exc)
        await ctx.reply(f"Failed to go to {target.username}: {exc}")
        return
    await ctx.reply(f"Teleported to {target.username}'s location.")


async def t1_command(ctx: CommandContext) -> None:
    target = ctx.target
    preset = ctx.state.presets.get("t1")
    if preset is None:
        await ctx.reply("Unknown destination for t1.")
        return
    try:
        await ctx.bridge.teleport(target.id, preset)
    except RoomActionError as exc:
        logger.error("[TELEPORT] Failed to teleport %s to T1: %s", target.username, exc)
        await ctx.reply(f"Failed to teleport {target.username}: {exc}")
        return
    await ctx.reply(f"Teleported {target.username} to T1 location.")


async def summon_command(ctx: CommandContext) -> None:
    target = ctx.target
    if target.id == ctx.state.bot_user_id or ctx.state.permissions.is_protected(target.id):
        logger.warning("[TELEPORT] %s tried to summon protected user %s", ctx.sender.username, target.username)
        await ctx.reply("Cannot summon owner/mod/bot.")
        return
    position = await ctx.bridge.get_position(ctx.sender.id)
    if position is None:
        await ctx.reply("Could not find your current position.")
        return
    try:
        await ctx.bridge.teleport(target.id, position)
    except RoomActionError as exc:
        logger.error("[TELEPORT] Failed to summon %s: %s", target.username, exc)
        await ctx.reply(f"Failed to summon {target.username}: {exc}")
        return
    await ctx.reply(f"Summoned {target.username} to your location.")


async def walk_command(ctx: CommandContext) -> None:
    position = await ctx.bridge.get_position(ctx.sender.id)
    if position is None:
        await ctx.reply("Could not find your current position.")
        return
    try:
        await ctx.bridge.walk(position)
    except RoomActionError as exc:
        logger.error("[TELEPORT] Bot failed to walk to %s: %s", ctx.sender.username, exc)
        await ctx.reply(f"Failed to make bot walk: {exc}")
        return
    await ctx.reply("Bot is walking to your location.")


async def setbot_command(ctx: CommandContext) -> None:
    position = await ctx.bridge.get_position(ctx.sender.id)
    if position is None:
        await ctx.reply("Could not find your current position to set bot location.")
        return
    try:
        await ctx.bridge.teleport(ctx.state.bot_user_id, position)
    except RoomActionError as exc:
        logger.error("[TELEPORT] Failed to move bot for %s: %s", ctx.sender.username, exc)
        await ctx.reply(f"Failed to set bot location: {exc}")
        return
    ctx.state.anchor.set(position)
    logger.info("[TELEPORT] Bot location set to %s by %s", position.describe(), ctx.sender.username)
    await ctx.reply("Bot's permanent location saved and bot moved there.")


def setup(table: Dict[str, CommandDescriptor]) -> None:
    public = ChannelScope.PUBLIC_ONLY
    basic, mod = CommandRule(Role.BASIC, public), CommandRule(Role.MOD, public)
    descriptors = [
        CommandDescriptor(name, preset_command, basic, description=f"Teleport to {name.upper()}")
        for name in ("f1", "f2", "f3")
    ]
    descriptors += [
        CommandDescriptor("vip", preset_command, mod, description="Teleport to the VIP area"),
        CommandDescriptor("goto", goto_command, basic, ArgShape.TARGET, "goto @username",
                          "Teleport to another user"),
        CommandDescriptor("t1", t1_command, mod, ArgShape.TARGET, "t1 @username", "Send a user to T1"),
        CommandDescriptor("summon", summon_command, mod, ArgShape.TARGET, "summon @username",
                          "Bring a user to you"),
        CommandDescriptor("walk", walk_command, mod, description="Make the bot walk to you"),
        CommandDescriptor("setbot", setbot_command, CommandRule(Role.OWNER, public),
                          description="Save your position as the bot's spot"),
    ]
    for descriptor in descriptors:
        table[descriptor.name] = descriptor
