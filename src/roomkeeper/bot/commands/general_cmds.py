"""
Everyday commands: help listings, own id, emote list and stopping a loop.
"""

from typing import Dict, List

from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.datatypes.command_datatypes import CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role
from roomkeeper.util.format_utils import chunk_lines, fill_template
from roomkeeper.util.logger import get_logger

logger = get_logger("general_cmds")


def command_lines(ctx: CommandContext, role: Role) -> List[str]:
    """``!name : description`` for every command whose effective role is exactly ``role``."""
    prefix = ctx.state.prefix
    lines = []
    for name, descriptor in ctx.state.commands.items():
        rule = ctx.state.policy.rule_for(name) or descriptor.rule
        if rule.required_role is role:
            lines.append(f"{prefix}{name} : {descriptor.description}")
    return lines


async def help_command(ctx: CommandContext) -> None:
    messages = ctx.state.config.messages
    body = "\n".join(command_lines(ctx, Role.BASIC))
    await ctx.reply(f"{fill_template(messages['help_header'], ctx.sender.username)}\n{body}\n\n{messages['help_footer']}")


async def mod_command(ctx: CommandContext) -> None:
    messages = ctx.state.config.messages
    text = f"{fill_template(messages['mod_header'], ctx.sender.username)}\n" + "\n".join(command_lines(ctx, Role.MOD))
    if ctx.state.permissions.is_at_least(ctx.sender.id, Role.OWNER):
        text += f"\n{messages['owner_header']}\n" + "\n".join(command_lines(ctx, Role.OWNER))
    await ctx.reply(text)


async def myid_command(ctx: CommandContext) -> None:
    await ctx.reply(f"Your User ID is: {ctx.sender.id}")


async def emotelist_command(ctx: CommandContext) -> None:
    header = ctx.state.config.messages["emote_list_header"].rstrip("\n")
    limit = ctx.state.responder.limit_for(ctx.channel) or 2000
    await ctx.state.responder.relay_chunks(
        ctx.sender,
        chunk_lines([header, *ctx.state.emotes], limit),
        ctx.channel,
        ctx.conversation_id,
        delay_seconds=ctx.state.config.relay_delay_seconds,
    )
    logger.info("[GENERAL] Sent emote list to %s", ctx.sender.username)


async def stop_command(ctx: CommandContext) -> None:
    if ctx.state.emote_loops.stop(ctx.sender.id):
        await ctx.reply("Your emote loop has been stopped.")
    else:
        await ctx.reply("You don't have an active emote loop.")


def setup(table: Dict[str, CommandDescriptor]) -> None:
    public = ChannelScope.PUBLIC_ONLY
    for descriptor in (
        CommandDescriptor("help", help_command, CommandRule(Role.BASIC, ChannelScope.BOTH),
                          description="Show the commands you can use"),
        CommandDescriptor("mod", mod_command, CommandRule(Role.MOD, ChannelScope.BOTH),
                          description="Show moderator commands"),
        CommandDescriptor("myid", myid_command, CommandRule(Role.BASIC, public),
                          description="Show your user id"),
        CommandDescriptor("emotelist", emotelist_command, CommandRule(Role.BASIC, ChannelScope.DM_ONLY),
                          description="List every emote name"),
        CommandDescriptor("stop", stop_command, CommandRule(Role.BASIC, public),
                          description="Stop your emote loop"),
    ):
        table[descriptor.name] = descriptor
