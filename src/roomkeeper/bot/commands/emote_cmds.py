"""
Emote commands, including the unprefixed public-chat forms.

Typing an emote keyword on its own starts a loop for the sender; typing
``<emote> @user`` makes that user perform the emote once, silently.
"""

import asyncio
from typing import TYPE_CHECKING, Dict

from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.command_datatypes import ArgShape, CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role
from roomkeeper.datatypes.room_datatypes import Channel, EmoteDefinition, RoomUser
from roomkeeper.util.logger import get_logger

if TYPE_CHECKING:
    from roomkeeper.bot.bot_state import AppState

logger = get_logger("emote_cmds")


def emote_role(emote: EmoteDefinition) -> Role:
    try:
        return Role.parse(emote.role, default=Role.BASIC)
    except ValueError:
        logger.warning("[EMOTE] Unknown role '%s' on emote %s; treating as basic", emote.role, emote.name)
        return Role.BASIC


async def start_loop(state: "AppState", user: RoomUser, emote: EmoteDefinition) -> None:
    """Start or replace the sender's loop and confirm in public chat."""
    if state.emote_loops.start(user, emote):
        await state.responder.reply(user, "Stopped previous emote loop.", Channel.PUBLIC)
    await state.responder.reply(
        user, f"Performing '{emote.name}' in a loop. Type '{state.prefix}stop' to halt.", Channel.PUBLIC
    )


async def emote_once(state: "AppState", target: RoomUser, emote: EmoteDefinition) -> bool:
    try:
        await state.bridge.emote(target.id, emote.emote_id)
    except RoomActionError as exc:
        logger.error("[EMOTE] Failed to make %s perform %s: %s", target.username, emote.name, exc)
        return False
    logger.info("[EMOTE] Made %s perform %s", target.username, emote.name)
    return True


async def all_command(ctx: CommandContext) -> None:
    emote = ctx.state.emotes[ctx.args[0].lower()]
    snapshot = await ctx.bridge.room_snapshot()
    delay = ctx.state.config.emote_all_delay_seconds
    count = 0
    for user, _ in snapshot.players:
        if user.id == ctx.state.bot_user_id:
            continue
        if await emote_once(ctx.state, user, emote):
            count += 1
            await asyncio.sleep(delay)
    await ctx.reply(f"Made {count} users perform '{emote.name}'.")


def setup(table: Dict[str, CommandDescriptor]) -> None:
    table["all"] = CommandDescriptor(
        "all",
        all_command,
        CommandRule(Role.MOD, ChannelScope.PUBLIC_ONLY),
        ArgShape.EMOTE,
        "all <emotename>",
        "Make everyone perform an emote",
    )
