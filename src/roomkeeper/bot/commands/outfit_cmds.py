"""
Commands that change the bot's own outfit.

Item categories are inferred from the item id prefix (``shirt-n_...`` is a
``shirt``), which is how the platform names its catalog items.
"""

from typing import Dict

from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.command_datatypes import ArgShape, CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role
from roomkeeper.datatypes.room_datatypes import OutfitItem
from roomkeeper.util.logger import get_logger

logger = get_logger("outfit_cmds")

COLOR_PARTS: Dict[str, str] = {
    "hair": "hair",
    "eyes": "eye",
    "eyebrow": "eyebrow",
    "lips": "mouth",
    "skin": "body",
}


async def equip_command(ctx: CommandContext) -> None:
    item_id = ctx.text
    category = item_id.split("-")[0].lower()
    try:
        outfit = await ctx.bridge.get_outfit(ctx.state.bot_user_id)
        kept = [item for item in outfit if not item.id.lower().startswith(category)]
        await ctx.bridge.change_outfit(kept + [OutfitItem(type="clothing", id=item_id)])
    except RoomActionError as exc:
        logger.error("[OUTFIT] Failed to equip %s: %s", item_id, exc)
        await ctx.reply(f"Failed to equip item: {exc}. Bot may not own this item or it's invalid.")
        return
    logger.info("[OUTFIT] Bot equipped %s for %s", item_id, ctx.sender.username)
    await ctx.reply(f"Equipped item: {item_id}")


async def remove_command(ctx: CommandContext) -> None:
    category = ctx.text.lower()
    try:
        outfit = await ctx.bridge.get_outfit(ctx.state.bot_user_id)
        await ctx.bridge.change_outfit([item for item in outfit if category not in item.id.lower()])
    except RoomActionError as exc:
        logger.error("[OUTFIT] Failed to remove %s: %s", category, exc)
        await ctx.reply(f"Failed to remove item: {exc}. Category may be invalid or items are not removable.")
        return
    await ctx.reply(f"Removed items matching category: {ctx.text}")


async def color_command(ctx: CommandContext) -> None:
    part_name, index = ctx.args[0].lower(), int(ctx.args[1])
    part = COLOR_PARTS.get(part_name)
    if part is None:
        await ctx.reply(f"Invalid category. Supported: {', '.join(COLOR_PARTS)}.")
        return
    try:
        await ctx.bridge.change_outfit_color(part, index)
    except RoomActionError as exc:
        logger.error("[OUTFIT] Failed to color %s: %s", part, exc)
        await ctx.reply(f"Failed to change color: {exc}")
        return
    await ctx.reply(f"Changed {part_name} color to index {index}.")


async def copy_command(ctx: CommandContext) -> None:
    target = ctx.target
    try:
        outfit = await ctx.bridge.get_outfit(target.id)
        if not outfit:
            await ctx.reply("Could not get outfit from that user or user has no outfit equipped.")
            return
        await ctx.bridge.change_outfit(outfit)
    except RoomActionError as exc:
        logger.error("[OUTFIT] Failed to copy outfit of %s: %s", target.username, exc)
        await ctx.reply(f"Failed to copy outfit: {exc}")
        return
    await ctx.reply(f"Copied outfit from {target.username}.")


def setup(table: Dict[str, CommandDescriptor]) -> None:
    owner = CommandRule(Role.OWNER, ChannelScope.PUBLIC_ONLY)
    for descriptor in (
        CommandDescriptor("equip", equip_command, owner, ArgShape.TEXT, "equip <item_id>", "Dress the bot"),
        CommandDescriptor("remove", remove_command, owner, ArgShape.TEXT, "remove <category>",
                          "Take items off the bot"),
        CommandDescriptor("color", color_command, owner, ArgShape.PART_INDEX, "color <category> <index>",
                          "Recolor hair, eyes, eyebrow, lips or skin"),
        CommandDescriptor("copy", copy_command, owner, ArgShape.TARGET, "copy @username",
                          "Copy a user's outfit onto the bot"),
    ):
        table[descriptor.name] = descriptor
