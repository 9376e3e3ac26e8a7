"""Purchases paid from the bot's wallet.

Room boosts are bought in a given amount; voice time is a single fixed
purchase, so ``voice`` takes no argument.
"""

from typing import Dict

from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.command_datatypes import ArgShape, CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role
from roomkeeper.util.logger import get_logger

logger = get_logger("wallet_cmds")

PRODUCT_NAMES = {"boost": "room boosts", "voice": "voice time"}


async def purchase_command(ctx: CommandContext) -> None:
    """Shared handler for ``boost`` and ``voice``; the command name is the product."""
    amount = int(ctx.args[0]) if ctx.command == "boost" else 1
    product = PRODUCT_NAMES[ctx.command]
    try:
        result = await ctx.bridge.purchase(ctx.command, amount)
    except RoomActionError as exc:
        logger.error("[WALLET] Error buying %s for %s: %s", product, ctx.sender.username, exc)
        await ctx.reply(f"Error buying {product}: {exc}")
        return

    if result == "success":
        logger.info("[WALLET] Bought %d %s for %s", amount, product, ctx.sender.username)
        bought = f"{amount} {product}" if ctx.command == "boost" else product
        await ctx.reply(f"Successfully bought {bought}!")
    elif result == "insufficient_funds":
        await ctx.reply(f"Bot has insufficient funds to buy {product}.")
    else:
        await ctx.reply(f"Failed to buy {product}: {result}")


def setup(table: Dict[str, CommandDescriptor]) -> None:
    owner = CommandRule(Role.OWNER, ChannelScope.PUBLIC_ONLY)
    table["boost"] = CommandDescriptor("boost", purchase_command, owner, ArgShape.AMOUNT, "boost <amount>",
                                       "Buy room boosts")
    table["voice"] = CommandDescriptor("voice", purchase_command, owner, usage="voice",
                                       description="Buy voice time")
