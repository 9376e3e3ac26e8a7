"""Role management commands for owners."""

from typing import Dict

from roomkeeper.bot.commands.command_context import CommandContext
from roomkeeper.datatypes.command_datatypes import ArgShape, CommandDescriptor
from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, Role, RoleChange


async def role_command(ctx: CommandContext) -> None:
    target = ctx.target
    result = ctx.state.permissions.promote(target.id)
    if result is RoleChange.PROTECTED:
        await ctx.reply("Cannot change owner's role.")
    elif result is RoleChange.ALREADY:
        await ctx.reply(f"{target.mention} is already a mod.")
    else:
        await ctx.reply(f"{target.mention} has been assigned the 'mod' role.")


async def unrole_command(ctx: CommandContext) -> None:
    target = ctx.target
    result = ctx.state.permissions.demote(target.id)
    if result is RoleChange.PROTECTED:
        await ctx.reply("Cannot change owner's role.")
    elif result is RoleChange.NOT_HELD:
        await ctx.reply(f"{target.mention} is not a mod.")
    else:
        await ctx.reply(f"{target.mention} has been removed from the 'mod' role.")


async def addowner_command(ctx: CommandContext) -> None:
    target = ctx.target
    if ctx.state.permissions.grant_owner(target.id) is RoleChange.ALREADY:
        await ctx.reply(f"{target.mention} is already an owner.")
    else:
        await ctx.reply(f"{target.mention} has been assigned the 'owner' role.")


async def removeowner_command(ctx: CommandContext) -> None:
    target = ctx.target
    result = ctx.state.permissions.revoke_owner(ctx.sender.id, target.id)
    if result is RoleChange.SELF:
        await ctx.reply("You cannot remove yourself from the 'owner' role.")
    elif result is RoleChange.NOT_HELD:
        await ctx.reply(f"{target.mention} is not an owner.")
    else:
        await ctx.reply(f"{target.mention} has been removed from the 'owner' role.")


async def list_command(ctx: CommandContext) -> None:
    snapshot = await ctx.bridge.room_snapshot()

    def names(user_ids):
        resolved = []
        for user_id in user_ids:
            entry = snapshot.find_by_id(user_id)
            resolved.append(entry[0].username if entry else user_id)
        return ", ".join(resolved) if resolved else "None"

    permissions = ctx.state.permissions
    await ctx.reply(f"Current Roles:\nOwners: {names(permissions.owners)}\nMods: {names(permissions.mods)}")


def setup(table: Dict[str, CommandDescriptor]) -> None:
    owner_both = CommandRule(Role.OWNER, ChannelScope.BOTH)
    owner_dm = CommandRule(Role.OWNER, ChannelScope.DM_ONLY)
    for descriptor in (
        CommandDescriptor("role", role_command, owner_both, ArgShape.TARGET, "role @username", "Make a user mod"),
        CommandDescriptor("unrole", unrole_command, owner_both, ArgShape.TARGET, "unrole @username",
                          "Remove a user's mod role"),
        CommandDescriptor("addowner", addowner_command, owner_dm, ArgShape.TARGET, "addowner @username",
                          "Make a user owner"),
        CommandDescriptor("removeowner", removeowner_command, owner_dm, ArgShape.TARGET,
                          "removeowner @username", "Remove a user's owner role"),
        CommandDescriptor("list", list_command, CommandRule(Role.MOD, ChannelScope.DM_ONLY),
                          description="List owners and mods"),
    ):
        table[descriptor.name] = descriptor
