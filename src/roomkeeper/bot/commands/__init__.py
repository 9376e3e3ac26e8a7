"""
Prefixed chat commands.

Each ``*_cmds`` module registers its descriptors through ``setup(table)``;
:func:`build_command_table` collects them in help-listing order.
"""

from typing import Dict

from roomkeeper.datatypes.command_datatypes import CommandDescriptor


def build_command_table() -> Dict[str, CommandDescriptor]:
    from roomkeeper.bot.commands import (
        broadcast_cmds,
        emote_cmds,
        general_cmds,
        moderation_cmds,
        outfit_cmds,
        role_cmds,
        teleport_cmds,
        wallet_cmds,
    )

    table: Dict[str, CommandDescriptor] = {}
    for module in (
        general_cmds,
        teleport_cmds,
        emote_cmds,
        moderation_cmds,
        role_cmds,
        broadcast_cmds,
        outfit_cmds,
        wallet_cmds,
    ):
        module.setup(table)
    return table
