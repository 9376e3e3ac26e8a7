"""
Command table entries and parsed chat commands.

A :class:`CommandDescriptor` carries everything the router needs to gate and
run a command: its rule (role and channel scope), the argument shape checked
before the handler runs, and the usage line shown when that check fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, List

from roomkeeper.datatypes.permission_datatypes import CommandRule

if TYPE_CHECKING:
    from roomkeeper.bot.commands.command_context import CommandContext


class ArgShape(Enum):
    """Argument patterns a command may require."""

    NONE = "none"
    TARGET = "target"
    TARGET_MINUTES = "target_minutes"
    WORD = "word"
    TEXT = "text"
    AMOUNT = "amount"
    EMOTE = "emote"
    PART_INDEX = "part_index"


@dataclass(frozen=True)
class ParsedCommand:
    """
    A prefixed chat message split into its parts.

    Attributes:
        command: First token after the prefix, lowercased.
        args: Remaining whitespace-separated tokens, original case.
        target_name: Username from a leading ``@name`` argument, if any.
    """

    command: str
    args: List[str] = field(default_factory=list)
    target_name: str | None = None


CommandHandler = Callable[["CommandContext"], Awaitable[None]]


@dataclass(frozen=True)
class CommandDescriptor:
    name: str
    handler: CommandHandler
    rule: CommandRule
    arg_shape: ArgShape = ArgShape.NONE
    usage: str = ""
    description: str = ""


def parse_command(text: str, prefix: str) -> ParsedCommand | None:
    """
    Parse ``text`` if it starts with ``prefix``.

    Returns None when the prefix is missing. A bare prefix parses to an empty
    command name so it is answered as an unknown command.
    """
    if not prefix or not text.startswith(prefix):
        return None
    tokens = text[len(prefix):].split()
    if not tokens:
        return ParsedCommand(command="", args=[])
    command, args = tokens[0].lower(), tokens[1:]
    target_name = args[0][1:] if args and args[0].startswith("@") and len(args[0]) > 1 else None
    return ParsedCommand(command=command, args=args, target_name=target_name)
