from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from roomkeeper.bot.room_bridge import RoomBridge
from roomkeeper.datatypes.command_datatypes import ArgShape
from roomkeeper.datatypes.room_datatypes import Channel, RoomUser

if TYPE_CHECKING:
    from roomkeeper.bot.bot_state import AppState


def parse_positive_int(value: str) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def parse_positive_minutes(value: str) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


@dataclass
class CommandContext:
    """
    One authorized command invocation.

    Attributes:
        state: Session state shared by every handler.
        sender: User who typed the command.
        channel: Channel the command arrived on; replies go back there.
        command: Lowercased command name.
        args: Tokens after the command, original case.
        target: Resolved ``@user`` argument, if one was given.
        conversation_id: DM conversation to answer in, for DM commands.
    """

    state: "AppState"
    sender: RoomUser
    channel: Channel
    command: str
    args: List[str] = field(default_factory=list)
    target: RoomUser | None = None
    conversation_id: str | None = None

    @property
    def bridge(self) -> RoomBridge:
        return self.state.bridge

    @property
    def text(self) -> str:
        """Everything after the command name, single-spaced."""
        return " ".join(self.args).strip()

    async def reply(self, text: str) -> bool:
        return await self.state.responder.reply(self.sender, text, self.channel, self.conversation_id)

    async def relay(self, text: str) -> int:
        config = self.state.config
        return await self.state.responder.relay(
            self.sender,
            text,
            self.channel,
            self.conversation_id,
            chunk_size=config.message_limits.get("public", 120),
            delay_seconds=config.relay_delay_seconds,
        )

    def accepts(self, shape: ArgShape) -> bool:
        """Return True if the arguments match ``shape``."""
        if shape is ArgShape.NONE:
            return True
        if shape is ArgShape.TARGET:
            return self.target is not None
        if shape is ArgShape.TARGET_MINUTES:
            return self.target is not None and (
                len(self.args) < 2 or parse_positive_minutes(self.args[1]) is not None
            )
        if shape is ArgShape.WORD:
            return bool(self.args)
        if shape is ArgShape.TEXT:
            return bool(self.text)
        if shape is ArgShape.AMOUNT:
            return bool(self.args) and parse_positive_int(self.args[0]) is not None
        if shape is ArgShape.EMOTE:
            return bool(self.args) and self.args[0].lower() in self.state.emotes
        if shape is ArgShape.PART_INDEX:
            if len(self.args) < 2:
                return False
            try:
                int(self.args[1])
            except ValueError:
                return False
            return True
        return False
