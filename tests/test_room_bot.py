from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from highrise.models import AnchorPosition, Position

from roomkeeper.bot.room_bot import RoomBot
from roomkeeper.datatypes.room_datatypes import Pose, RoomUser


@pytest.fixture()
def room_bot(app_config) -> RoomBot:
    bot = RoomBot(app_config, "room-1")
    bot.highrise = AsyncMock()
    bot.highrise.get_room_users.return_value = SimpleNamespace(content=[])
    return bot


def user(user_id: str, username: str):
    return SimpleNamespace(id=user_id, username=username)


@pytest.mark.asyncio
async def test_on_start_moves_bot_to_anchor(room_bot) -> None:
    metadata = SimpleNamespace(user_id="bot-1", room_info=SimpleNamespace(room_name="Lobby"))

    await room_bot.on_start(metadata)

    assert room_bot.bridge.bot_user_id == "bot-1"
    room_bot.highrise.teleport.assert_awaited_once_with("bot-1", Position(5.0, 0.0, 5.0, "FrontLeft"))
    assert room_bot.state.auto_emote.runner_task is None


@pytest.mark.asyncio
async def test_join_greets_and_seeds_guard(room_bot) -> None:
    await room_bot.on_user_join(user("u1", "amy"), Position(1.0, 0.0, 1.0, "FrontRight"))

    room_bot.highrise.chat.assert_awaited_once_with("Welcome to the room @amy!")
    assert "u1" in room_bot.state.guard.last_positions
    assert "u1" in room_bot.state.greeter.last_seen


@pytest.mark.asyncio
async def test_leave_stops_loop_and_forgets_position(room_bot) -> None:
    room_bot.state.guard.remember("u1", Pose(1.0, 0.0, 1.0))
    room_bot.state.emote_loops.start(RoomUser("u1", "amy"), room_bot.state.emotes["wave"])

    await room_bot.on_user_leave(user("u1", "amy"))

    assert not room_bot.state.emote_loops.is_active("u1")
    assert "u1" not in room_bot.state.guard.last_positions


@pytest.mark.asyncio
async def test_dm_is_fetched_and_routed(room_bot) -> None:
    room_bot.highrise.get_messages.return_value = SimpleNamespace(messages=[SimpleNamespace(content="!myid")])

    await room_bot.on_message("u1", "conv-1", False)

    room_bot.highrise.send_message.assert_awaited_once_with(
        "conv-1", "Sorry, the command '!myid' works only in public chat."
    )


@pytest.mark.asyncio
async def test_public_chat_is_routed(room_bot) -> None:
    await room_bot.on_chat(user("u1", "amy"), "!myid")

    room_bot.highrise.chat.assert_awaited_once_with("@amy Your User ID is: u1")


@pytest.mark.asyncio
async def test_anchor_moves_are_not_guarded(room_bot) -> None:
    room_bot.state.frozen.freeze("u1", Pose(4.0, 0.0, 4.0))

    await room_bot.on_user_move(user("u1", "amy"), AnchorPosition("chair", 0))

    room_bot.highrise.teleport.assert_not_awaited()
