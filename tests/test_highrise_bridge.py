from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from highrise.models import AnchorPosition, Error, Position

from roomkeeper.bot.highrise_bridge import HighriseRoomBridge, to_pose
from roomkeeper.bot.room_bridge import RoomActionError
from roomkeeper.datatypes.room_datatypes import Pose


def make_bridge():
    bot = MagicMock()
    bot.highrise = AsyncMock()
    bridge = HighriseRoomBridge(bot, "room-1")
    bridge.bot_user_id = "bot"
    return bridge, bot.highrise


def item(item_id, palette=0):
    return SimpleNamespace(type="clothing", id=item_id, amount=1, account_bound=False, active_palette=palette)


def test_to_pose_skips_anchor_positions():
    assert to_pose(Position(1.0, 2.0, 3.0, "FrontLeft")) == Pose(1.0, 2.0, 3.0, "FrontLeft")
    assert to_pose(AnchorPosition("chair", 0)) is None
    assert to_pose(None) is None


@pytest.mark.asyncio
async def test_messages_are_forwarded():
    bridge, highrise = make_bridge()

    await bridge.send_public("hello")
    await bridge.send_direct("conv", "dm text")
    await bridge.send_whisper("u1", "psst")

    highrise.chat.assert_awaited_once_with("hello")
    highrise.send_message.assert_awaited_once_with("conv", "dm text")
    highrise.send_whisper.assert_awaited_once_with("u1", "psst")


@pytest.mark.asyncio
async def test_error_result_becomes_room_action_error():
    bridge, highrise = make_bridge()
    highrise.teleport.return_value = Error(message="not allowed")

    with pytest.raises(RoomActionError, match="teleport failed: not allowed"):
        await bridge.teleport("u1", Pose(1.0, 0.0, 1.0))


@pytest.mark.asyncio
async def test_raised_exception_becomes_room_action_error():
    bridge, highrise = make_bridge()
    highrise.moderate_room.side_effect = ConnectionError("socket closed")

    with pytest.raises(RoomActionError, match="kick failed: socket closed"):
        await bridge.kick("u1")


@pytest.mark.asyncio
async def test_moderation_verbs():
    bridge, highrise = make_bridge()

    await bridge.ban("u1", 3600)
    await bridge.mute("u2", 60)

    highrise.moderate_room.assert_any_await("u1", "ban", 3600)
    highrise.moderate_room.assert_any_await("u2", "mute", 60)


@pytest.mark.asyncio
async def test_room_snapshot_converts_players():
    bridge, highrise = make_bridge()
    highrise.get_room_users.return_value = SimpleNamespace(content=[
        (SimpleNamespace(id="u1", username="amy"), Position(1.0, 0.0, 2.0, "FrontRight")),
        (SimpleNamespace(id="u2", username="sat"), AnchorPosition("chair", 1)),
    ])

    snapshot = await bridge.room_snapshot()

    assert snapshot.find_by_username("AMY").id == "u1"
    assert await bridge.get_position("u1") == Pose(1.0, 0.0, 2.0, "FrontRight")
    assert await bridge.get_position("u2") is None
    assert await bridge.is_present("u2") is True
    assert await bridge.find_username("u3") is None


@pytest.mark.asyncio
async def test_latest_message():
    bridge, highrise = make_bridge()
    highrise.get_messages.return_value = SimpleNamespace(messages=[SimpleNamespace(content="!help")])

    assert await bridge.latest_message("conv") == "!help"


@pytest.mark.asyncio
async def test_change_outfit_color_updates_matching_parts():
    bridge, highrise = make_bridge()
    highrise.get_user_outfit.return_value = SimpleNamespace(
        outfit=[item("hair_front-n_a"), item("hair_back-n_a"), item("eye-n_b")]
    )

    await bridge.change_outfit_color("hair", 7)

    sent = highrise.set_outfit.await_args.args[0]
    assert [(i.id, i.active_palette) for i in sent] == [
        ("hair_front-n_a", 7), ("hair_back-n_a", 7), ("eye-n_b", 0),
    ]


@pytest.mark.asyncio
async def test_change_outfit_color_without_part_fails():
    bridge, highrise = make_bridge()
    highrise.get_user_outfit.return_value = SimpleNamespace(outfit=[item("eye-n_b")])

    with pytest.raises(RoomActionError):
        await bridge.change_outfit_color("mouth", 1)
    highrise.set_outfit.assert_not_awaited()


@pytest.mark.asyncio
async def test_purchase_returns_result():
    bridge, highrise = make_bridge()
    highrise.buy_room_boost.return_value = SimpleNamespace(result="success")

    assert await bridge.purchase("boost", 2) == "success"
    highrise.buy_room_boost.assert_awaited_once_with(payment="bot_wallet_only", amount=2)

    with pytest.raises(RoomActionError):
        await bridge.purchase("gold", 1)


@pytest.mark.asyncio
async def test_direct_conversations_and_invites():
    bridge, highrise = make_bridge()
    highrise.get_conversations.return_value = SimpleNamespace(conversations=[
        SimpleNamespace(id="c1", member_ids=["bot", "u1"]),
        SimpleNamespace(id="c2", member_ids=["bot", "u2", "u3"]),
    ])

    assert await bridge.direct_conversations() == {"u1": "c1"}

    await bridge.send_invite("c1")
    highrise.send_message.assert_awaited_once_with("c1", "", message_type="invite", room_id="room-1")
