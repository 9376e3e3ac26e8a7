import pytest

from roomkeeper.bot.command_router import CommandRouter
from roomkeeper.datatypes.room_datatypes import Pose, RoomUser

from conftest import BOT_ID, MOD_ID, OWNER_ID

HELPER = RoomUser(MOD_ID, "helper")


@pytest.fixture()
def alice(bridge) -> RoomUser:
    return bridge.add_user("alice-id", "alice", Pose(8.0, 0.0, 8.0))


@pytest.fixture()
def router(app_state) -> CommandRouter:
    return CommandRouter(app_state)


@pytest.mark.asyncio
async def test_preset_teleport(router, bridge, alice) -> None:
    await router.handle_public(alice, "!f1")

    assert bridge.teleports == [("alice-id", Pose(1.0, 0.0, 1.0))]
    assert bridge.public == ["@alice Teleported to F1 location."]


@pytest.mark.asyncio
async def test_missing_preset_is_reported(router, bridge, alice) -> None:
    await router.handle_public(alice, "!f3")

    assert bridge.teleports == []
    assert bridge.public == ["@alice Unknown destination for f3."]


@pytest.mark.asyncio
async def test_vip_requires_mod(router, bridge, alice) -> None:
    await router.handle_public(alice, "!vip")
    await router.handle_public(HELPER, "!vip")

    assert bridge.teleports == [(MOD_ID, Pose(9.0, 10.0, 9.0))]
    assert bridge.public == [
        "@alice You do not have permission to use this command.",
        "@helper Teleported to VIP location.",
    ]


@pytest.mark.asyncio
async def test_goto_user(router, bridge, alice) -> None:
    await router.handle_public(alice, "!goto @helper")

    assert bridge.teleports == [("alice-id", Pose(3.0, 0.0, 3.0))]
    assert bridge.public == ["@alice Teleported to helper's location."]


@pytest.mark.asyncio
async def test_teleport_failure_is_reported(router, bridge, alice) -> None:
    bridge.failing.add("teleport")

    await router.handle_public(alice, "!f1")

    assert bridge.public == ["@alice Failed to teleport: teleport failed"]


@pytest.mark.asyncio
async def test_summon_and_t1(router, bridge, alice) -> None:
    await router.handle_public(HELPER, "!summon @alice")
    await router.handle_public(HELPER, "!summon @boss")
    await router.handle_public(HELPER, "!t1 @alice")

    assert bridge.teleports == [("alice-id", Pose(3.0, 0.0, 3.0)), ("alice-id", Pose(3.0, 0.0, 3.0))]
    assert bridge.public == [
        "@helper Summoned alice to your location.",
        "@helper Cannot summon owner/mod/bot.",
        "@helper Teleported alice to T1 location.",
    ]


@pytest.mark.asyncio
async def test_walk_moves_bot_to_sender(router, bridge) -> None:
    await router.handle_public(HELPER, "!walk")

    assert bridge.walks == [Pose(3.0, 0.0, 3.0)]
    assert bridge.public == ["@helper Bot is walking to your location."]


@pytest.mark.asyncio
async def test_setbot_moves_and_persists_anchor(router, app_state, bridge) -> None:
    await router.handle_public(RoomUser(OWNER_ID, "boss"), "!setbot")

    assert bridge.teleports == [(BOT_ID, Pose(2.0, 0.0, 2.0))]
    assert app_state.anchor.pose == Pose(2.0, 0.0, 2.0)
    assert app_state.store.load("bot_location") == Pose(2.0, 0.0, 2.0).to_dict()
    assert bridge.public == ["@boss Bot's permanent location saved and bot moved there."]
