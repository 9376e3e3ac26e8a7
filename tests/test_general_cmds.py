import pytest

from roomkeeper.bot.command_router import CommandRouter
from roomkeeper.datatypes.room_datatypes import RoomUser

from conftest import MOD_ID, OWNER_ID


@pytest.fixture()
def alice(bridge) -> RoomUser:
    return bridge.add_user("alice-id", "alice")


@pytest.fixture()
def router(app_state) -> CommandRouter:
    return CommandRouter(app_state)


@pytest.mark.asyncio
async def test_myid(router, bridge, alice) -> None:
    await router.handle_public(alice, "!MyID")

    assert bridge.public == ["@alice Your User ID is: alice-id"]


@pytest.mark.asyncio
async def test_public_help_is_split_to_limit(router, bridge, alice) -> None:
    await router.handle_public(alice, "!help")

    assert len(bridge.public) > 1
    assert bridge.public[0].startswith("@alice Hi alice! Here are the commands you can use:")
    assert all(len(message) <= 120 for message in bridge.public)
    text = "\n".join(bridge.public)
    assert "!goto : Teleport to another user" in text
    assert "!idban" not in text


@pytest.mark.asyncio
async def test_mod_listing_depends_on_role(router, bridge) -> None:
    await router.handle_direct(MOD_ID, "c1", "!mod")
    await router.handle_direct(OWNER_ID, "c2", "!mod")

    mod_text = bridge.direct[0][1]
    owner_text = bridge.direct[1][1]
    assert mod_text.startswith("Hi helper! Moderator commands:")
    assert "!idban : Block a user from bot commands" in mod_text
    assert "Owner commands:" not in mod_text
    assert "Owner commands:" in owner_text
    assert "!addowner : Make a user owner" in owner_text


@pytest.mark.asyncio
async def test_emotelist_is_dm_only(router, bridge, alice) -> None:
    await router.handle_public(alice, "!emotelist")
    await router.handle_direct("alice-id", "c1", "!emotelist")

    assert bridge.public == ["@alice Sorry, the command '!emotelist' works only in DM."]
    assert bridge.direct == [("c1", "Available emotes:\nwave\nkiss\ntele")]


@pytest.mark.asyncio
async def test_stop(router, app_state, bridge, alice) -> None:
    await router.handle_public(alice, "!stop")
    await router.handle_public(alice, "kiss")
    await router.handle_public(alice, "!stop")

    assert not app_state.emote_loops.is_active("alice-id")
    assert bridge.public == [
        "@alice You don't have an active emote loop.",
        "@alice Performing 'kiss' in a loop. Type '!stop' to halt.",
        "@alice Your emote loop has been stopped.",
    ]
    await app_state.shutdown()


@pytest.mark.asyncio
async def test_all_emotes_everyone_but_bot(router, bridge, alice) -> None:
    await router.handle_public(RoomUser(MOD_ID, "helper"), "!all WAVE")

    assert bridge.emotes == [(OWNER_ID, "emote-wave"), (MOD_ID, "emote-wave"), ("alice-id", "emote-wave")]
    assert bridge.public == ["@helper Made 3 users perform 'wave'."]


@pytest.mark.asyncio
async def test_command_override_changes_listing(tmp_path, bridge, completion) -> None:
    from conftest import write_config

    from roomkeeper.bot.bot_state import build_app_state
    from roomkeeper.configuration.app_configuration import AppConfig

    config = AppConfig(write_config(tmp_path / "c.yml", tmp_path / "data", commands={"!goto": {"role": "mod"}}))
    state = build_app_state(config, bridge, completion=completion)
    state.load()
    router = CommandRouter(state)
    alice = bridge.add_user("alice-id", "alice")
    bridge.add_user("bob-id", "bob")

    await router.handle_public(alice, "!goto @bob")

    assert bridge.teleports == []
    assert bridge.public == ["@alice You do not have permission to use this command."]
