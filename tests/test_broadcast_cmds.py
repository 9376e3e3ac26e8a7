import pytest

from roomkeeper.bot.command_router import CommandRouter
from roomkeeper.datatypes.room_datatypes import RoomUser

from conftest import MOD_ID, OWNER_ID

HELPER = RoomUser(MOD_ID, "helper")
BOSS = RoomUser(OWNER_ID, "boss")


@pytest.fixture()
def router(app_state) -> CommandRouter:
    return CommandRouter(app_state)


@pytest.fixture()
def relay_dir(app_state):
    path = app_state.config.relay_dir
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.mark.asyncio
async def test_longsay_relays_word_wrapped_chunks(router, bridge) -> None:
    text = " ".join(["word"] * 50)

    await router.handle_public(HELPER, f"!longsay {text}")

    assert len(bridge.public) == 3
    assert all(len(chunk) <= 120 for chunk in bridge.public)
    assert " ".join(bridge.public) == text


@pytest.mark.asyncio
async def test_longsay_disabled(router, app_state, bridge) -> None:
    app_state.config.data["features"]["long_message_send"] = False

    await router.handle_public(HELPER, "!longsay hello")

    assert bridge.public == ["@helper The !longsay feature is currently disabled."]


@pytest.mark.asyncio
async def test_sendfilecontent_relays_file(router, bridge, relay_dir) -> None:
    (relay_dir / "notes.txt").write_text("hello from the relay folder", encoding="utf-8")

    await router.handle_public(BOSS, "!sendfilecontent notes.txt")
    await router.handle_direct(OWNER_ID, "c1", "!sendfilecontent notes.txt")

    assert bridge.public == ["hello from the relay folder"]
    assert bridge.direct == [("c1", "hello from the relay folder")]


@pytest.mark.asyncio
async def test_sendfilecontent_missing_or_empty(router, bridge, relay_dir) -> None:
    (relay_dir / "empty.txt").write_text("  \n", encoding="utf-8")

    await router.handle_public(BOSS, "!sendfilecontent missing.txt")
    await router.handle_public(BOSS, "!sendfilecontent empty.txt")

    assert bridge.public == [
        "@boss File 'missing.txt' not found in relay folder.",
        "@boss File 'empty.txt' is empty.",
    ]


@pytest.mark.asyncio
async def test_sendfilecontent_stays_inside_relay_folder(router, app_state, bridge, relay_dir) -> None:
    (relay_dir.parent / "secret.txt").write_text("do not share", encoding="utf-8")

    await router.handle_public(BOSS, "!sendfilecontent ../secret.txt")

    assert bridge.public == ["@boss File '../secret.txt' not found in relay folder."]


@pytest.mark.asyncio
async def test_sendfilecontent_disabled(router, app_state, bridge) -> None:
    app_state.config.data["features"]["file_content_send"] = False

    await router.handle_public(BOSS, "!sendfilecontent notes.txt")

    assert bridge.public == ["@boss The !sendfilecontent feature is currently disabled."]


@pytest.mark.asyncio
async def test_invite_uses_existing_conversations(router, bridge) -> None:
    bridge.add_user("alice-id", "alice")
    bridge.add_user("carol-id", "carol")
    bridge.conversations = {"alice-id": "conv-a", "gone-id": "conv-g"}

    await router.handle_public(HELPER, "!invite")

    assert bridge.invites == ["conv-a"]
    assert bridge.public == [
        "@helper Attempted to send invites via DM to 1 users who have previously messaged the bot."
    ]
