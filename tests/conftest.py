"""
Pytest configuration and fixtures for Room Keeper tests.
"""

import sys
from pathlib import Path
from typing import Dict, List, Tuple

import pytest
import yaml

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from roomkeeper.bot.room_bridge import RoomActionError, RoomBridge  # noqa: E402
from roomkeeper.datatypes.room_datatypes import OutfitItem, Pose, RoomSnapshot, RoomUser  # noqa: E402

BOT_ID = "bot-id"
OWNER_ID = "owner-id"
MOD_ID = "mod-id"


class FakeRoomBridge(RoomBridge):
    """In-memory room that records every action it is asked to perform."""

    def __init__(self) -> None:
        self.bot_user_id = BOT_ID
        self.players: Dict[str, Tuple[RoomUser, Pose | None]] = {}
        self.public: List[str] = []
        self.direct: List[Tuple[str, str]] = []
        self.whispers: List[Tuple[str, str]] = []
        self.teleports: List[Tuple[str, Pose]] = []
        self.walks: List[Pose] = []
        self.emotes: List[Tuple[str, str]] = []
        self.moderation: List[Tuple[str, str, int | None]] = []
        self.outfits: Dict[str, List[OutfitItem]] = {}
        self.outfit_changes: List[List[OutfitItem]] = []
        self.colors: List[Tuple[str, int]] = []
        self.purchases: List[Tuple[str, int]] = []
        self.purchase_result = "success"
        self.conversations: Dict[str, str] = {}
        self.invites: List[str] = []
        self.failing: set[str] = set()

    def add_user(self, user_id: str, username: str, pose: Pose | None = None) -> RoomUser:
        user = RoomUser(user_id, username)
        self.players[user_id] = (user, pose if pose is not None else Pose(1.0, 0.0, 1.0))
        return user

    def remove_user(self, user_id: str) -> None:
        self.players.pop(user_id, None)

    def _check(self, action: str) -> None:
        if action in self.failing:
            raise RoomActionError(f"{action} failed")

    async def send_public(self, text: str) -> None:
        self._check("send_public")
        self.public.append(text)

    async def send_direct(self, conversation_id: str, text: str) -> None:
        self._check("send_direct")
        self.direct.append((conversation_id, text))

    async def send_whisper(self, user_id: str, text: str) -> None:
        self._check("send_whisper")
        self.whispers.append((user_id, text))

    async def teleport(self, user_id: str, pose: Pose) -> None:
        self._check("teleport")
        self.teleports.append((user_id, pose))

    async def walk(self, pose: Pose) -> None:
        self._check("walk")
        self.walks.append(pose)

    async def emote(self, user_id: str, emote_id: str) -> None:
        self._check("emote")
        self.emotes.append((user_id, emote_id))

    async def kick(self, user_id: str) -> None:
        self._check("kick")
        self.moderation.append(("kick", user_id, None))

    async def ban(self, user_id: str, duration_seconds: int) -> None:
        self._check("ban")
        self.moderation.append(("ban", user_id, duration_seconds))

    async def mute(self, user_id: str, duration_seconds: int) -> None:
        self._check("mute")
        self.moderation.append(("mute", user_id, duration_seconds))

    async def get_outfit(self, user_id: str) -> List[OutfitItem]:
        self._check("get_outfit")
        return [OutfitItem(**vars(item)) for item in self.outfits.get(user_id, [])]

    async def change_outfit(self, items: List[OutfitItem]) -> None:
        self._check("change_outfit")
        self.outfit_changes.append(list(items))

    async def change_outfit_color(self, part: str, palette_index: int) -> None:
        self._check("change_outfit_color")
        self.colors.append((part, palette_index))

    async def purchase(self, kind: str, amount: int) -> str:
        self._check("purchase")
        self.purchases.append((kind, amount))
        return self.purchase_result

    async def direct_conversations(self) -> Dict[str, str]:
        self._check("direct_conversations")
        return dict(self.conversations)

    async def send_invite(self, conversation_id: str) -> None:
        self._check("send_invite")
        self.invites.append(conversation_id)

    async def room_snapshot(self) -> RoomSnapshot:
        self._check("room_snapshot")
        return RoomSnapshot(players=list(self.players.values()))


class StubCompletion:
    """Completion client stand-in returning a canned answer."""

    def __init__(self, answer: str = "AI says hi") -> None:
        self.answer = answer
        self.prompts: List[str] = []

    @property
    def available(self) -> bool:
        return True

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer

    async def close(self) -> None:
        return None


def write_config(path: Path, data_dir: Path, **overrides) -> Path:
    payload = {
        "command_prefix": "!",
        "data_dir": str(data_dir),
        "relay_dir": str(data_dir / "relay"),
        "relay_delay_seconds": 0,
        "emote_all_delay_seconds": 0,
        "default_bot_location": {"x": 5, "y": 0, "z": 5, "facing": "FrontLeft"},
        "teleport_presets": {
            "f1": {"x": 1, "y": 0, "z": 1},
            "f2": {"x": 2, "y": 5, "z": 2},
            "vip": {"x": 9, "y": 10, "z": 9},
            "t1": {"x": 3, "y": 0, "z": 3},
        },
        "emotes": {
            "wave": {"id": "emote-wave", "duration_ms": 2700},
            "kiss": "emote-kiss",
            "tele": {"id": "emote-teleporting", "role": "mod"},
        },
        "features": {
            "auto_greeting": True,
            "long_message_send": True,
            "file_content_send": True,
            "ai_reply_in_dms": True,
            "ai_reply_in_whispers": False,
        },
    }
    payload.update(overrides)
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture()
def bridge() -> FakeRoomBridge:
    return FakeRoomBridge()


@pytest.fixture()
def app_config(tmp_path: Path):
    from roomkeeper.configuration.app_configuration import AppConfig

    return AppConfig(write_config(tmp_path / "app_config.yml", tmp_path / "data"))


@pytest.fixture()
def completion() -> StubCompletion:
    return StubCompletion()


@pytest.fixture()
def app_state(app_config, bridge: FakeRoomBridge, completion: StubCompletion):
    """Fully wired state with one owner, one mod and both present in the room."""
    from roomkeeper.bot.bot_state import build_app_state

    state = build_app_state(app_config, bridge, completion=completion)
    state.load()
    state.permissions.grant_owner(OWNER_ID)
    state.permissions.promote(MOD_ID)
    bridge.add_user(BOT_ID, "keeper", Pose(5.0, 0.0, 5.0))
    bridge.add_user(OWNER_ID, "boss", Pose(2.0, 0.0, 2.0))
    bridge.add_user(MOD_ID, "helper", Pose(3.0, 0.0, 3.0))
    return state
