"""
Plain value types describing users, positions and items inside a room.

These types are independent of the Highrise SDK models so the command engine
can be driven by any :class:`~roomkeeper.bot.room_bridge.RoomBridge`
implementation (including the in-memory fake used by the tests).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping

DEFAULT_FACING = "FrontRight"
DEFAULT_EMOTE_DURATION_MS = 3000


class Channel(Enum):
    """Chat channel an incoming message arrived on."""

    PUBLIC = "public"
    DM = "dm"
    WHISPER = "whisper"


@dataclass(frozen=True)
class RoomUser:
    """A user as reported by the room: opaque id plus display name."""

    id: str
    username: str

    @property
    def mention(self) -> str:
        return f"@{self.username}"


@dataclass(frozen=True)
class Pose:
    """
    A point in the room plus the direction the avatar faces.

    Serialized as ``{"x", "y", "z", "facing"}``, the shape used by every
    persisted position document (bot anchor, frozen users, presets).
    """

    x: float
    y: float
    z: float
    facing: str = DEFAULT_FACING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pose":
        """
        Build a pose from a JSON mapping.

        Raises:
            KeyError: If one of the coordinates is missing.
            ValueError: If a coordinate is not numeric.
        """
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            z=float(data["z"]),
            facing=str(data.get("facing") or DEFAULT_FACING),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "z": self.z, "facing": self.facing}

    def deviates_from(self, other: "Pose", tolerance: float) -> bool:
        """Return True if any axis differs from ``other`` by more than ``tolerance``."""
        return (
            abs(self.x - other.x) > tolerance
            or abs(self.y - other.y) > tolerance
            or abs(self.z - other.z) > tolerance
        )

    def distance_to(self, other: "Pose") -> float:
        """Euclidean distance between the two points, facing ignored."""
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )

    def describe(self) -> str:
        return f"{self.x:.2f},{self.y:.2f},{self.z:.2f}"


@dataclass
class OutfitItem:
    """One clothing or body item worn by an avatar."""

    type: str
    id: str
    amount: int = 1
    account_bound: bool = False
    active_palette: int = 0


@dataclass(frozen=True)
class EmoteDefinition:
    """
    A named emote the bot knows how to trigger.

    Attributes:
        name: Lowercase keyword users type (``wave``).
        emote_id: Platform emote identifier (``emote-wave``).
        duration_ms: Loop interval when the emote is repeated.
        role: Minimum role name required to trigger it without a prefix.
    """

    name: str
    emote_id: str
    duration_ms: int = DEFAULT_EMOTE_DURATION_MS
    role: str = "basic"

    @property
    def interval_seconds(self) -> float:
        return self.duration_ms / 1000.0


@dataclass
class RoomSnapshot:
    """Roster entries returned by a bridge: user paired with last known pose."""

    players: list[tuple[RoomUser, Pose | None]] = field(default_factory=list)

    def find_by_username(self, username: str) -> RoomUser | None:
        wanted = username.lower().lstrip("@")
        for user, _ in self.players:
            if user.username.lower() == wanted:
                return user
        return None

    def find_by_id(self, user_id: str) -> tuple[RoomUser, Pose | None] | None:
        for user, pose in self.players:
            if user.id == user_id:
                return user, pose
        return None
