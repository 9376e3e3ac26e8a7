from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from roomkeeper.configuration.ai_settings import AISettings
from roomkeeper.datatypes.room_datatypes import (
    DEFAULT_EMOTE_DURATION_MS,
    EmoteDefinition,
    Pose,
)
from roomkeeper.util.logger import get_logger

logger = get_logger("app_configuration")


DEFAULT_DATA_FILES: Dict[str, str] = {
    "roles": "roles.json",
    "banned_commands": "bannedCommands.json",
    "muted_messages": "mutedMessages.json",
    "bad_words": "badWords.json",
    "user_last_seen": "userLastSeen.json",
    "bot_location": "botLocation.json",
    "frozen_users": "frozenUsers.json",
}

DEFAULT_MESSAGES: Dict[str, str] = {
    "help_header": "Hi {}! Here are the commands you can use:",
    "help_footer": "Type an emote name in chat to loop it, or '<emote> @user' to emote someone.",
    "mod_header": "Hi {}! Moderator commands:",
    "owner_header": "Owner commands:",
    "emote_list_header": "Available emotes:\n",
    "greeting": "Welcome back @{}! Last seen: {}",
    "first_time_greeting": "Welcome to the room @{}!",
}


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches contents of ``./config/app_config.yml`` and exposes typed
    accessors for every section the bot reads: command prefix, data files,
    feature flags, presets, emotes, command rule overrides and AI settings.
    Uses fcntl file locks for safe concurrent access across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                if not isinstance(data, dict):
                    logger.warning("[APP CONFIGURATION] Config %s is not a mapping; ignoring.", self.config_path)
                    return {}
                return data
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    def _section(self, key: str) -> Dict[str, Any]:
        value = self._data.get(key, {})
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping (shallow reference)."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # Commands and chat
    # --------------------------
    @property
    def command_prefix(self) -> str:
        return str(self._data.get("command_prefix") or "!")

    @property
    def command_overrides(self) -> Dict[str, Dict[str, Any]]:
        """Per-command ``{role, scope}`` overrides keyed by command name (prefix stripped)."""
        overrides: Dict[str, Dict[str, Any]] = {}
        for name, rule in self._section("commands").items():
            if isinstance(rule, dict):
                overrides[str(name).lstrip(self.command_prefix).lower()] = rule
        return overrides

    @property
    def message_limits(self) -> Dict[str, int]:
        """Maximum characters per outgoing message, keyed by channel name."""
        limits = {"public": 120, "dm": 2000, "whisper": 256}
        for key, value in self._section("message_limits").items():
            try:
                limits[str(key)] = int(value)
            except (TypeError, ValueError):
                logger.warning("[APP CONFIGURATION] Ignoring invalid message limit %s=%r", key, value)
        return limits

    @property
    def messages(self) -> Dict[str, str]:
        merged = dict(DEFAULT_MESSAGES)
        merged.update({str(k): str(v) for k, v in self._section("messages").items()})
        return merged

    @property
    def relay_delay_seconds(self) -> float:
        return float(self._data.get("relay_delay_seconds", 1.0))

    @property
    def emote_all_delay_seconds(self) -> float:
        return float(self._data.get("emote_all_delay_seconds", 0.5))

    # --------------------------
    # Storage
    # --------------------------
    @property
    def data_dir(self) -> Path:
        return Path(str(self._data.get("data_dir") or "./data")).resolve()

    @property
    def data_files(self) -> Dict[str, str]:
        files = dict(DEFAULT_DATA_FILES)
        files.update({str(k): str(v) for k, v in self._section("data_files").items()})
        return files

    @property
    def relay_dir(self) -> Path:
        """Directory ``sendfilecontent`` is allowed to read from."""
        return Path(str(self._data.get("relay_dir") or self.data_dir / "relay")).resolve()

    # --------------------------
    # Moderation and movement
    # --------------------------
    @property
    def command_mute_minutes(self) -> float:
        return float(self._section("moderation").get("command_mute_minutes", 15))

    @property
    def room_ban_seconds(self) -> int:
        return int(self._section("moderation").get("room_ban_seconds", 3600))

    @property
    def room_mute_seconds(self) -> int:
        return int(self._section("moderation").get("room_mute_seconds", 3600))

    @property
    def movement_guard_enabled(self) -> bool:
        return bool(self._section("movement_guard").get("enabled", True))

    @property
    def movement_y_threshold(self) -> float:
        return float(self._section("movement_guard").get("y_threshold", 2.0))

    @property
    def movement_max_distance(self) -> float:
        return float(self._section("movement_guard").get("max_distance", 10.0))

    @property
    def default_bot_location(self) -> Pose:
        raw = self._data.get("default_bot_location")
        if isinstance(raw, dict):
            try:
                return Pose.from_dict(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("[APP CONFIGURATION] Invalid default_bot_location: %s", exc)
        return Pose(0.0, 0.0, 0.0)

    @property
    def teleport_presets(self) -> Dict[str, Pose]:
        presets: Dict[str, Pose] = {}
        for name, raw in self._section("teleport_presets").items():
            if not isinstance(raw, dict):
                continue
            try:
                presets[str(name).lower()] = Pose.from_dict(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("[APP CONFIGURATION] Skipping teleport preset %s: %s", name, exc)
        return presets

    @property
    def emote_definitions(self) -> Dict[str, EmoteDefinition]:
        """Known emotes keyed by lowercase keyword; entries without an id are skipped."""
        emotes: Dict[str, EmoteDefinition] = {}
        for name, raw in self._section("emotes").items():
            if isinstance(raw, str):
                raw = {"id": raw}
            if not isinstance(raw, dict) or not raw.get("id"):
                continue
            keyword = str(name).lower()
            emotes[keyword] = EmoteDefinition(
                name=keyword,
                emote_id=str(raw["id"]),
                duration_ms=int(raw.get("duration_ms") or DEFAULT_EMOTE_DURATION_MS),
                role=str(raw.get("role") or "basic"),
            )
        return emotes

    # --------------------------
    # Features
    # --------------------------
    def feature(self, name: str) -> Dict[str, Any]:
        value = self._section("features").get(name, {})
        if isinstance(value, bool):
            return {"enabled": value}
        return value if isinstance(value, dict) else {}

    def feature_enabled(self, name: str) -> bool:
        return bool(self.feature(name).get("enabled", False))

    @property
    def auto_emote_interval_seconds(self) -> float:
        return float(self.feature("auto_emote").get("interval_seconds", 60))

    @property
    def auto_emote_count(self) -> int:
        return int(self.feature("auto_emote").get("emote_count", 3))

    @property
    def ai_settings(self) -> AISettings:
        """Return the AI settings wrapped in an AISettings helper."""
        settings = self._data.get("ai_settings", {})
        if not isinstance(settings, dict):
            settings = {}
        return AISettings(settings)
