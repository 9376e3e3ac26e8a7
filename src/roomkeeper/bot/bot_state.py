"""
Shared runtime state for one bot session.

Everything the router and command handlers touch is reachable from a single
:class:`AppState` built at startup and passed by reference. Nothing in the
package keeps mutable state at module level.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict

from roomkeeper.ai.completion_client import CompletionClient
from roomkeeper.bot.commands import build_command_table
from roomkeeper.bot.responder import Responder
from roomkeeper.bot.room_bridge import RoomBridge
from roomkeeper.configuration.app_configuration import AppConfig
from roomkeeper.datatypes.command_datatypes import CommandDescriptor
from roomkeeper.datatypes.room_datatypes import EmoteDefinition, Pose
from roomkeeper.moderation.authorization import AuthorizationPolicy
from roomkeeper.moderation.moderation_ledger import ModerationLedger, utc_now
from roomkeeper.permissions.permission_registry import PermissionRegistry
from roomkeeper.positions.bot_anchor import BotAnchor
from roomkeeper.positions.frozen_positions import FrozenPositions
from roomkeeper.positions.position_guard import PositionGuard
from roomkeeper.scheduler.auto_emote_scheduler import AutoEmoteScheduler
from roomkeeper.scheduler.emote_loop_scheduler import EmoteLoopScheduler
from roomkeeper.services.greeting_service import GreetingService
from roomkeeper.storage.json_store import JsonStore
from roomkeeper.util.logger import get_logger

logger = get_logger("bot_state")


@dataclass
class AppState:
    config: AppConfig
    bridge: RoomBridge
    store: JsonStore
    permissions: PermissionRegistry
    ledger: ModerationLedger
    frozen: FrozenPositions
    anchor: BotAnchor
    guard: PositionGuard
    greeter: GreetingService
    emote_loops: EmoteLoopScheduler
    auto_emote: AutoEmoteScheduler
    completion: CompletionClient
    responder: Responder
    commands: Dict[str, CommandDescriptor]
    policy: AuthorizationPolicy
    emotes: Dict[str, EmoteDefinition]
    presets: Dict[str, Pose]

    @property
    def prefix(self) -> str:
        return self.config.command_prefix

    @property
    def bot_user_id(self) -> str:
        return self.bridge.bot_user_id

    def load(self) -> None:
        """Read every persisted document, writing back defaults where missing."""
        self.permissions.load()
        self.ledger.load()
        self.frozen.load()
        self.anchor.load()
        self.greeter.load()

    async def shutdown(self) -> None:
        await self.emote_loops.shutdown()
        await self.auto_emote.shutdown()
        await self.completion.close()


def build_app_state(
    config: AppConfig,
    bridge: RoomBridge,
    completion: CompletionClient | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> AppState:
    """
    Wire every component from configuration. Persisted documents are not read
    until :meth:`AppState.load` is called.
    """
    store = JsonStore(config.data_dir, config.data_files)
    permissions = PermissionRegistry(store)
    ledger = ModerationLedger(store, clock=clock)
    frozen = FrozenPositions(store)
    emotes = config.emote_definitions
    messages = config.messages

    commands = build_command_table()
    policy = AuthorizationPolicy({name: d.rule for name, d in commands.items()}, permissions.role_of)
    policy.apply_overrides(config.command_overrides)

    state = AppState(
        config=config,
        bridge=bridge,
        store=store,
        permissions=permissions,
        ledger=ledger,
        frozen=frozen,
        anchor=BotAnchor(store, config.default_bot_location),
        guard=PositionGuard(
            bridge,
            frozen,
            y_threshold=config.movement_y_threshold,
            max_distance=config.movement_max_distance,
            enabled=config.movement_guard_enabled,
        ),
        greeter=GreetingService(
            store,
            greeting=messages["greeting"],
            first_time_greeting=messages["first_time_greeting"],
            enabled=config.feature_enabled("auto_greeting"),
            clock=clock,
        ),
        emote_loops=EmoteLoopScheduler(bridge),
        auto_emote=AutoEmoteScheduler(
            bridge,
            list(emotes.values()),
            interval_seconds=config.auto_emote_interval_seconds,
            emote_count=config.auto_emote_count,
        ),
        completion=completion or CompletionClient(config.ai_settings),
        responder=Responder(bridge, config.message_limits),
        commands=commands,
        policy=policy,
        emotes=emotes,
        presets=config.teleport_presets,
    )
    logger.info("[BOT STATE] %d commands, %d emotes, %d presets", len(commands), len(emotes), len(state.presets))
    return state
