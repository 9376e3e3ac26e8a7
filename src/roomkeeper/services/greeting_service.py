"""
Join greetings and the last-seen map behind them.

The map is ``user id -> ISO timestamp`` of the most recent join. A user with
an entry gets the returning greeting (username, then when they were last
seen); a user without one gets the first-time greeting. The map is updated on
every join of a non-bot user, whether or not greetings are enabled.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict

from roomkeeper.datatypes.moderation_datatypes import format_timestamp, parse_timestamp
from roomkeeper.datatypes.room_datatypes import RoomUser
from roomkeeper.storage.json_store import JsonStore
from roomkeeper.util.format_utils import fill_template, humanize_timestamp
from roomkeeper.util.logger import get_logger

logger = get_logger("greeting_service")

LAST_SEEN_DOCUMENT = "user_last_seen"


class GreetingService:
    """
    Args:
        store: Store holding the last-seen document.
        greeting: Template for returning users, ``{}`` filled with username then time.
        first_time_greeting: Template for new users, ``{}`` filled with username.
        enabled: When False, :meth:`on_join` only records the visit.
        clock: Aware-datetime source, injectable for tests.
    """

    def __init__(
        self,
        store: JsonStore,
        greeting: str,
        first_time_greeting: str,
        enabled: bool = True,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.greeting = greeting
        self.first_time_greeting = first_time_greeting
        self.enabled = enabled
        self.clock = clock
        self.last_seen: Dict[str, str] = {}

    def load(self) -> None:
        data = self.store.load(LAST_SEEN_DOCUMENT)
        self.last_seen = {str(k): str(v) for k, v in data.items()}
        logger.info("[GREETER] Loaded last-seen entries for %d users", len(self.last_seen))

    def greeting_for(self, user: RoomUser) -> str:
        previous = self.last_seen.get(user.id)
        if previous:
            try:
                seen = humanize_timestamp(parse_timestamp(previous))
            except ValueError:
                seen = previous
            return fill_template(self.greeting, user.username, seen)
        return fill_template(self.first_time_greeting, user.username)

    def on_join(self, user: RoomUser) -> str | None:
        """
        Record the visit and return the greeting to post, if any.

        The greeting is computed from the state before this visit is recorded.
        """
        message = self.greeting_for(user) if self.enabled else None
        self.last_seen[user.id] = format_timestamp(self.clock())
        self.store.save(LAST_SEEN_DOCUMENT, dict(self.last_seen))
        return message
