"""
Command bans, message mutes and the forbidden-word list.

Expiry is lazy. :meth:`ModerationLedger.is_banned` and
:meth:`ModerationLedger.is_muted` are reads with a side effect: when the
stored record has run out, it is deleted and the document rewritten before
the method answers False. Nothing sweeps the ledger in the background.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, List

from roomkeeper.datatypes.moderation_datatypes import BanRecord, LedgerRecord, MuteRecord
from roomkeeper.storage.json_store import JsonStore
from roomkeeper.util.logger import get_logger

logger = get_logger("moderation_ledger")

BANS_DOCUMENT = "banned_commands"
MUTES_DOCUMENT = "muted_messages"
BAD_WORDS_DOCUMENT = "bad_words"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ModerationLedger:
    """
    Time-boxed restrictions plus the bad-word set.

    Args:
        store: Persistent store the three ledger documents live in.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(self, store: JsonStore, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self.clock = clock
        self.bans: Dict[str, BanRecord] = {}
        self.mutes: Dict[str, MuteRecord] = {}
        self.words: List[str] = []

    def load(self) -> None:
        self.bans = self._load_records(BANS_DOCUMENT, BanRecord)
        self.mutes = self._load_records(MUTES_DOCUMENT, MuteRecord)

        data = self.store.load(BAD_WORDS_DOCUMENT)
        words = data.get("words", [])
        self.words = []
        for word in words if isinstance(words, list) else []:
            lowered = str(word).strip().lower()
            if lowered and lowered not in self.words:
                self.words.append(lowered)
        if "words" not in data:
            self._save_words()

        logger.info(
            "[LEDGER] Loaded %d bans, %d mutes, %d bad words",
            len(self.bans), len(self.mutes), len(self.words),
        )

    def _load_records(self, name: str, record_type: type[LedgerRecord]) -> Dict[str, LedgerRecord]:
        data = self.store.load(name)
        users = data.get("users")
        records: Dict[str, LedgerRecord] = {}
        if isinstance(users, dict):
            for user_id, raw in users.items():
                if not isinstance(raw, dict):
                    continue
                try:
                    records[str(user_id)] = record_type.from_dict(raw)
                except (TypeError, ValueError) as exc:
                    logger.warning("[LEDGER] Dropping malformed %s record for %s: %s", name, user_id, exc)
        if not isinstance(users, dict):
            self.store.save(name, {"users": {}})
        return records

    def _save_bans(self) -> None:
        self.store.save(BANS_DOCUMENT, {"users": {uid: r.to_dict() for uid, r in self.bans.items()}})

    def _save_mutes(self) -> None:
        self.store.save(MUTES_DOCUMENT, {"users": {uid: r.to_dict() for uid, r in self.mutes.items()}})

    def _save_words(self) -> None:
        self.store.save(BAD_WORDS_DOCUMENT, {"words": list(self.words)})

    # ========== Bans ==========

    def is_banned(self, user_id: str) -> bool:
        """
        Return True if the user currently holds a command ban.

        An expired ban is removed and the ban document rewritten as part of
        this call.
        """
        record = self.bans.get(user_id)
        if record is None:
            return False
        if record.is_expired(self.clock()):
            del self.bans[user_id]
            self._save_bans()
            logger.info("[LEDGER] Command ban for %s expired", user_id)
            return False
        return True

    def ban(self, user_id: str, duration_minutes: float | None = None) -> BanRecord:
        """Ban a user from commands; ``None`` duration means permanent."""
        record = BanRecord(active=True, issued_at=self.clock(), duration_minutes=duration_minutes)
        self.bans[user_id] = record
        self._save_bans()
        return record

    def unban(self, user_id: str) -> bool:
        if self.bans.pop(user_id, None) is None:
            return False
        self._save_bans()
        return True

    # ========== Mutes ==========

    def is_muted(self, user_id: str) -> bool:
        """
        Return True if the user is currently muted.

        An expired mute is removed and the mute document rewritten as part of
        this call.
        """
        record = self.mutes.get(user_id)
        if record is None:
            return False
        if record.is_expired(self.clock()):
            del self.mutes[user_id]
            self._save_mutes()
            logger.info("[LEDGER] Mute for %s expired", user_id)
            return False
        return True

    def mute(self, user_id: str, duration_minutes: float) -> MuteRecord:
        """
        Mute a user for ``duration_minutes``.

        Raises:
            ValueError: If the duration is not positive; mutes are never permanent.
        """
        if duration_minutes is None or duration_minutes <= 0:
            raise ValueError("Mute duration must be a positive number of minutes")
        record = MuteRecord(active=True, issued_at=self.clock(), duration_minutes=duration_minutes)
        self.mutes[user_id] = record
        self._save_mutes()
        return record

    def unmute(self, user_id: str) -> bool:
        if self.mutes.pop(user_id, None) is None:
            return False
        self._save_mutes()
        return True

    # ========== Bad words ==========

    @property
    def bad_words(self) -> List[str]:
        return sorted(self.words)

    def add_bad_word(self, word: str) -> bool:
        """Add a word (stored lowercase). Returns False for duplicates or blanks."""
        lowered = word.strip().lower()
        if not lowered or lowered in self.words:
            return False
        self.words.append(lowered)
        self._save_words()
        return True

    def remove_bad_word(self, word: str) -> bool:
        """Remove a word. Returns False if it was not in the list."""
        lowered = word.strip().lower()
        if lowered not in self.words:
            return False
        self.words.remove(lowered)
        self._save_words()
        return True

    def contains_bad_word(self, text: str) -> bool:
        """Case-insensitive substring scan; stops at the first hit."""
        lowered = text.lower()
        return any(word in lowered for word in self.words)
