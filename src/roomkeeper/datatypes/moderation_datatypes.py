"""
Ledger records for command bans and message mutes.

Both records share the same shape. A record with ``duration_minutes`` set
expires once that many minutes have passed since ``issued_at``; a ban without
a duration is permanent. Mutes always carry a duration.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted); naive values are taken as UTC."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


@dataclass
class LedgerRecord:
    """
    A time-boxed restriction on one user.

    Attributes:
        active: Always True for stored records; kept for document parity.
        issued_at: When the restriction started.
        duration_minutes: Length of the restriction; None means permanent.
    """

    active: bool = True
    issued_at: datetime | None = None
    duration_minutes: float | None = None

    @property
    def is_permanent(self) -> bool:
        return self.duration_minutes is None

    def is_expired(self, now: datetime) -> bool:
        """
        Return True once ``now - issued_at`` reaches the duration.

        Permanent records never expire. A timed record without an issue time
        cannot be aged and is treated as expired.
        """
        if self.duration_minutes is None:
            return False
        if self.issued_at is None:
            return True
        return now - self.issued_at >= timedelta(minutes=self.duration_minutes)

    def expires_at(self) -> datetime | None:
        if self.duration_minutes is None or self.issued_at is None:
            return None
        return self.issued_at + timedelta(minutes=self.duration_minutes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LedgerRecord":
        issued = data.get("issued_at", data.get("timestamp"))
        duration = data.get("duration_minutes")
        return cls(
            active=bool(data.get("active", True)),
            issued_at=parse_timestamp(issued),
            duration_minutes=float(duration) if duration is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        duration: float | int | None = self.duration_minutes
        if duration is not None and float(duration).is_integer():
            duration = int(duration)
        return {
            "active": self.active,
            "issued_at": format_timestamp(self.issued_at) if self.issued_at else None,
            "duration_minutes": duration,
        }


class BanRecord(LedgerRecord):
    """Command ban: the user's messages are ignored by the bot."""


class MuteRecord(LedgerRecord):
    """Message mute: like a ban but always timed."""
