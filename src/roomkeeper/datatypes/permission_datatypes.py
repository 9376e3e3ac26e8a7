"""
Roles, channel scopes and authorization outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from roomkeeper.datatypes.room_datatypes import Channel


class Role(IntEnum):
    """User role, totally ordered for authorization: basic < mod < owner."""

    BASIC = 0
    MOD = 1
    OWNER = 2

    @classmethod
    def parse(cls, value: "str | Role | None", default: "Role | None" = None) -> "Role":
        """
        Parse a role from configuration text (``"basic"``, ``"mod"``, ``"owner"``).

        Args:
            value: Raw value, already a Role, or None.
            default: Returned when ``value`` is None.

        Raises:
            ValueError: If the text does not name a role and no default applies.
        """
        if isinstance(value, Role):
            return value
        if value is None:
            if default is None:
                raise ValueError("Role value is required")
            return default
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown role: {value!r}") from None

    @property
    def label(self) -> str:
        return self.name.lower()


class ChannelScope(Enum):
    """Channels a command may be issued from."""

    PUBLIC_ONLY = "public"
    DM_ONLY = "dm"
    BOTH = "both"

    @classmethod
    def parse(cls, value: "str | ChannelScope") -> "ChannelScope":
        if isinstance(value, ChannelScope):
            return value
        normalized = str(value).strip().lower()
        for scope in cls:
            if scope.value == normalized:
                return scope
        raise ValueError(f"Unknown channel scope: {value!r}")

    def allows(self, channel: Channel) -> bool:
        if channel is Channel.WHISPER:
            return False
        if self is ChannelScope.BOTH:
            return True
        if self is ChannelScope.PUBLIC_ONLY:
            return channel is Channel.PUBLIC
        return channel is Channel.DM

    @property
    def description(self) -> str:
        if self is ChannelScope.PUBLIC_ONLY:
            return "public chat"
        if self is ChannelScope.DM_ONLY:
            return "DM"
        return "DM or public chat"


@dataclass(frozen=True)
class CommandRule:
    """Static authorization data for one command."""

    required_role: Role = Role.BASIC
    scope: ChannelScope = ChannelScope.BOTH


class DenyReason(Enum):
    WRONG_CHANNEL = "wrong_channel"
    INSUFFICIENT_ROLE = "insufficient_role"


@dataclass(frozen=True)
class AuthDecision:
    """Result of :meth:`AuthorizationPolicy.authorize`."""

    allowed: bool
    reason: DenyReason | None = None
    rule: CommandRule | None = None

    @classmethod
    def allow(cls, rule: CommandRule) -> "AuthDecision":
        return cls(allowed=True, rule=rule)

    @classmethod
    def deny(cls, reason: DenyReason, rule: CommandRule) -> "AuthDecision":
        return cls(allowed=False, reason=reason, rule=rule)


class RoleChange(Enum):
    """Outcome of a permission registry mutation."""

    CHANGED = "changed"
    ALREADY = "already"
    NOT_HELD = "not_held"
    PROTECTED = "protected"
    SELF = "self"
