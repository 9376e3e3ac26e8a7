"""
Scope and role gate applied to every prefixed command.

The policy is a static table lookup followed by two comparisons. The channel
is checked first, so a command typed in the wrong place is rejected before the
sender's role is ever looked up and the reply can say exactly why it failed.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from roomkeeper.datatypes.permission_datatypes import (
    AuthDecision,
    ChannelScope,
    CommandRule,
    DenyReason,
    Role,
)
from roomkeeper.datatypes.room_datatypes import Channel
from roomkeeper.util.logger import get_logger

logger = get_logger("authorization")


class AuthorizationPolicy:
    """
    Decide whether a user may run a command on a given channel.

    Args:
        rules: Command name to rule mapping.
        role_of: Callable resolving a user id to a :class:`Role`.
    """

    def __init__(self, rules: Mapping[str, CommandRule], role_of: Callable[[str], Role]) -> None:
        self.rules: Dict[str, CommandRule] = dict(rules)
        self.role_of = role_of

    def rule_for(self, command: str) -> CommandRule | None:
        return self.rules.get(command)

    def authorize(self, command: str, channel: Channel, user_id: str) -> AuthDecision:
        """
        Check channel scope, then required role.

        Raises:
            KeyError: If ``command`` has no rule; callers route unknown commands first.
        """
        rule = self.rules[command]
        if not rule.scope.allows(channel):
            return AuthDecision.deny(DenyReason.WRONG_CHANNEL, rule)
        if self.role_of(user_id) < rule.required_role:
            return AuthDecision.deny(DenyReason.INSUFFICIENT_ROLE, rule)
        return AuthDecision.allow(rule)

    def apply_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> None:
        """
        Replace role and/or scope of known commands from configuration.

        Overrides for commands without a rule are logged and ignored, as are
        unparseable values.
        """
        for name, raw in overrides.items():
            current = self.rules.get(name)
            if current is None:
                logger.warning("[AUTHORIZATION] Override for unknown command '%s' ignored", name)
                continue
            try:
                role = Role.parse(raw.get("role"), default=current.required_role)
                scope = ChannelScope.parse(raw.get("scope", current.scope))
            except ValueError as exc:
                logger.warning("[AUTHORIZATION] Invalid override for '%s': %s", name, exc)
                continue
            self.rules[name] = CommandRule(required_role=role, scope=scope)
