from unittest.mock import MagicMock

import pytest

from roomkeeper.datatypes.permission_datatypes import ChannelScope, CommandRule, DenyReason, Role
from roomkeeper.datatypes.room_datatypes import Channel
from roomkeeper.moderation.authorization import AuthorizationPolicy

RULES = {
    "help": CommandRule(Role.BASIC, ChannelScope.BOTH),
    "k": CommandRule(Role.MOD, ChannelScope.PUBLIC_ONLY),
    "bad": CommandRule(Role.OWNER, ChannelScope.DM_ONLY),
}


def test_wrong_channel_is_rejected_before_role_lookup() -> None:
    role_of = MagicMock(return_value=Role.OWNER)
    policy = AuthorizationPolicy(RULES, role_of)

    decision = policy.authorize("bad", Channel.PUBLIC, "u1")

    assert decision.allowed is False
    assert decision.reason is DenyReason.WRONG_CHANNEL
    assert decision.rule.scope is ChannelScope.DM_ONLY
    role_of.assert_not_called()


def test_whisper_is_never_a_command_channel() -> None:
    policy = AuthorizationPolicy(RULES, lambda _: Role.OWNER)

    assert policy.authorize("help", Channel.WHISPER, "u1").reason is DenyReason.WRONG_CHANNEL


@pytest.mark.parametrize(
    "role, allowed",
    [(Role.BASIC, False), (Role.MOD, True), (Role.OWNER, True)],
)
def test_role_ordering(role: Role, allowed: bool) -> None:
    policy = AuthorizationPolicy(RULES, lambda _: role)

    decision = policy.authorize("k", Channel.PUBLIC, "u1")

    assert decision.allowed is allowed
    if not allowed:
        assert decision.reason is DenyReason.INSUFFICIENT_ROLE


def test_unknown_command_raises() -> None:
    policy = AuthorizationPolicy(RULES, lambda _: Role.OWNER)

    with pytest.raises(KeyError):
        policy.authorize("nope", Channel.PUBLIC, "u1")


def test_overrides_replace_role_and_scope() -> None:
    policy = AuthorizationPolicy(RULES, lambda _: Role.BASIC)

    policy.apply_overrides({
        "k": {"role": "basic"},
        "help": {"scope": "dm"},
        "missing": {"role": "mod"},
        "bad": {"role": "emperor"},
    })

    assert policy.rule_for("k") == CommandRule(Role.BASIC, ChannelScope.PUBLIC_ONLY)
    assert policy.rule_for("help") == CommandRule(Role.BASIC, ChannelScope.DM_ONLY)
    assert policy.rule_for("bad") == RULES["bad"]
    assert policy.rule_for("missing") is None
    assert policy.authorize("k", Channel.PUBLIC, "u1").allowed is True
