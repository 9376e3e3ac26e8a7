"""
Moderation state and command gating.

- **moderation_ledger.py**: Command bans, message mutes and forbidden words.
- **authorization.py**: Per-command role and channel scope policy.
"""
