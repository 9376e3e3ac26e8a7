"""
Background tasks that run alongside the event stream.

- **emote_loop_scheduler.py**: One repeating emote task per user. Starting a
  new loop cancels the old one; presence loss or a failed emote ends it.

- **auto_emote_scheduler.py**: Periodic random emotes for the bot's own avatar.
"""
