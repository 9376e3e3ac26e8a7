"""
Utility functions and helpers for Room Keeper.

- **logger.py**: Centralized logging configuration with colored console output,
  rotating file handlers, and per-session log files. Suppresses noise from the
  Highrise SDK, websocket and HTTP client libraries. Uses prompt_toolkit for
  console output.

- **format_utils.py**: Text helpers for chat: template filling, cropping to a
  channel limit, word wrapping and line packing for multi-part messages.
"""
