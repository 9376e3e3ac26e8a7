"""
Configuration management for Room Keeper.

- **app_configuration.py**: fcntl-locked YAML loader for global settings:
  command prefix, data files, feature flags, presets, emotes, command rule
  overrides and moderation/movement thresholds. Falls back to defaults on a
  missing or malformed file.

- **ai_settings.py**: Typed view over the ``ai_settings`` section used by the
  completion client.
"""
