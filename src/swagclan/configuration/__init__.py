"""
Configuration management for SwagClan.

- **app_configuration.py**: YAML loader for global settings: where guild
  settings and guild storage files live, the per-guild storage byte limit and
  the longest accepted collection/item name. Falls back to defaults on a
  missing or malformed config file.
"""
