"""
Typed per-guild settings.

- **setting_types.py**: the closed set of value kinds (prefix, boolean, channel).
- **setting_definitions.py**: static metadata for each configurable setting.
- **guild_settings.py**: live values for one guild and their change history.
- **settings_service.py**: lazy load-or-create registry of guild settings files.
"""
